"""
Process settings for bitbench.

Values come from the environment (prefix BITBENCH_) or a local .env file.

Usage:
    from bitbench.config import settings

    print(settings.HOSTS)
"""

from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="BITBENCH_",
        env_file=".env",
        extra="ignore",
    )

    # Target store
    HOSTS: List[str] = Field(default_factory=lambda: ["http://localhost:10101"])
    REQUEST_TIMEOUT_SECONDS: float = 30.0
    SLICE_WIDTH: int = 1048576

    # Benchmark defaults
    DEFAULT_INDEX: str = "benchindex"
    DEFAULT_FRAME: str = "testframe"
    IMPORT_BUFFER_SIZE: int = 10_000_000

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = None


settings = Settings()
