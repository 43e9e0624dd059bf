"""
Benchmark Configuration Models

Defines Pydantic models for the benchmark variants:
- Query: one fixed query string, repeated
- BasicQuery: one query template whose row ids advance every iteration
- RandomQuery: randomly generated query trees
- Import: generated CSV dataset pushed through the bulk import path
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from bitbench.config import settings
from bitbench.core.errors import ConfigurationError
from bitbench.core.partitioning import AgentControls


class BenchmarkType(str, Enum):
    """Supported benchmark variants."""

    QUERY = "query"
    BASIC_QUERY = "basic-query"
    RANDOM_QUERY = "random-query"
    IMPORT = "import"


class BenchmarkConfig(BaseModel):
    """Fields shared by every benchmark."""

    name: Optional[str] = Field(None, description="Display name for reports")
    iterations: int = Field(1, ge=0, description="Number of submissions")
    index: str = Field(
        default_factory=lambda: settings.DEFAULT_INDEX,
        description="Target index",
    )


class QueryConfig(BenchmarkConfig):
    """Runs a fixed query string `iterations` times."""

    type: Literal["query"] = "query"
    query: str = Field(..., min_length=1, description="Raw PQL query")


class BasicQueryConfig(BenchmarkConfig):
    """
    Runs `query` over `num_args` Bitmap calls, advancing the row id each
    iteration.
    """

    type: Literal["basic-query"] = "basic-query"
    base_row_id: int = Field(0, ge=0, description="Row id of the first iteration")
    num_args: int = Field(2, ge=1, description="Bitmap calls per query")
    query: str = Field("Intersect", min_length=1, description="Outer operation name")
    frame: str = Field(
        default_factory=lambda: settings.DEFAULT_FRAME, description="Frame to read"
    )


class RandomQueryConfig(BenchmarkConfig):
    """Runs randomly generated query trees."""

    type: Literal["random-query"] = "random-query"
    max_depth: int = Field(4, ge=0, description="Maximum nesting depth")
    max_args: int = Field(4, ge=0, description="Maximum children per set operation")
    max_n: int = Field(100, ge=2, description="Upper bound for TopN n")
    base_bitmap_id: int = Field(0, ge=0, description="Lowest row id queried")
    bitmap_id_range: int = Field(100000, ge=0, description="Width of the row id range")
    seed: int = Field(1, description="Generator seed (offset by agent number)")
    frames: List[str] = Field(
        default_factory=lambda: ["fbench"], min_length=1, description="Frames for TopN"
    )


class ImportConfig(BenchmarkConfig):
    """Generates an import file and imports it through the bulk interface."""

    type: Literal["import"] = "import"
    base_bitmap_id: int = Field(0, description="Bits are set at or above this row id")
    max_bitmap_id: int = Field(1000, description="Bits are set below this row id")
    base_profile_id: int = Field(0, description="Profile id to start from")
    max_profile_id: int = Field(1000, description="Profile ids stay below this")
    random_bitmap_order: bool = Field(
        False, description="Do not sort the file by bitmap id"
    )
    min_bits_per_map: int = Field(0, ge=0, description="Minimum bits per bitmap")
    max_bits_per_map: int = Field(10, ge=0, description="Maximum bits per bitmap")
    agent_controls: str = Field(
        "", description="'height', 'width' or '' (see partitioning)"
    )
    seed: int = Field(0, description="Generator seed (offset by agent number)")
    frame: str = Field(
        default_factory=lambda: settings.DEFAULT_FRAME, description="Frame to import into"
    )
    buffer_size: int = Field(
        default_factory=lambda: settings.IMPORT_BUFFER_SIZE,
        ge=1,
        description="Bits buffered per import batch",
    )

    @field_validator("agent_controls")
    @classmethod
    def validate_agent_controls(cls, v):
        """Reject unknown agent-controls modes when the plan is parsed."""
        try:
            return AgentControls.parse(v).value
        except ConfigurationError as e:
            raise ValueError(str(e)) from None


AnyBenchmarkConfig = Annotated[
    Union[QueryConfig, BasicQueryConfig, RandomQueryConfig, ImportConfig],
    Field(discriminator="type"),
]
