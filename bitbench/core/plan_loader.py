"""
Benchmark Plan Loader

Loads YAML benchmark plans and converts them into validated configurations.

Example plan:

    name: nightly
    agents: 4
    benchmarks:
      - type: import
        max-bitmap-id: 1000
        agent-controls: height
      - type: random-query
        iterations: 100

Keys may use dashes or underscores.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from bitbench.core.errors import ConfigurationError
from bitbench.models.benchmark_config import AnyBenchmarkConfig, BenchmarkType


class BenchmarkPlan(BaseModel):
    """A named sequence of benchmarks run against the same hosts."""

    name: str = Field("bitbench", description="Plan name")
    description: str = Field("", description="Free-form description")
    agents: int = Field(1, ge=1, description="Concurrent agents per benchmark")
    hosts: List[str] = Field(default_factory=list, description="Overrides settings.HOSTS")
    benchmarks: List[AnyBenchmarkConfig] = Field(default_factory=list)


_benchmark_adapter: TypeAdapter = TypeAdapter(AnyBenchmarkConfig)


def _normalize_keys(data: Any) -> Any:
    """Turn dashed keys into underscores, recursively."""
    if isinstance(data, dict):
        return {str(k).replace("-", "_"): _normalize_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_normalize_keys(v) for v in data]
    return data


def parse_benchmark(data: Dict[str, Any]) -> AnyBenchmarkConfig:
    """
    Validate one benchmark entry.

    Raises:
        ConfigurationError: missing/unknown type or invalid fields
    """
    entry = _normalize_keys(dict(data))
    benchmark_type = entry.get("type")
    valid = [t.value for t in BenchmarkType]
    if benchmark_type not in valid:
        raise ConfigurationError(
            f"Unknown benchmark type: {benchmark_type!r} (expected one of {valid})"
        )
    try:
        return _benchmark_adapter.validate_python(entry)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {benchmark_type} benchmark: {e}") from e


def parse_plan(data: Optional[Dict[str, Any]]) -> BenchmarkPlan:
    """Validate a plan mapping (as loaded from YAML)."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Benchmark plan must be a mapping")

    entries = data.get("benchmarks") or []
    if not isinstance(entries, list):
        raise ConfigurationError("'benchmarks' must be a list")
    benchmarks = [parse_benchmark(entry) for entry in entries]

    header = _normalize_keys({k: v for k, v in data.items() if k != "benchmarks"})
    try:
        return BenchmarkPlan(**header, benchmarks=benchmarks)
    except (ValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid benchmark plan: {e}") from e


def load_plan(path: Union[str, Path]) -> BenchmarkPlan:
    """
    Load a plan from a YAML file.

    Raises:
        ConfigurationError: unreadable file or invalid contents
    """
    plan_file = Path(path)
    try:
        with open(plan_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read plan {plan_file}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {plan_file}: {e}") from e
    return parse_plan(data)
