"""
Data models for bitbench.

This package contains:
- Benchmark configurations (query, basic-query, random-query, import)
- Run results and latency percentiles
"""

from bitbench.models.benchmark_config import (
    AnyBenchmarkConfig,
    BasicQueryConfig,
    BenchmarkConfig,
    BenchmarkType,
    ImportConfig,
    QueryConfig,
    RandomQueryConfig,
)

from bitbench.models.results import (
    BenchmarkStatus,
    LatencyPercentiles,
    Result,
)

__all__ = [
    # benchmark_config
    "AnyBenchmarkConfig",
    "BasicQueryConfig",
    "BenchmarkConfig",
    "BenchmarkType",
    "ImportConfig",
    "QueryConfig",
    "RandomQueryConfig",
    # results
    "BenchmarkStatus",
    "LatencyPercentiles",
    "Result",
]
