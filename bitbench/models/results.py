"""
Result Models

Per-run measurements and the summary statistics reported for them.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from bitbench.core.errors import CancellationError, SubmissionError


class BenchmarkStatus(str, Enum):
    """Runner lifecycle state."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RUNNING = "running"
    COMPLETED = "completed"
    ERRORED = "errored"
    CANCELLED = "cancelled"


class LatencyPercentiles(BaseModel):
    """Latency percentile metrics (in milliseconds)."""

    count: int = Field(0, description="Number of measurements")
    p50: float = Field(0.0, description="50th percentile (median)")
    p75: float = Field(0.0, description="75th percentile")
    p90: float = Field(0.0, description="90th percentile")
    p95: float = Field(0.0, description="95th percentile")
    p99: float = Field(0.0, description="99th percentile")
    min: float = Field(0.0, description="Minimum latency")
    max: float = Field(0.0, description="Maximum latency")
    avg: float = Field(0.0, description="Average latency")
    total: float = Field(0.0, description="Sum of all latencies")

    @classmethod
    def from_durations(cls, durations_s: List[float]) -> "LatencyPercentiles":
        """Build percentiles from durations given in seconds."""
        if not durations_s:
            return cls()
        values = sorted(d * 1000.0 for d in durations_s)
        n = len(values)

        def pct(p: float) -> float:
            return values[min(int(n * p), n - 1)]

        total = sum(values)
        return cls(
            count=n,
            p50=pct(0.50),
            p75=pct(0.75),
            p90=pct(0.90),
            p95=pct(0.95),
            p99=pct(0.99),
            min=values[0],
            max=values[-1],
            avg=total / n,
            total=total,
        )


class Result:
    """
    Measurements collected by one benchmark run.

    Holds one (duration_seconds, response) pair per successful submission and
    an optional terminal error. Append-only while the run is active.
    """

    def __init__(self, benchmark: str = "", agent_num: int = 0):
        self.benchmark = benchmark
        self.agent_num = agent_num
        self.measurements: List[Tuple[float, Any]] = []
        self.error: Optional[Exception] = None
        self.status = BenchmarkStatus.RUNNING
        self.extra: Dict[str, Any] = {}
        self.started_at = datetime.now(UTC)
        self.finished_at: Optional[datetime] = None

    def add(self, duration: float, response: Any = None) -> None:
        self.measurements.append((duration, response))

    def finish(self, status: BenchmarkStatus) -> "Result":
        self.status = status
        self.finished_at = datetime.now(UTC)
        return self

    @property
    def durations(self) -> List[float]:
        return [duration for duration, _ in self.measurements]

    @property
    def responses(self) -> List[Any]:
        return [response for _, response in self.measurements]

    @property
    def cancelled(self) -> bool:
        return isinstance(self.error, CancellationError)

    @property
    def failed(self) -> bool:
        """True when a submission failed (cancellation does not count)."""
        return self.error is not None and not self.cancelled

    def latency(self) -> LatencyPercentiles:
        return LatencyPercentiles.from_durations(self.durations)

    def to_dict(self) -> Dict[str, Any]:
        """Report form of this result."""
        error = None
        if self.error is not None:
            error = {
                "type": type(self.error).__name__,
                "message": str(self.error),
            }
            if isinstance(self.error, (SubmissionError, CancellationError)):
                error["iteration"] = self.error.iteration
        return {
            "benchmark": self.benchmark,
            "agent_num": self.agent_num,
            "status": self.status.value,
            "iterations": len(self.measurements),
            "latency_ms": self.latency().model_dump(),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "extra": dict(self.extra),
            "error": error,
        }

    def __repr__(self) -> str:
        return (
            f"Result(benchmark={self.benchmark!r}, agent_num={self.agent_num}, "
            f"measurements={len(self.measurements)}, status={self.status.value})"
        )
