"""
Benchmark error taxonomy.

- ConfigurationError: bad host list, unknown agent-controls mode, bad plan.
  Raised before any work starts.
- SubmissionError: a query or import submission failed. Recorded on the
  Result and stops that runner's loop; other agents keep going.
- CancellationError: the stop signal or deadline fired between iterations.
"""

from __future__ import annotations

from typing import Optional


class BenchmarkError(Exception):
    """Base class for all bitbench errors."""


class ConfigurationError(BenchmarkError):
    """Invalid benchmark configuration detected during init or plan loading."""


class SubmissionError(BenchmarkError):
    """A query or import submission to the target store failed."""

    def __init__(self, message: str, iteration: Optional[int] = None):
        super().__init__(message)
        self.iteration = iteration


class CancellationError(BenchmarkError):
    """The run was cancelled at an iteration boundary."""

    def __init__(self, message: str, iteration: Optional[int] = None):
        super().__init__(message)
        self.iteration = iteration
