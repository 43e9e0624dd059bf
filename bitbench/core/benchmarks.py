"""
Benchmark Runners

Each runner drives one agent's workload against the store:
- QueryBenchmark: a fixed query string, repeated
- BasicQueryBenchmark: one query template whose Bitmap row ids advance per
  iteration (the template is mutated in place, not rebuilt)
- RandomQueryBenchmark: randomly generated query trees
- ImportBenchmark: a generated CSV dataset pushed through bulk import

Lifecycle: init(hosts, agent_num) -> await run() -> await close().
Iterations run strictly one after another. The first failed submission ends
the run; a stop event or deadline is honoured between iterations.
"""

import asyncio
import logging
import os
import tempfile
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from bitbench.connectors.pilosa_client import PilosaClient, normalize_host
from bitbench.core.errors import CancellationError, ConfigurationError, SubmissionError
from bitbench.core.import_generator import generate_import_csv
from bitbench.core.partitioning import AgentControls, AgentPartition, partition_for_agent
from bitbench.core.query_generator import QueryGenerator
from bitbench.core.query_tree import QueryTree, bitmap
from bitbench.models.benchmark_config import (
    BasicQueryConfig,
    BenchmarkConfig,
    BenchmarkType,
    ImportConfig,
    QueryConfig,
    RandomQueryConfig,
)
from bitbench.models.results import BenchmarkStatus, Result

logger = logging.getLogger(__name__)

ClientFactory = Callable[[List[str]], Any]


def _deadline_passed(deadline: Optional[float]) -> bool:
    return deadline is not None and time.monotonic() >= deadline


class Benchmark(ABC):
    """
    Base class for benchmark runners.

    Args:
        config: Validated benchmark configuration
        client_factory: Builds the store client from the host list
            (defaults to PilosaClient)
    """

    benchmark_type: BenchmarkType

    def __init__(
        self,
        config: BenchmarkConfig,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.config = config
        self.client_factory: ClientFactory = client_factory or PilosaClient
        self.client: Any = None
        self.hosts: List[str] = []
        self.agent_num = 0
        self.status = BenchmarkStatus.UNINITIALIZED

    @property
    def name(self) -> str:
        return self.config.name or self.benchmark_type.value

    def init(self, hosts: Sequence[str], agent_num: int) -> None:
        """
        Validate hosts, derive this agent's share of the work and build the
        client.

        Raises:
            ConfigurationError: empty or invalid host list, bad agent settings,
                or a client still open from an earlier init
        """
        if self.client is not None:
            raise ConfigurationError(
                f"{self.name} benchmark is already initialized; close it before init"
            )
        if not hosts:
            raise ConfigurationError("Need at least one host")
        try:
            normalized = [normalize_host(host) for host in hosts]
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        if agent_num < 0:
            raise ConfigurationError(f"agent number must be >= 0, got {agent_num}")

        self.agent_num = agent_num
        self.setup_agent(agent_num)
        self.hosts = normalized
        self.client = self.client_factory(normalized)
        self.status = BenchmarkStatus.INITIALIZED
        logger.debug("%s initialized for agent %d on %s", self.name, agent_num, normalized)

    def setup_agent(self, agent_num: int) -> None:
        """Apply agent-specific adjustments. Called once from init."""

    def prepare(self, result: Result) -> None:
        """Hook run once before the first iteration."""

    @abstractmethod
    async def submit(self, iteration: int) -> Any:
        """Build and submit the work for one iteration, returning the response."""

    async def run(
        self,
        stop_event: Optional[asyncio.Event] = None,
        deadline: Optional[float] = None,
        iterations: Optional[int] = None,
    ) -> Result:
        """
        Run the benchmark loop.

        Args:
            stop_event: Cancels the run when set (checked between iterations)
            deadline: time.monotonic() value after which no iteration starts
            iterations: Overrides config.iterations

        Returns:
            Result with one measurement per successful submission
        """
        result = Result(benchmark=self.name, agent_num=self.agent_num)
        if self.client is None:
            result.error = ConfigurationError(f"No client set for {self.name} benchmark")
            return result.finish(BenchmarkStatus.ERRORED)

        total = self.config.iterations if iterations is None else iterations
        self.status = BenchmarkStatus.RUNNING
        self.prepare(result)
        logger.info("Agent %d starting %s (%d iterations)", self.agent_num, self.name, total)

        for n in range(total):
            if (stop_event is not None and stop_event.is_set()) or _deadline_passed(deadline):
                result.error = CancellationError(
                    f"{self.name} cancelled before iteration #{n}", iteration=n
                )
                logger.info("Agent %d %s cancelled after %d iterations", self.agent_num, self.name, n)
                self.status = BenchmarkStatus.CANCELLED
                return result.finish(self.status)

            start = time.perf_counter()
            try:
                response = await self.submit(n)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if (stop_event is not None and stop_event.is_set()) or _deadline_passed(deadline):
                    error = CancellationError(
                        f"{self.name} cancelled during iteration #{n}", iteration=n
                    )
                    error.__cause__ = e
                    result.error = error
                    logger.info(
                        "Agent %d %s cancelled during iteration %d: %s",
                        self.agent_num,
                        self.name,
                        n,
                        e,
                    )
                    self.status = BenchmarkStatus.CANCELLED
                    return result.finish(self.status)
                error = SubmissionError(f"problem with {self.name} #{n}: {e}", iteration=n)
                error.__cause__ = e
                result.error = error
                logger.warning("Agent %d %s", self.agent_num, error)
                self.status = BenchmarkStatus.ERRORED
                return result.finish(self.status)
            elapsed = time.perf_counter() - start
            result.add(elapsed, response)
            logger.debug("Agent %d %s #%d took %.3fms", self.agent_num, self.name, n, elapsed * 1000.0)

        self.status = BenchmarkStatus.COMPLETED
        logger.info("Agent %d finished %s", self.agent_num, self.name)
        return result.finish(self.status)

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None


class QueryBenchmark(Benchmark):
    """Runs the same query string every iteration."""

    benchmark_type = BenchmarkType.QUERY
    config: QueryConfig

    async def submit(self, iteration: int) -> Any:
        return await self.client.execute_query(self.config.index, self.config.query)


class BasicQueryBenchmark(Benchmark):
    """
    Runs `query` over `num_args` Bitmap calls with increasing row ids.

    Each agent starts at base_row_id + agent_num * iterations so agents never
    query the same rows.
    """

    benchmark_type = BenchmarkType.BASIC_QUERY
    config: BasicQueryConfig

    def __init__(self, config: BasicQueryConfig, client_factory: Optional[ClientFactory] = None):
        super().__init__(config, client_factory)
        self.base_row_id = config.base_row_id
        self.template: Optional[QueryTree] = None

    def setup_agent(self, agent_num: int) -> None:
        self.base_row_id = self.config.base_row_id + agent_num * self.config.iterations

    def prepare(self, result: Result) -> None:
        leaves = [bitmap(self.base_row_id, self.config.frame) for _ in range(self.config.num_args)]
        self.template = QueryTree(name=self.config.query, children=leaves)

    async def submit(self, iteration: int) -> Any:
        # Only this runner's loop touches the template.
        row_id = self.base_row_id + iteration
        for leaf in self.template.children:
            leaf.args["rowID"] = row_id
        await self.client.execute_query(self.config.index, str(self.template))
        return None


class RandomQueryBenchmark(Benchmark):
    """Runs randomly generated queries; the seed is offset by agent number."""

    benchmark_type = BenchmarkType.RANDOM_QUERY
    config: RandomQueryConfig

    def __init__(self, config: RandomQueryConfig, client_factory: Optional[ClientFactory] = None):
        super().__init__(config, client_factory)
        self.generator: Optional[QueryGenerator] = None

    def setup_agent(self, agent_num: int) -> None:
        self.generator = QueryGenerator(
            seed=self.config.seed + agent_num, frames=self.config.frames
        )

    async def submit(self, iteration: int) -> Any:
        base = self.config.base_bitmap_id
        query = self.generator.random_query(
            self.config.max_n,
            self.config.max_depth,
            self.config.max_args,
            base,
            base + self.config.bitmap_id_range,
        )
        return await self.client.execute_query(self.config.index, str(query))


class ImportBenchmark(Benchmark):
    """
    Generates an import file at init and imports it once per iteration.

    The agent-controls mode decides whether agents get disjoint bitmap id
    ranges (height), disjoint profile id ranges (width) or share both ("").
    """

    benchmark_type = BenchmarkType.IMPORT
    config: ImportConfig

    def __init__(self, config: ImportConfig, client_factory: Optional[ClientFactory] = None):
        super().__init__(config, client_factory)
        self.agent_controls: Optional[AgentControls] = None
        self.partition: Optional[AgentPartition] = None
        self.paths: List[str] = []
        self.num_bits = 0

    def setup_agent(self, agent_num: int) -> None:
        cfg = self.config
        self.agent_controls = AgentControls.parse(cfg.agent_controls)
        self.partition = partition_for_agent(
            self.agent_controls,
            agent_num,
            cfg.base_bitmap_id,
            cfg.max_bitmap_id,
            cfg.base_profile_id,
            cfg.max_profile_id,
            cfg.seed,
        )
        self._remove_files()

        part = self.partition
        with tempfile.NamedTemporaryFile(
            mode="w",
            suffix=".csv",
            prefix="bitbench-import-",
            delete=False,
            encoding="utf-8",
            newline="",
        ) as handle:
            self.paths = [handle.name]
            try:
                self.num_bits = generate_import_csv(
                    handle,
                    part.base_bitmap_id,
                    part.max_bitmap_id,
                    part.base_profile_id,
                    part.max_profile_id,
                    cfg.min_bits_per_map,
                    cfg.max_bits_per_map,
                    part.seed,
                    cfg.random_bitmap_order,
                )
            except Exception:
                handle.close()
                self._remove_files()
                raise
        logger.info(
            "Agent %d generated %d bits in %s (bitmaps %d-%d, profiles %d-%d)",
            agent_num,
            self.num_bits,
            handle.name,
            part.base_bitmap_id,
            part.max_bitmap_id,
            part.base_profile_id,
            part.max_profile_id,
        )

    def prepare(self, result: Result) -> None:
        result.extra["numbits"] = self.num_bits
        result.extra["index"] = self.config.index

    async def submit(self, iteration: int) -> Any:
        return await self.client.import_files(
            self.paths, self.config.index, self.config.frame, self.config.buffer_size
        )

    def _remove_files(self) -> None:
        for path in self.paths:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
        self.paths = []

    async def close(self) -> None:
        await super().close()
        self._remove_files()


BENCHMARK_TYPES: Dict[BenchmarkType, Type[Benchmark]] = {
    BenchmarkType.QUERY: QueryBenchmark,
    BenchmarkType.BASIC_QUERY: BasicQueryBenchmark,
    BenchmarkType.RANDOM_QUERY: RandomQueryBenchmark,
    BenchmarkType.IMPORT: ImportBenchmark,
}


def create_benchmark(
    config: BenchmarkConfig, client_factory: Optional[ClientFactory] = None
) -> Benchmark:
    """
    Factory function to create the runner for a benchmark configuration.

    Raises:
        ConfigurationError: unknown benchmark type
    """
    try:
        benchmark_type = BenchmarkType(getattr(config, "type", None))
    except ValueError:
        raise ConfigurationError(f"Unknown benchmark type: {getattr(config, 'type', None)!r}") from None
    return BENCHMARK_TYPES[benchmark_type](config, client_factory)
