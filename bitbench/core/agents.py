"""
Multi-agent orchestration.

Runs one benchmark runner per simulated agent concurrently. Each agent gets
its own partition and seed from init(hosts, agent_num), so agents need no
coordination. A failing agent never stops the others; its Result carries
the error.
"""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

from bitbench.core.benchmarks import Benchmark, ClientFactory, create_benchmark
from bitbench.models.benchmark_config import BenchmarkConfig
from bitbench.models.results import Result

logger = logging.getLogger(__name__)


async def build_agents(
    config: BenchmarkConfig,
    hosts: Sequence[str],
    agent_count: int,
    client_factory: Optional[ClientFactory] = None,
    first_agent_num: int = 0,
) -> List[Benchmark]:
    """
    Create and initialize one runner per agent.

    Raises:
        ConfigurationError: from any runner's init
        ValueError: agent_count < 1
    """
    if agent_count < 1:
        raise ValueError(f"agent_count must be >= 1, got {agent_count}")

    runners: List[Benchmark] = []
    try:
        for offset in range(agent_count):
            runner = create_benchmark(config, client_factory)
            runners.append(runner)
            runner.init(hosts, first_agent_num + offset)
    except Exception:
        for runner in runners:
            await runner.close()
        raise
    return runners


async def run_agents(
    config: BenchmarkConfig,
    hosts: Sequence[str],
    agent_count: int = 1,
    stop_event: Optional[asyncio.Event] = None,
    deadline: Optional[float] = None,
    client_factory: Optional[ClientFactory] = None,
    first_agent_num: int = 0,
) -> List[Result]:
    """
    Run `agent_count` agents of one benchmark concurrently.

    Returns:
        One Result per agent, ordered by agent number
    """
    runners = await build_agents(config, hosts, agent_count, client_factory, first_agent_num)
    started = time.perf_counter()
    try:
        results = await asyncio.gather(
            *(runner.run(stop_event=stop_event, deadline=deadline) for runner in runners)
        )
    finally:
        for runner in runners:
            await runner.close()

    failed = sum(1 for r in results if r.failed)
    logger.info(
        "%s: %d agent(s) finished in %.2fs (%d failed)",
        runners[0].name,
        len(results),
        time.perf_counter() - started,
        failed,
    )
    return list(results)
