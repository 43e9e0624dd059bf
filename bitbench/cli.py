"""Command line entry point for running bitbench benchmarks."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from typing import Any, Optional, Sequence

from bitbench.config import settings
from bitbench.core.agents import run_agents
from bitbench.core.errors import ConfigurationError
from bitbench.core.import_generator import generate_import_csv
from bitbench.core.plan_loader import load_plan
from bitbench.core.query_generator import QueryGenerator

logger = logging.getLogger("bitbench")


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(settings.LOG_FILE)
            if settings.LOG_FILE
            else logging.NullHandler(),
        ],
    )
    # Per-request transport logging drowns out benchmark output.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bitbench",
        description="Synthetic query and import load for bitmap-index stores.",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a benchmark plan.")
    run.add_argument("--plan", required=True, help="YAML plan file.")
    run.add_argument(
        "--hosts",
        default=None,
        help="Comma-separated host list (overrides plan and settings).",
    )
    run.add_argument("--agents", type=int, default=None, help="Agents per benchmark.")
    run.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop starting new iterations after this many seconds.",
    )
    run.add_argument("--output", default=None, help="Write the JSON report here.")

    gen = sub.add_parser("generate-import", help="Write a generated import CSV.")
    gen.add_argument("--out", default="-", help="Output file ('-' for stdout).")
    gen.add_argument("--base-bitmap-id", type=int, default=0)
    gen.add_argument("--max-bitmap-id", type=int, default=1000)
    gen.add_argument("--base-profile-id", type=int, default=0)
    gen.add_argument("--max-profile-id", type=int, default=1000)
    gen.add_argument("--min-bits-per-map", type=int, default=0)
    gen.add_argument("--max-bits-per-map", type=int, default=10)
    gen.add_argument("--seed", type=int, default=0)
    gen.add_argument("--random-bitmap-order", action="store_true")

    rq = sub.add_parser("random-queries", help="Print randomly generated PQL.")
    rq.add_argument("--count", type=int, default=10)
    rq.add_argument("--seed", type=int, default=1)
    rq.add_argument("--max-depth", type=int, default=4)
    rq.add_argument("--max-args", type=int, default=4)
    rq.add_argument("--max-n", type=int, default=100)
    rq.add_argument("--base-bitmap-id", type=int, default=0)
    rq.add_argument("--bitmap-id-range", type=int, default=100000)
    rq.add_argument("--frames", default="fbench", help="Comma-separated frame names.")
    return parser


def _split(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


async def _run_plan(args: argparse.Namespace) -> int:
    plan = load_plan(args.plan)
    hosts = _split(args.hosts) or plan.hosts or list(settings.HOSTS)
    agents = args.agents if args.agents is not None else plan.agents
    deadline = time.monotonic() + args.duration if args.duration else None

    report: list[dict[str, Any]] = []
    exit_code = 0
    for config in plan.benchmarks:
        results = await run_agents(config, hosts, agents, deadline=deadline)
        for result in results:
            report.append(result.to_dict())
            if result.failed:
                exit_code = 1
            latency = result.latency()
            print(
                f"[bitbench] {result.benchmark} agent={result.agent_num} "
                f"status={result.status.value} n={latency.count} "
                f"avg={latency.avg:.2f}ms p95={latency.p95:.2f}ms"
            )

    payload = json.dumps({"plan": plan.name, "hosts": hosts, "results": report}, indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload)
    else:
        print(payload)
    return exit_code


def _generate_import(args: argparse.Namespace) -> int:
    params = (
        args.base_bitmap_id,
        args.max_bitmap_id,
        args.base_profile_id,
        args.max_profile_id,
        args.min_bits_per_map,
        args.max_bits_per_map,
        args.seed,
        args.random_bitmap_order,
    )
    if args.out == "-":
        num = generate_import_csv(sys.stdout, *params)
    else:
        with open(args.out, "w", encoding="utf-8", newline="") as f:
            num = generate_import_csv(f, *params)
    print(f"[bitbench] wrote {num} bits", file=sys.stderr)
    return 0


def _random_queries(args: argparse.Namespace) -> int:
    generator = QueryGenerator(seed=args.seed, frames=_split(args.frames))
    id_max = args.base_bitmap_id + args.bitmap_id_range
    for _ in range(args.count):
        query = generator.random_query(
            args.max_n, args.max_depth, args.max_args, args.base_bitmap_id, id_max
        )
        print(query)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    try:
        if args.command == "run":
            return asyncio.run(_run_plan(args))
        if args.command == "generate-import":
            return _generate_import(args)
        return _random_queries(args)
    except ConfigurationError as e:
        print(f"[bitbench] configuration error: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"[bitbench] invalid arguments: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("[bitbench] interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
