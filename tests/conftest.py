"""
Global pytest configuration and fixtures for bitbench tests.

This module provides:
- FakeClient: in-memory stand-in for the store client (query + import)
- FakeClientFactory: records every client a runner builds
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Sequence

import pytest


class FakeClient:
    """Store client double that records submissions and can fail on demand."""

    def __init__(
        self,
        hosts: Sequence[str],
        fail_on: Optional[int] = None,
        on_call: Optional[Callable[[int], None]] = None,
    ):
        self.hosts = list(hosts)
        self.fail_on = fail_on
        self.on_call = on_call
        self.calls = 0
        self.queries: list[tuple[str, str]] = []
        self.imports: list[dict[str, Any]] = []
        self.closed = False

    def _tick(self) -> None:
        self.calls += 1
        if self.on_call is not None:
            self.on_call(self.calls)
        if self.fail_on is not None and self.calls == self.fail_on:
            raise RuntimeError(f"store unavailable on call {self.calls}")

    async def execute_query(self, index: str, query: str) -> Any:
        await asyncio.sleep(0)
        self._tick()
        self.queries.append((index, query))
        return {"results": [self.calls]}

    async def import_files(
        self, paths: Sequence[str], index: str, frame: str, buffer_size: int
    ) -> int:
        await asyncio.sleep(0)
        self._tick()
        lines = 0
        for path in paths:
            with open(path, "r", encoding="utf-8") as f:
                lines += sum(1 for _ in f)
        self.imports.append(
            {"paths": list(paths), "index": index, "frame": frame, "buffer_size": buffer_size}
        )
        return lines

    async def close(self) -> None:
        self.closed = True


class FakeClientFactory:
    """Client factory that keeps every client it creates."""

    def __init__(
        self,
        fail_on: Optional[int] = None,
        fail_client: Optional[int] = None,
        on_call: Optional[Callable[[int], None]] = None,
    ):
        self.fail_on = fail_on
        self.fail_client = fail_client
        self.on_call = on_call
        self.clients: list[FakeClient] = []

    def __call__(self, hosts: Sequence[str]) -> FakeClient:
        index = len(self.clients)
        fail_on = self.fail_on
        if self.fail_client is not None:
            fail_on = self.fail_on if index == self.fail_client else None
        client = FakeClient(hosts, fail_on=fail_on, on_call=self.on_call)
        self.clients.append(client)
        return client


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def hosts() -> list[str]:
    return ["localhost:10101"]
