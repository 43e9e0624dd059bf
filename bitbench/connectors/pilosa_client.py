"""
Pilosa HTTP Client

Async client for the two store operations the benchmarks drive:
- query execution: POST /index/{index}/query with a PQL body
- bulk import: POST /import with one JSON batch per slice
"""

import csv
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple

import httpx

from bitbench.config import settings

logger = logging.getLogger(__name__)


class QueryClient(Protocol):
    async def execute_query(self, index: str, query: str) -> Any: ...

    async def close(self) -> None: ...


class ImportClient(Protocol):
    async def import_files(
        self, paths: Sequence[str], index: str, frame: str, buffer_size: int
    ) -> int: ...

    async def close(self) -> None: ...


def normalize_host(host: str) -> str:
    """
    Return `host` as a base URL.

    Bare "host:port" gets an http:// scheme. Raises ValueError when the value
    is not a usable http(s) address.
    """
    raw = host.strip()
    if not raw:
        raise ValueError("empty host")
    if "://" not in raw:
        raw = f"http://{raw}"
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as e:
        raise ValueError(f"invalid host address: {host!r}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ValueError(f"invalid host address: {host!r}")
    return str(url).rstrip("/")


def read_import_csv(path: str) -> Iterator[Tuple[int, int]]:
    """Yield (row id, column id) pairs from an import CSV file."""
    with open(path, "r", newline="", encoding="utf-8") as handle:
        for line_no, record in enumerate(csv.reader(handle), start=1):
            if not record:
                continue
            if len(record) < 2:
                raise ValueError(f"{path}:{line_no}: expected 'rowID,columnID'")
            try:
                yield int(record[0]), int(record[1])
            except ValueError:
                raise ValueError(
                    f"{path}:{line_no}: invalid integer in {record!r}"
                ) from None


def group_by_slice(
    bits: Iterable[Tuple[int, int]], slice_width: int
) -> Dict[int, List[Tuple[int, int]]]:
    """Group bits by column slice, each slice sorted by (row, column)."""
    slices: Dict[int, List[Tuple[int, int]]] = defaultdict(list)
    for row_id, column_id in bits:
        slices[column_id // slice_width].append((row_id, column_id))
    for slice_bits in slices.values():
        slice_bits.sort()
    return dict(sorted(slices.items()))


class PilosaClient:
    """
    Async HTTP client for one or more Pilosa hosts.

    Requests go to the first host; the full list is kept for reporting.
    """

    def __init__(
        self,
        hosts: Sequence[str],
        timeout: Optional[float] = None,
        slice_width: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not hosts:
            raise ValueError("Need at least one host")
        self.hosts = [normalize_host(h) for h in hosts]
        self.slice_width = slice_width or settings.SLICE_WIDTH
        self._client = httpx.AsyncClient(
            base_url=self.hosts[0],
            timeout=httpx.Timeout(timeout or settings.REQUEST_TIMEOUT_SECONDS),
            transport=transport,
        )
        logger.debug("Pilosa client configured for %s", ", ".join(self.hosts))

    async def execute_query(self, index: str, query: str) -> Any:
        """Execute a PQL query and return the decoded JSON response."""
        response = await self._client.post(
            f"/index/{index}/query",
            content=query.encode("utf-8"),
            headers={"Content-Type": "text/plain", "Accept": "application/json"},
        )
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    async def import_bits(
        self, index: str, frame: str, bits: Iterable[Tuple[int, int]]
    ) -> int:
        """Post one batch of bits, split into per-slice requests."""
        imported = 0
        for slice_num, slice_bits in group_by_slice(bits, self.slice_width).items():
            payload = {
                "index": index,
                "frame": frame,
                "slice": slice_num,
                "rowIDs": [row_id for row_id, _ in slice_bits],
                "columnIDs": [column_id for _, column_id in slice_bits],
            }
            response = await self._client.post("/import", json=payload)
            response.raise_for_status()
            imported += len(slice_bits)
            logger.debug(
                "Imported %d bits into %s/%s slice %d",
                len(slice_bits),
                index,
                frame,
                slice_num,
            )
        return imported

    async def import_files(
        self, paths: Sequence[str], index: str, frame: str, buffer_size: int
    ) -> int:
        """
        Import CSV files of "rowID,columnID" lines.

        Bits are buffered up to `buffer_size` before each flush.

        Returns:
            Number of bits imported
        """
        total = 0
        buffer: List[Tuple[int, int]] = []
        for path in paths:
            if not Path(path).is_file():
                raise FileNotFoundError(path)
            for bit in read_import_csv(path):
                buffer.append(bit)
                if len(buffer) >= buffer_size:
                    total += await self.import_bits(index, frame, buffer)
                    buffer = []
        if buffer:
            total += await self.import_bits(index, frame, buffer)
        logger.info("Imported %d bits from %d file(s) into %s/%s", total, len(paths), index, frame)
        return total

    async def close(self) -> None:
        await self._client.aclose()
