"""
Random Query Generator

Builds random bitmap-index query trees for load testing:
- TopN over a random frame with a random bitmap-producing source
- Nested Difference / Intersect / Union trees with bounded depth and fan-out
- Bitmap leaves with row ids drawn from a fixed id range

All draws come from a private seeded random.Random, so the same seed and the
same sequence of calls always produce the same query corpus.
"""

from typing import Callable, List, Optional, Sequence
import random

from bitbench.core.query_tree import (
    QueryTree,
    bitmap,
    difference,
    intersect,
    top_n,
    union,
)

DEFAULT_FRAME = "fbench"

# Probability knobs (1-in-N draws).
TOP_N_ODDS = 5
EARLY_LEAF_ODDS = 4

_SET_OPERATIONS = {1: difference, 2: intersect, 3: union}


class QueryGenerator:
    """
    Holds the configuration and random state for generating queries.

    Args:
        seed: Seed for the private random stream
        frames: Frame names TopN may pick from
        id_to_frame: Maps a row id to the frame a Bitmap leaf reads from
    """

    def __init__(
        self,
        seed: int = 0,
        frames: Optional[Sequence[str]] = None,
        id_to_frame: Optional[Callable[[int], str]] = None,
    ):
        self.random = random.Random(seed)
        self.frames: List[str] = list(frames) if frames else [DEFAULT_FRAME]
        self.id_to_frame = id_to_frame or (lambda row_id: self.frames[0])

    def random_query(
        self, max_n: int, depth: int, max_args: int, id_min: int, id_max: int
    ) -> QueryTree:
        """
        Generate one random query.

        With depth <= 1 this always returns a Bitmap leaf. Otherwise one query
        in five is a TopN, the rest are bitmap-producing calls.
        """
        if depth <= 1:
            return self.random_bitmap_call(depth, max_args, id_min, id_max)
        if max_n < 2:
            raise ValueError(f"max_n must be >= 2, got {max_n}")
        if id_max < id_min:
            raise ValueError(f"id_min ({id_min}) must be <= id_max ({id_max})")
        if self.random.randrange(TOP_N_ODDS) == 0:
            return self.random_top_n(max_n, depth, max_args, id_min, id_max)
        return self.random_bitmap_call(depth, max_args, id_min, id_max)

    def random_top_n(
        self, max_n: int, depth: int, max_args: int, id_min: int, id_max: int
    ) -> QueryTree:
        """Generate a TopN call with a random bitmap source."""
        if max_n < 2:
            raise ValueError(f"max_n must be >= 2, got {max_n}")
        frame = self.frames[self.random.randrange(len(self.frames))]
        n = self.random.randrange(max_n - 1) + 1
        src = self.random_bitmap_call(depth, max_args, id_min, id_max)
        return top_n(frame, n, src)

    def random_bitmap_call(
        self, depth: int, max_args: int, id_min: int, id_max: int
    ) -> QueryTree:
        """Generate a call which returns a bitmap."""
        if id_max < id_min:
            raise ValueError(f"id_min ({id_min}) must be <= id_max ({id_max})")

        if depth <= 1:
            return self._random_leaf(id_min, id_max)

        call = self.random.randrange(EARLY_LEAF_ODDS)
        if call == 0:
            return self._random_leaf(id_min, id_max)

        if max_args <= 2:
            num_args = 2
        else:
            num_args = self.random.randint(2, max_args)

        children = [
            self.random_bitmap_call(depth - 1, max_args, id_min, id_max)
            for _ in range(num_args)
        ]
        return _SET_OPERATIONS[call](*children)

    def _random_leaf(self, id_min: int, id_max: int) -> QueryTree:
        if id_max == id_min:
            row_id = id_min
        else:
            row_id = self.random.randrange(id_max - id_min) + id_min
        return bitmap(row_id, self.id_to_frame(row_id))
