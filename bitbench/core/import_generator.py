"""
Bulk Import Dataset Generator

Synthesizes (bitmap id, profile id) bit sets for the bulk import path and
writes them as CSV lines in the form the importer expects:

    <bitmapID>,<profileID>\\n

Ordered datasets visit bitmap ids ascending and sort profile ids within each
bitmap. Random-order datasets visit bitmap ids in a random permutation and
leave profile ids unsorted.
"""

from typing import Iterator, NamedTuple, TextIO
import random


class ImportRow(NamedTuple):
    """One set bit."""

    bitmap_id: int
    profile_id: int


def iter_import_rows(
    base_bitmap_id: int,
    max_bitmap_id: int,
    base_profile_id: int,
    max_profile_id: int,
    min_bits_per_map: int,
    max_bits_per_map: int,
    seed: int,
    random_order: bool = False,
) -> Iterator[ImportRow]:
    """
    Yield generated rows in emission order.

    Empty or inverted ranges produce no rows.

    Args:
        base_bitmap_id: First bitmap id (inclusive)
        max_bitmap_id: Bitmap id upper bound (exclusive)
        base_profile_id: First profile id (inclusive)
        max_profile_id: Profile id upper bound (exclusive)
        min_bits_per_map: Minimum bits per bitmap (inclusive)
        max_bits_per_map: Maximum bits per bitmap (exclusive)
        seed: Seed for the random stream
        random_order: Permute bitmap ids and skip per-bitmap sorting
    """
    min_bits_per_map = max(min_bits_per_map, 0)
    num_bitmaps = max_bitmap_id - base_bitmap_id
    profile_span = max_profile_id - base_profile_id
    bits_span = max_bits_per_map - min_bits_per_map
    if num_bitmaps <= 0 or profile_span <= 0 or bits_span <= 0:
        return

    rng = random.Random(seed)

    if random_order:
        offsets = list(range(num_bitmaps))
        rng.shuffle(offsets)
    else:
        offsets = range(num_bitmaps)

    # Scratch buffer reused for every bitmap; never grows past max_bits_per_map.
    profile_ids = [0] * max_bits_per_map
    for offset in offsets:
        bitmap_id = base_bitmap_id + offset
        num_bits = rng.randrange(bits_span) + min_bits_per_map
        for j in range(num_bits):
            profile_ids[j] = rng.randrange(profile_span) + base_profile_id
        group = profile_ids[:num_bits]
        if not random_order:
            group.sort()
        for profile_id in group:
            yield ImportRow(bitmap_id, profile_id)


def generate_import_csv(
    sink: TextIO,
    base_bitmap_id: int,
    max_bitmap_id: int,
    base_profile_id: int,
    max_profile_id: int,
    min_bits_per_map: int,
    max_bits_per_map: int,
    seed: int,
    random_order: bool = False,
) -> int:
    """
    Write a generated dataset to `sink` as CSV and return the row count.
    """
    num_rows = 0
    for row in iter_import_rows(
        base_bitmap_id,
        max_bitmap_id,
        base_profile_id,
        max_profile_id,
        min_bits_per_map,
        max_bits_per_map,
        seed,
        random_order,
    ):
        sink.write("%d,%d\n" % (row.bitmap_id, row.profile_id))
        num_rows += 1
    return num_rows
