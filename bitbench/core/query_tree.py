"""
Query Tree Model and Builders

A QueryTree is an n-ary operation node (name, keyword args, children) that
describes a bitmap-index query independently of any query-language library.
The builder helpers assemble the common operations:
- Bitmap, Count, Column
- SetBit, ClearBit, SetRowAttrs, SetColumnAttrs
- TopN
- Difference, Intersect, Union
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

# Argument values: integer, string, bool, id-list or filter list.
ArgValue = Union[int, str, bool, List[int], List[Any]]


@dataclass
class QueryTree:
    """A single operation node and its child operations."""

    name: str
    args: Dict[str, ArgValue] = field(default_factory=dict)
    children: List["QueryTree"] = field(default_factory=list)

    def __str__(self) -> str:
        from bitbench.core.pql import to_pql

        return to_pql(self)

    def walk(self):
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def depth(self) -> int:
        """Height of the tree; a leaf has depth 1."""
        if not self.children:
            return 1
        return 1 + max(child.depth() for child in self.children)


def _copy_args(attrs: Optional[Mapping[str, ArgValue]]) -> Dict[str, ArgValue]:
    """Shallow copy of attrs so the caller's mapping is never shared."""
    return dict(attrs) if attrs else {}


def bitmap(row_id: int, frame: str) -> QueryTree:
    return QueryTree(name="Bitmap", args={"rowID": row_id, "frame": frame})


def count(child: QueryTree) -> QueryTree:
    return QueryTree(name="Count", children=[child])


def column(column_id: int) -> QueryTree:
    return QueryTree(name="Column", args={"id": column_id})


def set_bit(row_id: int, frame: str, column_id: int) -> QueryTree:
    return QueryTree(
        name="SetBit",
        args={"id": row_id, "frame": frame, "columnID": column_id},
    )


def clear_bit(row_id: int, frame: str, column_id: int) -> QueryTree:
    return QueryTree(
        name="ClearBit",
        args={"id": row_id, "frame": frame, "columnID": column_id},
    )


def set_row_attrs(
    row_id: int, frame: str, attrs: Optional[Mapping[str, ArgValue]] = None
) -> QueryTree:
    """SetRowAttrs call; `id` and `frame` override same-named attrs."""
    args = _copy_args(attrs)
    args["id"] = row_id
    args["frame"] = frame
    return QueryTree(name="SetRowAttrs", args=args)


def set_column_attrs(
    column_id: int, attrs: Optional[Mapping[str, ArgValue]] = None
) -> QueryTree:
    args = _copy_args(attrs)
    args["id"] = column_id
    return QueryTree(name="SetColumnAttrs", args=args)


def top_n(
    frame: str,
    n: int,
    src: Optional[QueryTree] = None,
    bitmap_ids: Optional[Sequence[int]] = None,
    field_name: Optional[str] = None,
    filters: Optional[Sequence[Any]] = None,
) -> QueryTree:
    """
    TopN call over `frame`, optionally restricted to the bitmap `src`.

    `ids`, `field` and `filters` are only set when supplied.
    """
    args: Dict[str, ArgValue] = {"frame": frame, "n": n}
    if bitmap_ids is not None:
        args["ids"] = list(bitmap_ids)
    if field_name is not None:
        args["field"] = field_name
    if filters is not None:
        args["filters"] = list(filters)
    return QueryTree(
        name="TopN",
        args=args,
        children=[src] if src is not None else [],
    )


def difference(*bitmaps: QueryTree) -> QueryTree:
    return QueryTree(name="Difference", children=list(bitmaps))


def intersect(*bitmaps: QueryTree) -> QueryTree:
    return QueryTree(name="Intersect", children=list(bitmaps))


def union(*bitmaps: QueryTree) -> QueryTree:
    return QueryTree(name="Union", children=list(bitmaps))
