"""
PQL text rendering for QueryTree nodes.

Output shape: Name(child, child, key=value, key=value)
Children come first, then arguments in sorted key order, so equal trees
always render to identical strings.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bitbench.core.query_tree import QueryTree


def format_value(value: Any) -> str:
    """Render a single argument value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(format_value(v) for v in value) + "]"
    if value is None:
        return "null"
    raise TypeError(f"Unsupported PQL argument type: {type(value).__name__}")


def to_pql(tree: "QueryTree") -> str:
    parts = [to_pql(child) for child in tree.children]
    parts.extend(f"{key}={format_value(tree.args[key])}" for key in sorted(tree.args))
    return f"{tree.name}({', '.join(parts)})"

