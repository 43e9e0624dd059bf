"""
Tests for QueryTree builders and PQL rendering.
"""

import pytest

from bitbench.core.pql import format_value, to_pql
from bitbench.core.query_tree import (
    QueryTree,
    bitmap,
    clear_bit,
    column,
    count,
    difference,
    intersect,
    set_bit,
    set_column_attrs,
    set_row_attrs,
    top_n,
    union,
)


class TestBuilders:
    """Tests for the operation constructors."""

    def test_bitmap(self) -> None:
        node = bitmap(7, "fbench")
        assert node.name == "Bitmap"
        assert node.args == {"rowID": 7, "frame": "fbench"}
        assert node.children == []

    def test_count_wraps_child(self) -> None:
        child = bitmap(1, "f")
        node = count(child)
        assert node.name == "Count"
        assert node.children == [child]

    def test_column(self) -> None:
        assert column(42).args == {"id": 42}

    def test_set_and_clear_bit(self) -> None:
        assert set_bit(1, "f", 2).args == {"id": 1, "frame": "f", "columnID": 2}
        cleared = clear_bit(1, "f", 2)
        assert cleared.name == "ClearBit"
        assert cleared.args == {"id": 1, "frame": "f", "columnID": 2}

    def test_set_ops_keep_child_order(self) -> None:
        a, b, c = bitmap(1, "f"), bitmap(2, "f"), bitmap(3, "f")
        for builder, name in ((difference, "Difference"), (intersect, "Intersect"), (union, "Union")):
            node = builder(a, b, c)
            assert node.name == name
            assert node.children == [a, b, c]

    def test_top_n_omits_unset_arguments(self) -> None:
        node = top_n("f", 10)
        assert node.args == {"frame": "f", "n": 10}
        assert node.children == []

    def test_top_n_with_source_and_filters(self) -> None:
        src = bitmap(3, "f")
        node = top_n("f", 5, src, bitmap_ids=[1, 2], field_name="category", filters=["a", 1])
        assert node.children == [src]
        assert node.args["ids"] == [1, 2]
        assert node.args["field"] == "category"
        assert node.args["filters"] == ["a", 1]


class TestAttributeCopies:
    """Attribute mappings are shallow-copied into the node."""

    def test_set_row_attrs_does_not_mutate_caller(self) -> None:
        attrs = {"color": "red"}
        node = set_row_attrs(9, "f", attrs)

        assert attrs == {"color": "red"}
        assert node.args == {"color": "red", "id": 9, "frame": "f"}

        node.args["color"] = "blue"
        assert attrs["color"] == "red"

    def test_caller_changes_after_build_are_not_seen(self) -> None:
        attrs = {"size": 3}
        node = set_column_attrs(4, attrs)
        attrs["size"] = 99
        assert node.args == {"size": 3, "id": 4}

    def test_copy_is_shallow(self) -> None:
        tags = [1, 2]
        node = set_column_attrs(4, {"tags": tags})
        assert node.args["tags"] is tags

    def test_none_attrs(self) -> None:
        assert set_column_attrs(1, None).args == {"id": 1}


class TestPQLRendering:
    """Tests for to_pql / str(QueryTree)."""

    def test_leaf_args_sorted(self) -> None:
        assert to_pql(bitmap(5, "fbench")) == 'Bitmap(frame="fbench", rowID=5)'

    def test_children_before_args(self) -> None:
        node = top_n("f", 3, bitmap(1, "f"))
        assert str(node) == 'TopN(Bitmap(frame="f", rowID=1), frame="f", n=3)'

    def test_nested(self) -> None:
        node = union(bitmap(1, "a"), intersect(bitmap(2, "b"), bitmap(3, "c")))
        assert str(node) == (
            'Union(Bitmap(frame="a", rowID=1), '
            'Intersect(Bitmap(frame="b", rowID=2), Bitmap(frame="c", rowID=3)))'
        )

    def test_insertion_order_does_not_matter(self) -> None:
        a = QueryTree(name="X", args={"b": 1, "a": 2})
        b = QueryTree(name="X", args={"a": 2, "b": 1})
        assert str(a) == str(b) == "X(a=2, b=1)"

    def test_empty_call(self) -> None:
        assert str(QueryTree(name="Count")) == "Count()"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (True, "true"),
            (False, "false"),
            (12, "12"),
            ("plain", '"plain"'),
            ('say "hi"', '"say \\"hi\\""'),
            ([1, 2, 3], "[1,2,3]"),
            (["x", 1], '["x",1]'),
        ],
    )
    def test_format_value(self, value, expected) -> None:
        assert format_value(value) == expected

    def test_format_value_rejects_unknown_types(self) -> None:
        with pytest.raises(TypeError):
            format_value(object())


class TestTreeHelpers:
    def test_depth_and_walk(self) -> None:
        tree = difference(bitmap(1, "f"), union(bitmap(2, "f"), bitmap(3, "f")))
        assert tree.depth() == 3
        assert [n.name for n in tree.walk()] == [
            "Difference",
            "Bitmap",
            "Union",
            "Bitmap",
            "Bitmap",
        ]
