"""
Unit Tests for intersect()

An empty side means "no constraint" and yields the {ANY} sentinel.
"""

import pytest

from delegation_orders.orders.matching import ANY, intersect


@pytest.mark.unit
def test_intersect_returns_common_members():
    assert intersect(["a", "b", "c"], ["b", "c", "d"]) == {"b", "c"}


@pytest.mark.unit
def test_intersect_disjoint_is_empty():
    assert intersect(["a"], ["b"]) == set()


@pytest.mark.unit
@pytest.mark.parametrize(
    "a,b",
    [
        ([], ["x", "y"]),
        (["x", "y"], []),
        ([], []),
    ],
)
def test_intersect_empty_side_yields_any(a, b):
    """
    Verify an empty input produces the non-empty {ANY} sentinel.
    """
    result = intersect(a, b)

    assert result == {ANY}
    assert len(result) > 0


@pytest.mark.unit
def test_intersect_ignores_duplicates_and_order():
    assert intersect(["b", "a", "a"], ["a", "b"]) == intersect(["a", "b"], ["b", "a"])
    assert len(intersect(["a", "a"], ["a"])) == 1
