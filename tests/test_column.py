import pytest

from posalign.column import Column, spanning_edges
from posalign.types import Edge, Point, SequenceId

A, B, C = SequenceId("a"), SequenceId("b"), SequenceId("c")


def test_columns_compare_by_identity():
    """Test that columns with equal points are still distinct."""
    first = Column({A: 0})
    second = Column({A: 0})
    assert first != second
    assert first == first
    assert len({first, second}) == 2


def test_points_view_is_read_only():
    """Test that the points view cannot be mutated."""
    column = Column.singleton(A, 3)
    with pytest.raises(TypeError):
        column.points[B] = 1
    assert column.position(A) == 3
    assert A in column
    assert B not in column


def test_as_points():
    column = Column({A: 0, B: 2})
    assert column.as_points() == frozenset({Point(A, 0), Point(B, 2)})


def test_is_disjoint():
    assert Column({A: 0}).is_disjoint(Column({B: 0}))
    assert not Column({A: 0, B: 1}).is_disjoint(Column({B: 0}))


def test_spanning_edges_link_first_point_to_rest():
    """Test the star shape of spanning edges."""
    edges = spanning_edges({A: 0, B: 1, C: 2})
    assert edges == [Edge.of(0, 1, A, B), Edge.of(0, 2, A, C)]
    assert Column({A: 4}).spanning_edges() == []


def test_repr_lists_points_in_sequence_order():
    assert repr(Column({B: 1, A: 0})) == "Column(a=0, b=1)"
