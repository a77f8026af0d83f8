import pytest

from posalign.types import Edge, Point, SequenceId


def test_sequence_id_rejects_empty_name():
    """Test ValueError for an empty sequence name."""
    with pytest.raises(ValueError, match="non-empty string"):
        SequenceId("")


def test_sequence_ids_order_by_name():
    ids = [SequenceId("b"), SequenceId("a"), SequenceId("c")]
    assert [str(t) for t in sorted(ids)] == ["a", "b", "c"]


def test_point_rejects_negative_position():
    """Test ValueError for a negative position."""
    with pytest.raises(ValueError) as excinfo:
        Point(SequenceId("a"), -1)
    msg = str(excinfo.value)
    assert "non-negative" in msg
    assert "-1" in msg


def test_edge_equality_ignores_point_order():
    """Test that edge equality is symmetric."""
    a, b = SequenceId("a"), SequenceId("b")
    forward = Edge.of(1, 2, a, b)
    backward = Edge.of(2, 1, b, a)
    assert forward == backward
    assert hash(forward) == hash(backward)
    assert len({forward, backward}) == 1
    assert forward.sort_key == backward.sort_key


def test_edges_with_different_points_differ():
    a, b = SequenceId("a"), SequenceId("b")
    assert Edge.of(1, 2, a, b) != Edge.of(2, 1, a, b)


def test_edge_text_form():
    """Test formatting and parsing of the edge text form."""
    edge = Edge.of(1, 0, SequenceId("seq-0"), SequenceId("seq-1"))
    assert str(edge) == "((1, seq-0), (0, seq-1))"
    assert Edge.from_string(str(edge)) == edge


def test_edge_text_form_with_punctuated_names():
    """Test the edge text form with commas and parentheses in names."""
    edge = Edge.of(3, 12, SequenceId("sp|P1,a"), SequenceId("clone(2)"))
    text = str(edge)
    assert text == "((3, sp|P1,a), (12, clone(2)))"
    assert Edge.from_string(text) == edge


def test_edge_from_string_rejects_garbage():
    """Test ValueError for unparseable edge text."""
    with pytest.raises(ValueError, match="Cannot parse edge"):
        Edge.from_string("not an edge")


def test_intra_sequence_edge():
    a = SequenceId("a")
    assert Edge.of(0, 1, a, a).is_intra_sequence
    assert not Edge.of(0, 1, a, SequenceId("b")).is_intra_sequence
