from posalign import constants
from posalign.types import Edge, SequenceId


def test_key_spacing_leaves_room_for_midpoints():
    """Test that fresh keys leave room for midpoint insertion."""
    assert constants.KEY_SPACING // 2 >= constants.MIN_KEY_GAP
    assert constants.MIN_KEY_GAP >= 2


def test_gap_char_is_a_gap():
    assert constants.GAP_CHAR in constants.GAP_CHARS


def test_aligned_row_pattern():
    """Test which characters a padded row may contain."""
    assert constants.ALIGNED_ROW_PATTERN.fullmatch("AC-g.t")
    assert not constants.ALIGNED_ROW_PATTERN.fullmatch("AC 1")


def test_edge_pattern_matches_edge_text():
    """Test that the edge pattern splits the edge text form."""
    edge = Edge.of(12, 3, SequenceId("x"), SequenceId("y"))
    match = constants.EDGE_PATTERN.fullmatch(str(edge))
    assert match is not None
    assert match.groups() == ("12", "x", "3", "y")
