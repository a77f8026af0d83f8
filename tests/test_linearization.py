import pytest

from posalign import constants
from posalign.linearization import OrderKeys


def test_from_order_spaces_keys():
    """Test that keys are spaced in the given order."""
    keys = OrderKeys.from_order(["a", "b", "c"])
    assert keys.key_of("a") == 0
    assert keys.key_of("c") == 2 * constants.KEY_SPACING
    assert keys.in_order() == ["a", "b", "c"]
    assert len(keys) == 3
    assert "b" in keys


def test_from_order_rejects_duplicates():
    with pytest.raises(ValueError, match="appears twice"):
        OrderKeys.from_order(["a", "a"])


def test_insert_key_after_uses_midpoint():
    """Test midpoint insertion between two neighbours."""
    keys = OrderKeys.from_order(["a", "b"])
    key = keys.insert_key_after("a")
    assert key == constants.KEY_SPACING // 2
    keys.add("x", key)
    assert keys.in_order() == ["a", "x", "b"]


def test_insert_key_after_last_extends_order():
    """Test insertion after the last key."""
    keys = OrderKeys.from_order(["a", "b"])
    key = keys.insert_key_after("b")
    assert key == 2 * constants.KEY_SPACING
    keys.add("x", key)
    assert keys.in_order()[-1] == "x"


def test_insert_key_after_reports_no_room():
    """Test that a too-narrow gap reports no room."""
    keys = OrderKeys()
    keys.add("a", 0)
    keys.add("b", 1)
    assert keys.insert_key_after("a") is None
    keys.rebuild(["a", "b"])
    assert keys.insert_key_after("a") is not None


def test_repeated_insertion_exhausts_then_rebuild_recovers():
    """Test recovery from key exhaustion by a rebuild."""
    keys = OrderKeys.from_order(["a", "b"])
    previous = "a"
    inserted = 0
    while True:
        key = keys.insert_key_after("a")
        if key is None:
            break
        node = f"n{inserted}"
        keys.add(node, key)
        previous = node
        inserted += 1
    assert 0 < inserted <= constants.KEY_SPACING.bit_length()
    assert keys.in_order()[1] == previous
    keys.rebuild(keys.in_order())
    assert keys.insert_key_after("a") is not None


def test_add_rejects_used_key_and_known_node():
    keys = OrderKeys.from_order(["a"])
    with pytest.raises(ValueError, match="already in use"):
        keys.add("b", 0)
    with pytest.raises(ValueError, match="already has a key"):
        keys.add("a", 5)


def test_remove_releases_key():
    """Test that a removed key can be reused."""
    keys = OrderKeys.from_order(["a", "b"])
    assert keys.remove("a") == 0
    assert "a" not in keys
    keys.add("c", 0)
    assert keys.in_order() == ["c", "b"]


def test_permuted_assignments_keep_sorted_keys_valid():
    """Test the sorted key list after keys are permuted."""
    keys = OrderKeys.from_order(["a", "b", "c"])
    keys.assignments["a"], keys.assignments["c"] = (
        keys.assignments["c"],
        keys.assignments["a"],
    )
    assert keys.in_order() == ["c", "b", "a"]
    assert keys.insert_key_after("c") == constants.KEY_SPACING // 2
