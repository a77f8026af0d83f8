import logging

from posalign import util


def test_invert():
    """Test inverting a mapping."""
    assert util.invert(["b", "a", "c"]) == {"b": 0, "a": 1, "c": 2}
    assert util.invert([]) == {}


def test_configure_logging_levels():
    """Test log levels for verbose and quiet runs."""
    root = logging.getLogger()
    previous = root.level
    try:
        util.configure_logging(verbose=True)
        assert root.level == logging.INFO
        util.configure_logging(verbose=False)
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)
