#!/usr/bin/env python3
"""Utility functions for posalign.

This module provides helper functions for:
- Configuring logging
- Inverting sequences into rank lookups
"""

import logging
from typing import Dict, Hashable, Sequence, TypeVar

T = TypeVar("T", bound=Hashable)


def configure_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag.

    Args:
        verbose: If True, set logging level to INFO. Otherwise, set to WARNING.
    """
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, force=True)


def invert(items: Sequence[T]) -> Dict[T, int]:
    """Map each item to its index in ``items``."""
    return {item: idx for idx, item in enumerate(items)}
