#!/usr/bin/env python3
"""Dense, insertable order keys for a maintained linearization.

``OrderKeys`` assigns every live node an integer key and keeps the set of
keys in a sorted list. Key order is the linear order. New nodes are
inserted at the midpoint between a node and its successor in key order;
when two neighbouring keys are closer than ``MIN_KEY_GAP`` there is no
room and the caller rebuilds the keys (``rebuild``) before retrying.

``assignments`` is exposed so that the online topological sort can
permute keys among nodes directly. Such permutations reuse existing key
values, so the sorted key list stays valid without being touched.
"""

import bisect
import logging
from typing import Dict, Generic, Hashable, Iterable, List, Optional, TypeVar

from posalign import constants

LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)


class OrderKeys(Generic[T]):
    """Node-to-key mapping plus the sorted collection of key values."""

    def __init__(self) -> None:
        self.assignments: Dict[T, int] = {}
        self._sorted_keys: List[int] = []

    @classmethod
    def from_order(cls, ordered: Iterable[T]) -> "OrderKeys[T]":
        """Assign evenly spaced keys following ``ordered``."""
        keys: "OrderKeys[T]" = cls()
        keys.rebuild(ordered)
        return keys

    def rebuild(self, ordered: Iterable[T]) -> None:
        """Replace all keys with ``0, KEY_SPACING, 2 * KEY_SPACING, ...``."""
        self.assignments = {}
        for idx, node in enumerate(ordered):
            if node in self.assignments:
                raise ValueError(f"Node {node!r} appears twice in the order")
            self.assignments[node] = idx * constants.KEY_SPACING
        self._sorted_keys = sorted(self.assignments.values())
        LOGGER.debug(f"Rebuilt {len(self._sorted_keys)} dense order keys")

    def key_of(self, node: T) -> int:
        return self.assignments[node]

    def add(self, node: T, key: int) -> None:
        if node in self.assignments:
            raise ValueError(f"Node {node!r} already has a key")
        idx = bisect.bisect_left(self._sorted_keys, key)
        if idx < len(self._sorted_keys) and self._sorted_keys[idx] == key:
            raise ValueError(f"Key {key} is already in use")
        self._sorted_keys.insert(idx, key)
        self.assignments[node] = key

    def remove(self, node: T) -> int:
        """Drop ``node`` and release its key."""
        key = self.assignments.pop(node)
        idx = bisect.bisect_left(self._sorted_keys, key)
        if idx == len(self._sorted_keys) or self._sorted_keys[idx] != key:
            raise RuntimeError(f"Key {key} of {node!r} missing from sorted keys")
        del self._sorted_keys[idx]
        return key

    def insert_key_after(self, node: T) -> Optional[int]:
        """Return an unused key strictly between ``node`` and its successor.

        Returns None when the gap to the successor is below
        ``MIN_KEY_GAP``. Past the last key the next spacing step is used.
        """
        current = self.assignments[node]
        idx = bisect.bisect_right(self._sorted_keys, current)
        if idx == 0 or self._sorted_keys[idx - 1] != current:
            raise RuntimeError(f"Key {current} of {node!r} missing from sorted keys")
        if idx == len(self._sorted_keys):
            return current + constants.KEY_SPACING
        following = self._sorted_keys[idx]
        if following - current < constants.MIN_KEY_GAP:
            return None
        return current + (following - current) // 2

    def in_order(self) -> List[T]:
        """All nodes sorted by key."""
        return sorted(self.assignments, key=self.assignments.__getitem__)

    def __contains__(self, node: object) -> bool:
        return node in self.assignments

    def __len__(self) -> int:
        return len(self.assignments)
