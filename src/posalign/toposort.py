#!/usr/bin/env python3
"""Batch and online topological sorting over implicit partial orders.

Graphs are accessed only through the ``PartialOrder`` protocol
(``next``, ``prev``, ``nodes``), so the same algorithms run on the
implicit column graph of an alignment and on explicit synthetic graphs
such as ``HashOrder``.

Key functions:
- online_topological_sort: repair a valid order to accommodate one
  extra precedence constraint, touching only the affected window
- topological_sort: full DFS-based sort, ``None`` when the graph is cyclic
- is_correct_topo_sort: check an ordering against every arc
"""

import logging
from typing import (
    Any,
    Dict,
    Generic,
    Hashable,
    Iterable,
    List,
    MutableMapping,
    Optional,
    Protocol,
    Sequence,
    Set,
    Tuple,
    TypeVar,
)

from posalign.util import invert

LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)
N = TypeVar("N", bound=Hashable)


class CyclicOrderError(RuntimeError):
    """Raised when a graph expected to be acyclic admits no linear order."""


class PartialOrder(Protocol[N]):
    """Read-only view of a directed graph given by successor/predecessor sets."""

    def next(self, node: N) -> Iterable[N]:
        ...

    def prev(self, node: N) -> Iterable[N]:
        ...

    def nodes(self) -> Iterable[N]:
        ...


def online_topological_sort(
    order: PartialOrder[T],
    keys: MutableMapping[T, Any],
    x: T,
    y: T,
) -> bool:
    """Update ``keys`` so that ``x`` precedes ``y``, if that is possible.

    ``keys`` must hold a valid topological order of ``order`` (unique,
    mutually comparable keys). When the constraint ``x < y`` is already
    met nothing changes. Otherwise the nodes reachable forward from ``y``
    with keys below ``key(x)`` and backward from ``x`` with keys above
    ``key(y)`` are collected; their existing keys are handed out again,
    the backward set first. Keys of all other nodes are left untouched.

    Args:
        order: The graph the keys linearize.
        keys: Mapping from node to its key; updated in place on success.
        x: Node that must come first.
        y: Node that must come second.

    Returns:
        True if the constraint could be accommodated, False if it would
        close a cycle. ``keys`` is not modified when False is returned.
    """
    if x == y:
        return False

    lower = keys[y]
    upper = keys[x]
    if upper < lower:
        return True

    forward: Set[T] = set()
    stack = [y]
    while stack:
        node = stack.pop()
        if node in forward:
            continue
        forward.add(node)
        for succ in order.next(node):
            succ_key = keys[succ]
            if succ_key == upper:
                LOGGER.debug(f"Rejected constraint {x!r} < {y!r}: cycle")
                return False
            if succ not in forward and succ_key < upper:
                stack.append(succ)

    backward: Set[T] = set()
    stack = [x]
    while stack:
        node = stack.pop()
        if node in backward:
            continue
        backward.add(node)
        for pred in order.prev(node):
            if pred not in backward and keys[pred] > lower:
                stack.append(pred)

    ordered_bwd = _sorted_by_key(backward, keys)
    ordered_fwd = _sorted_by_key(forward, keys)
    slots = sorted(key for _, key in ordered_bwd + ordered_fwd)
    for slot, (node, _) in zip(slots, ordered_bwd + ordered_fwd):
        keys[node] = slot
    LOGGER.debug(
        f"Reordered {len(backward)} backward and {len(forward)} forward nodes"
    )
    return True


def _sorted_by_key(
    nodes: Iterable[T], keys: MutableMapping[T, Any]
) -> List[Tuple[T, Any]]:
    return sorted(((node, keys[node]) for node in nodes), key=lambda p: p[1])


def topological_sort(order: PartialOrder[T]) -> Optional[List[T]]:
    """Return the nodes of ``order`` in a topological order.

    Repeatedly walks backwards from an unplaced node to one with no
    unplaced predecessor, then runs an iterative depth-first search from
    it, appending nodes in postorder. The reversed postorder is checked
    against every arc before being returned.

    Returns:
        The sorted node list, or None if the graph contains a cycle.
    """
    remaining: Dict[T, None] = dict.fromkeys(order.nodes())
    postorder: List[T] = []
    for start in list(remaining):
        if start not in remaining:
            continue
        root = _find_minimal(order, start, remaining)
        if root is None:
            return None
        del remaining[root]
        stack = [(root, iter(order.next(root)))]
        while stack:
            node, children = stack[-1]
            for child in children:
                if child in remaining:
                    del remaining[child]
                    stack.append((child, iter(order.next(child))))
                    break
            else:
                stack.pop()
                postorder.append(node)
    postorder.reverse()
    if not is_correct_topo_sort(order, postorder):
        return None
    return postorder


def _find_minimal(
    order: PartialOrder[T], start: T, remaining: Dict[T, None]
) -> Optional[T]:
    """Walk predecessors of ``start`` until none is left unplaced."""
    visited = {start}
    current = start
    while True:
        pred = next((p for p in order.prev(current) if p in remaining), None)
        if pred is None:
            return current
        if pred in visited:
            return None
        visited.add(pred)
        current = pred


def is_correct_topo_sort(order: PartialOrder[T], proposed: Sequence[T]) -> bool:
    """True when every arc of ``order`` points forward in ``proposed``."""
    rank = invert(proposed)
    for node in proposed:
        current = rank[node]
        for succ in order.next(node):
            if succ not in rank or rank[succ] <= current:
                return False
    return True


class HashOrder(Generic[T]):
    """Explicit graph stored as successor and predecessor sets."""

    def __init__(self, nodes: Iterable[T] = ()) -> None:
        self._next: Dict[T, Dict[T, None]] = {}
        self._prev: Dict[T, Dict[T, None]] = {}
        for node in nodes:
            self.add(node)

    def add(self, node: T) -> None:
        """Add ``node`` if it is not present yet."""
        if node in self._next:
            return
        self._next[node] = {}
        self._prev[node] = {}

    def add_arc(self, x: T, y: T) -> None:
        """Add the arc ``x -> y``, adding missing endpoints."""
        self.add(x)
        self.add(y)
        self._next[x][y] = None
        self._prev[y][x] = None

    def remove_arc(self, x: T, y: T) -> None:
        if x not in self._next or y not in self._next:
            raise KeyError(f"Unknown endpoint in arc {x!r} -> {y!r}")
        self._next[x].pop(y, None)
        self._prev[y].pop(x, None)

    def next(self, node: T) -> List[T]:
        return list(self._next[node])

    def prev(self, node: T) -> List[T]:
        return list(self._prev[node])

    def nodes(self) -> List[T]:
        return list(self._next)

    def __contains__(self, node: object) -> bool:
        return node in self._next

    def __len__(self) -> int:
        return len(self._next)
