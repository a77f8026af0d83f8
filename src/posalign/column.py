#!/usr/bin/env python3
"""Alignment columns.

A ``Column`` maps sequence ids to positions, holding at most one position
per sequence. Columns are shared, mutable objects owned by an
``MSAPoset``; only the owning alignment changes their membership, so
callers should treat them as read-only handles.

Columns compare by identity: two distinct columns with the same points
are still different nodes of the precedence graph.
"""

from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from posalign.types import Edge, Point, SequenceId


class Column:
    """Equivalence class of aligned (sequence, position) points."""

    __slots__ = ("_points",)

    def __init__(self, points: Optional[Mapping[SequenceId, int]] = None) -> None:
        self._points: Dict[SequenceId, int] = dict(points) if points else {}

    @classmethod
    def singleton(cls, sequence_id: SequenceId, position: int) -> "Column":
        return cls({sequence_id: position})

    @property
    def points(self) -> Mapping[SequenceId, int]:
        """Read-only view of the sequence id to position mapping.

        Positions are indices into the sequence, not letters.
        """
        return MappingProxyType(self._points)

    @property
    def sequence_ids(self) -> FrozenSet[SequenceId]:
        return frozenset(self._points)

    def position(self, sequence_id: SequenceId) -> int:
        return self._points[sequence_id]

    def as_points(self) -> FrozenSet[Point]:
        return frozenset(Point(t, p) for t, p in self._points.items())

    def is_disjoint(self, other: "Column") -> bool:
        """True when the two columns share no sequence."""
        return self._points.keys().isdisjoint(other._points.keys())

    def spanning_edges(self) -> List[Edge]:
        return spanning_edges(self._points)

    def _absorb(self, other: "Column") -> None:
        self._points.update(other._points)
        other._points.clear()

    def _move_to(self, target: "Column", sequence_ids: Iterable[SequenceId]) -> None:
        for sequence_id in sequence_ids:
            target._points[sequence_id] = self._points.pop(sequence_id)

    def __contains__(self, sequence_id: object) -> bool:
        return sequence_id in self._points

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        inner = ", ".join(f"{t}={p}" for t, p in sorted(self._points.items()))
        return f"Column({inner})"


def spanning_edges(points: Mapping[SequenceId, int]) -> List[Edge]:
    """Return a minimal set of edges whose closure joins all ``points``.

    Every edge links the first point (in mapping order) to one of the
    others, so ``len(points) - 1`` edges are returned.
    """
    items = list(points.items())
    if len(items) < 2:
        return []
    base_id, base_pos = items[0]
    return [Edge.of(base_pos, pos, base_id, other) for other, pos in items[1:]]
