#!/usr/bin/env python3
"""Value types for alignment points and links.

A ``Point`` names one residue: a sequence identifier plus a 0-indexed
position in that sequence. An ``Edge`` is an unordered pair of points
proposing that the two residues be aligned to each other.
"""

from dataclasses import dataclass
from typing import Tuple

from posalign import constants


@dataclass(frozen=True, order=True)
class SequenceId:
    """Opaque, totally ordered sequence identifier."""

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(
                f"SequenceId name must be a non-empty string; got {self.name!r}"
            )

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, order=True)
class Point:
    """A (sequence, position) pair."""

    sequence_id: SequenceId
    position: int

    def __post_init__(self) -> None:
        if self.position < 0:
            raise ValueError(
                f"position must be non-negative; got {self.position} "
                f"for {self.sequence_id}"
            )

    def __str__(self) -> str:
        return f"({self.position}, {self.sequence_id})"


@dataclass(frozen=True, eq=False)
class Edge:
    """Unordered pair of points that should share a column.

    ``point1`` and ``point2`` keep the order they were given in, but two
    edges compare equal (and hash equally) regardless of that order.
    """

    point1: Point
    point2: Point

    @classmethod
    def of(
        cls,
        index1: int,
        index2: int,
        sequence_id1: SequenceId,
        sequence_id2: SequenceId,
    ) -> "Edge":
        """Build an edge from two positions and their sequence ids."""
        return cls(Point(sequence_id1, index1), Point(sequence_id2, index2))

    @property
    def sort_key(self) -> Tuple[Point, Point]:
        """Canonical (smaller point, larger point) pair."""
        if self.point2 < self.point1:
            return (self.point2, self.point1)
        return (self.point1, self.point2)

    @property
    def is_intra_sequence(self) -> bool:
        return self.point1.sequence_id == self.point2.sequence_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return self.sort_key == other.sort_key

    def __hash__(self) -> int:
        return hash(self.sort_key)

    def __str__(self) -> str:
        return f"({self.point1}, {self.point2})"

    @classmethod
    def from_string(cls, text: str) -> "Edge":
        """Parse the ``((index1, id1), (index2, id2))`` form.

        The first sequence name must not contain ``"), ("`` followed by an
        index, otherwise the split between the two points is ambiguous.
        """
        match = constants.EDGE_PATTERN.fullmatch(text.strip())
        if match is None:
            raise ValueError(f"Cannot parse edge from {text!r}")
        index1, name1, index2, name2 = match.groups()
        return cls.of(
            int(index1), int(index2), SequenceId(name1), SequenceId(name2)
        )
