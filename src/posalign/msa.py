#!/usr/bin/env python3
"""Multiple sequence alignments as partially ordered sets of columns.

An ``MSAPoset`` partitions every (sequence, position) point into columns,
at most one point per sequence per column. Adjacent positions of a
sequence induce arcs between the columns that own them; an alignment is
valid when those arcs are acyclic, i.e. when the columns admit a linear
order consistent with every sequence.

While linearization is maintained, every column carries an order key and
each candidate link is checked with the online topological sort before it
is merged, so a rejected link never leaves the alignment cyclic. In batch
mode the keys are dropped and only the one-point-per-sequence check
applies; re-enabling the linearization sorts the whole graph once.

Key components:
- MSAPoset: the alignment aggregate (merge, split, queries, rendering)
- ImplicitPoset: precedence graph computed from the position index
- restrict, union, max_recall_msa, consensus_alignment: derived builders

Example usage:
    from posalign.msa import MSAPoset
    from posalign.types import Edge, SequenceId

    a, b = SequenceId("a"), SequenceId("b")
    msa = MSAPoset({a: "ACGT", b: "AGT"})
    msa.try_adding(Edge.of(0, 0, a, b))
    print(msa)
"""

import logging
import math
from enum import Enum
from types import MappingProxyType
from typing import (
    AbstractSet,
    Collection,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
    Union,
)

import numpy as np

from posalign import constants
from posalign.column import Column, spanning_edges
from posalign.linearization import OrderKeys
from posalign.scores import EdgeScores
from posalign.toposort import (
    CyclicOrderError,
    online_topological_sort,
    topological_sort,
)
from posalign.types import Edge, Point, SequenceId

LOGGER = logging.getLogger(__name__)


class LinearizationMode(Enum):
    """Whether order keys are maintained incrementally."""

    MAINTAINED = "maintained"
    BATCH = "batch"


class LinkOutcome(Enum):
    """Result of proposing one alignment link."""

    ADDED = "added"
    ALREADY_PRESENT = "already_present"
    CONFLICT = "conflict"
    CYCLE = "cycle"


class LinearizationDisabledError(RuntimeError):
    """Raised when the linear order is requested in batch mode."""


class ImplicitPoset:
    """Column precedence graph derived on demand from the position index.

    ``next(column)`` holds the columns owning the position right after
    each of the column's points; ``prev`` is symmetric. No arc list is
    stored. Temporary constraint arcs can be layered on top while a merge
    is being checked.
    """

    def __init__(
        self,
        index: Mapping[SequenceId, List[Column]],
        columns: Mapping[Column, None],
    ) -> None:
        self._index = index
        self._columns = columns
        self._extra_next: Dict[Column, List[Column]] = {}
        self._extra_prev: Dict[Column, List[Column]] = {}

    def next(self, column: Column) -> List[Column]:
        result: Dict[Column, None] = {}
        for sequence_id, position in column.points.items():
            row = self._index[sequence_id]
            if position + 1 < len(row):
                result[row[position + 1]] = None
        for succ in self._extra_next.get(column, ()):
            result[succ] = None
        return list(result)

    def prev(self, column: Column) -> List[Column]:
        result: Dict[Column, None] = {}
        for sequence_id, position in column.points.items():
            if position > 0:
                result[self._index[sequence_id][position - 1]] = None
        for pred in self._extra_prev.get(column, ()):
            result[pred] = None
        return list(result)

    def nodes(self) -> List[Column]:
        return list(self._columns)

    def constrain(self, x: Column, y: Column) -> None:
        """Layer the arc ``x -> y`` over the derived graph."""
        self._extra_next.setdefault(x, []).append(y)
        self._extra_prev.setdefault(y, []).append(x)

    def clear_constraints(self) -> None:
        self._extra_next.clear()
        self._extra_prev.clear()


class MSAPoset:
    """A set of columns over fixed sequences, with an optional linear order."""

    def __init__(self, sequences: Mapping[SequenceId, str]) -> None:
        """Create the alignment in which every point is its own column.

        Args:
            sequences: Mapping from sequence id (or plain name) to the
                sequence string. Any object whose ``str()`` is the
                sequence, such as a ``Bio.Seq.Seq``, is accepted.
        """
        normalized: Dict[SequenceId, str] = {}
        for key, value in sequences.items():
            sequence_id = key if isinstance(key, SequenceId) else SequenceId(key)
            if sequence_id in normalized:
                raise ValueError(f"Duplicate sequence id {sequence_id}")
            normalized[sequence_id] = str(value)

        self._taxa: List[SequenceId] = sorted(normalized)
        self._sequences: Dict[SequenceId, str] = {
            t: normalized[t] for t in self._taxa
        }
        self._index: Dict[SequenceId, List[Column]] = {}
        self._columns: Dict[Column, None] = {}
        self.poset = ImplicitPoset(self._index, self._columns)

        interleaved: List[Tuple[float, int, Column]] = []
        for rank, sequence_id in enumerate(self._taxa):
            length = len(self._sequences[sequence_id])
            row = [Column.singleton(sequence_id, i) for i in range(length)]
            self._index[sequence_id] = row
            for i, column in enumerate(row):
                self._columns[column] = None
                interleaved.append((i / (length + 1.0), rank, column))
        interleaved.sort(key=lambda item: item[:2])

        self._mode = LinearizationMode.MAINTAINED
        self._keys: Optional[OrderKeys[Column]] = OrderKeys.from_order(
            column for _, _, column in interleaved
        )
        LOGGER.debug(
            f"Created MSAPoset with {len(self._taxa)} sequences and "
            f"{len(self._columns)} singleton columns"
        )

    # === Linearization mode ===

    @property
    def mode(self) -> LinearizationMode:
        return self._mode

    def disable_linearization(self) -> None:
        """Drop the order keys; merges then skip cycle detection."""
        self._mode = LinearizationMode.BATCH
        self._keys = None

    def enable_linearization(self) -> None:
        """Sort the current columns and restore maintained order keys.

        Raises:
            CyclicOrderError: If the columns accumulated in batch mode do
                not admit a linear order.
        """
        if self._mode is LinearizationMode.MAINTAINED:
            return
        ordered = topological_sort(self.poset)
        if ordered is None:
            raise CyclicOrderError(
                "Columns built in batch mode admit no linear order"
            )
        self._keys = OrderKeys.from_order(ordered)
        self._mode = LinearizationMode.MAINTAINED
        LOGGER.info(f"Linearization enabled over {len(ordered)} columns")

    def rebuild_dense_keys(self) -> None:
        """Re-sort all columns and reassign evenly spaced keys."""
        keys = self._require_keys()
        ordered = topological_sort(self.poset)
        if ordered is None:
            raise CyclicOrderError("Maintained columns admit no linear order")
        keys.rebuild(ordered)

    def _require_keys(self) -> OrderKeys[Column]:
        if self._keys is None:
            raise LinearizationDisabledError(
                "Linearization is disabled; call enable_linearization() first"
            )
        return self._keys

    # === Queries ===

    @property
    def taxa(self) -> Tuple[SequenceId, ...]:
        """Sequence ids in sorted order."""
        return tuple(self._taxa)

    @property
    def sequences(self) -> Mapping[SequenceId, str]:
        return MappingProxyType(self._sequences)

    @property
    def n_taxa(self) -> int:
        return len(self._taxa)

    def column(self, sequence_id: SequenceId, position: int) -> Column:
        """Return the column that owns ``position`` of ``sequence_id``."""
        return self._column_at(Point(sequence_id, position))

    def _column_at(self, point: Point) -> Column:
        row = self._index.get(point.sequence_id)
        if row is None:
            raise ValueError(f"Unknown sequence id {point.sequence_id}")
        if point.position >= len(row):
            raise ValueError(
                f"Position {point.position} is out of range for "
                f"{point.sequence_id} (length {len(row)})"
            )
        return row[point.position]

    def columns(self) -> List[Column]:
        return list(self._columns)

    def linearized_columns(self) -> List[Column]:
        """Columns sorted by their order keys."""
        return self._require_keys().in_order()

    def key_of(self, column: Column) -> int:
        return self._require_keys().key_of(column)

    def contains_edge(self, edge: Edge) -> bool:
        return self._column_at(edge.point1) is self._column_at(edge.point2)

    def edges(self) -> List[Edge]:
        """Every pair of aligned points, one edge per pair."""
        result = []
        for column in self._columns:
            members = [t for t in self._taxa if t in column]
            for i, first in enumerate(members):
                for second in members[i + 1 :]:
                    result.append(
                        Edge.of(
                            column.position(first),
                            column.position(second),
                            first,
                            second,
                        )
                    )
        return result

    def n_edges(self) -> int:
        return sum(math.comb(len(column), 2) for column in self._columns)

    def points(self) -> Set[FrozenSet[Point]]:
        return {column.as_points() for column in self._columns}

    def relevant_columns(self, sequence_ids: AbstractSet[SequenceId]) -> List[Column]:
        """Columns holding at least one point of ``sequence_ids``."""
        return [
            column
            for column in self._columns
            if not column.sequence_ids.isdisjoint(sequence_ids)
        ]

    def is_full(self, column: Column) -> bool:
        return column.sequence_ids == set(self._sequences)

    def char_at(self, column: Column, sequence_id: SequenceId) -> str:
        return self._sequences[sequence_id][column.position(sequence_id)]

    def basic_stat(
        self, first: SequenceId, second: SequenceId, identity: bool
    ) -> float:
        """Fraction of ``first``'s letters aligned to a letter of ``second``.

        With ``identity`` set, only aligned letters that are equal count.
        Returns NaN when ``first`` is empty.
        """
        values = []
        for column in self._index[first]:
            if second not in column:
                values.append(0.0)
            elif not identity:
                values.append(1.0)
            else:
                same = self.char_at(column, first) == self.char_at(column, second)
                values.append(1.0 if same else 0.0)
        if not values:
            return float("nan")
        return float(np.mean(values))

    # === Merging ===

    def try_adding(
        self, item: Union[Edge, Column, Mapping[SequenceId, int]]
    ) -> bool:
        """Add a link, or every link spanned by a column's points.

        For a single edge, returns False when the points already share a
        column, when their columns share a sequence, or when merging them
        would make the alignment cyclic. For a column (or a mapping of
        sequence ids to positions) the spanning links are added as one
        batch: if any of them fails, merges made by the batch are undone
        and False is returned. A link of the batch that is already present
        counts as a failure, as it does for a single edge.

        A failed call leaves the columns unchanged, although order keys
        may have been permuted (they remain a valid linear order).
        """
        if isinstance(item, Edge):
            return self.add_link(item) is LinkOutcome.ADDED
        points = item.points if isinstance(item, Column) else item
        return self._add_points(points)

    def add_link(self, edge: Edge) -> LinkOutcome:
        """Add ``edge`` and report why it was or was not merged."""
        return self._try_adding(edge, commit=True)

    def is_valid_addition(self, edge: Edge) -> bool:
        """Check whether ``edge`` could be added, without merging.

        Order keys may be permuted as a side effect.
        """
        return self._try_adding(edge, commit=False) is LinkOutcome.ADDED

    def _try_adding(self, edge: Edge, commit: bool) -> LinkOutcome:
        merge_to = self._column_at(edge.point1)
        merge_from = self._column_at(edge.point2)
        if merge_to is merge_from:
            return LinkOutcome.ALREADY_PRESENT
        if not merge_to.is_disjoint(merge_from):
            return LinkOutcome.CONFLICT

        if self._keys is not None:
            try:
                for before, after in self._arcs(merge_from):
                    x = merge_to if before is merge_from else before
                    y = merge_to if after is merge_from else after
                    if not online_topological_sort(
                        self.poset, self._keys.assignments, x, y
                    ):
                        LOGGER.debug(f"Link {edge} rejected: would create a cycle")
                        return LinkOutcome.CYCLE
                    self.poset.constrain(x, y)
            finally:
                self.poset.clear_constraints()

        if commit:
            self._merge(merge_to, merge_from)
        return LinkOutcome.ADDED

    def _arcs(self, column: Column) -> List[Tuple[Column, Column]]:
        """Arcs of the derived graph incident to ``column``."""
        result = []
        for sequence_id, position in column.points.items():
            row = self._index[sequence_id]
            if position > 0:
                result.append((row[position - 1], column))
            if position + 1 < len(row):
                result.append((column, row[position + 1]))
        return result

    def _merge(self, merge_to: Column, merge_from: Column) -> None:
        for sequence_id, position in merge_from.points.items():
            row = self._index[sequence_id]
            if row[position] is not merge_from:
                raise RuntimeError(
                    f"Position index of {sequence_id}:{position} does not "
                    f"point at the merged column"
                )
            row[position] = merge_to
        merge_to._absorb(merge_from)
        del self._columns[merge_from]
        if self._keys is not None:
            self._keys.remove(merge_from)

    def _add_points(self, points: Mapping[SequenceId, int]) -> bool:
        committed: List[Tuple[Column, Column, FrozenSet[SequenceId]]] = []
        for edge in spanning_edges(points):
            merge_to = self._column_at(edge.point1)
            merge_from = self._column_at(edge.point2)
            kept = merge_to.sequence_ids
            outcome = self._try_adding(edge, commit=True)
            if outcome is LinkOutcome.ADDED:
                committed.append((merge_to, merge_from, kept))
            else:
                for merged, original, kept_ids in reversed(committed):
                    self._split_into(merged, kept_ids, original)
                LOGGER.debug(
                    f"Column batch rejected at {edge} ({outcome.value}); "
                    f"undid {len(committed)} merges"
                )
                return False
        return True

    # === Splitting ===

    @staticmethod
    def is_valid_split(column: Column, keep: AbstractSet[SequenceId]) -> bool:
        """True when ``keep`` is a non-empty proper subset of the column."""
        if len(keep) == 0 or len(keep) >= len(column):
            return False
        return keep <= column.sequence_ids

    def split(self, column: Column, keep: Iterable[SequenceId]) -> Column:
        """Move the points of ``column`` outside ``keep`` to a new column.

        The new column is placed immediately after ``column`` in the
        linear order.

        Returns:
            The newly created column.

        Raises:
            ValueError: If ``column`` is not live in this alignment or
                ``keep`` is not a non-empty proper subset of its sequences.
        """
        if column not in self._columns:
            raise ValueError(f"{column!r} is not a column of this alignment")
        keep = frozenset(keep)
        if not self.is_valid_split(column, keep):
            raise ValueError(
                f"Invalid split of {column!r}: keep set "
                f"{sorted(str(t) for t in keep)} must be a non-empty proper "
                f"subset of the column's sequences"
            )
        created = Column()
        self._split_into(column, keep, created)
        LOGGER.debug(f"Split {column!r} off into {created!r}")
        return created

    def _split_into(
        self, column: Column, keep: AbstractSet[SequenceId], target: Column
    ) -> None:
        key = None
        if self._keys is not None:
            key = self._keys.insert_key_after(column)
            if key is None:
                self.rebuild_dense_keys()
                key = self._keys.insert_key_after(column)
            if key is None:
                raise RuntimeError(f"No order key available after {column!r}")
        moved = [t for t in column.points if t not in keep]
        column._move_to(target, moved)
        for sequence_id in moved:
            self._index[sequence_id][target.position(sequence_id)] = target
        self._columns[target] = None
        if self._keys is not None:
            self._keys.add(target, key)

    # === Sequence edits ===

    def set_sequence(self, sequence_id: SequenceId, sequence: str) -> None:
        """Replace a sequence's letters, keeping its length."""
        current = self._sequences.get(sequence_id)
        if current is None:
            raise ValueError(f"Unknown sequence id {sequence_id}")
        sequence = str(sequence)
        if len(current) != len(sequence):
            raise ValueError(
                f"Replacement for {sequence_id} has length {len(sequence)}; "
                f"expected {len(current)}"
            )
        self._sequences[sequence_id] = sequence

    def fix_with_random_characters(
        self, allowed: Iterable[str], rng: np.random.Generator
    ) -> None:
        """Replace every letter outside ``allowed`` by a random allowed one."""
        letters = sorted(set(allowed))
        if not letters:
            raise ValueError("allowed must contain at least one letter")
        for sequence_id in self._taxa:
            replaced = [
                c if c in letters else letters[int(rng.integers(len(letters)))]
                for c in self._sequences[sequence_id]
            ]
            self.set_sequence(sequence_id, "".join(replaced))

    # === Copy and rendering ===

    def copy(self) -> "MSAPoset":
        """Deep copy with fresh column objects and the same partition."""
        result = MSAPoset(self._sequences)
        result.disable_linearization()
        for column in self._columns:
            if len(column) > 1 and not result.try_adding(column):
                raise RuntimeError(f"Could not replay {column!r} into copy")
        if self._mode is LinearizationMode.MAINTAINED:
            result.enable_linearization()
        return result

    def to_padded_strings(
        self, restriction: Optional[AbstractSet[SequenceId]] = None
    ) -> Dict[SequenceId, str]:
        """Gap-padded row per sequence, following the linear order.

        With ``restriction``, only those sequences are rendered and only
        columns touching them are kept.
        """
        rows = [
            t for t in self._taxa if restriction is None or t in restriction
        ]
        builders: Dict[SequenceId, List[str]] = {t: [] for t in rows}
        for column in self.linearized_columns():
            if restriction is not None and column.sequence_ids.isdisjoint(rows):
                continue
            for sequence_id in rows:
                if sequence_id in column:
                    builders[sequence_id].append(self.char_at(column, sequence_id))
                else:
                    builders[sequence_id].append(constants.GAP_CHAR)
        return {t: "".join(chars) for t, chars in builders.items()}

    def to_string(
        self, restriction: Optional[AbstractSet[SequenceId]] = None
    ) -> str:
        lines = [
            f"{row}{constants.ROW_SEPARATOR}{sequence_id}\n"
            for sequence_id, row in self.to_padded_strings(restriction).items()
        ]
        return "".join(lines)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return (
            f"MSAPoset(n_taxa={len(self._taxa)}, "
            f"n_columns={len(self._columns)}, mode={self._mode.value})"
        )


def restrict(msa: MSAPoset, sequence_ids: AbstractSet[SequenceId]) -> MSAPoset:
    """Project ``msa`` onto a subset of its sequences."""
    kept = [t for t in msa.taxa if t in sequence_ids]
    result = MSAPoset({t: msa.sequences[t] for t in kept})
    for column in msa.columns():
        points = {t: p for t, p in column.points.items() if t in sequence_ids}
        if not result.try_adding(points):
            raise RuntimeError(f"Restriction of {column!r} was rejected")
    return result


def union(alignments: Collection[MSAPoset]) -> Optional[MSAPoset]:
    """Combine the columns of several alignments.

    Returns:
        The combined alignment, or None if any column of the inputs is
        rejected, including a column whose links are already present.

    Raises:
        ValueError: If two inputs disagree on the letters of a sequence.
    """
    sequences: Dict[SequenceId, str] = {}
    for msa in alignments:
        for sequence_id, sequence in msa.sequences.items():
            current = sequences.setdefault(sequence_id, sequence)
            if current != sequence:
                raise ValueError(
                    f"Alignments disagree on the sequence of {sequence_id}"
                )
    result = MSAPoset(sequences)
    for msa in alignments:
        for column in msa.columns():
            if not result.try_adding(column):
                LOGGER.info(f"Union failed: {column!r} is incompatible")
                return None
    return result


def max_recall_msa(
    sequences: Mapping[SequenceId, str],
    scores: Union[EdgeScores, Mapping[Edge, float]],
) -> MSAPoset:
    """Greedily add candidate links from the highest score down.

    Ties are broken by the edges' canonical order, so the result only
    depends on the score table.
    """
    if not isinstance(scores, EdgeScores):
        scores = EdgeScores(scores)
    if len(scores) == 0:
        LOGGER.warning("No candidate links; returning the empty alignment")
    result = MSAPoset(sequences)
    accepted = 0
    for edge in scores:
        if result.try_adding(edge):
            accepted += 1
    LOGGER.info(
        f"Max-recall alignment accepted {accepted} of {len(scores)} links "
        f"({result.n_edges()} aligned pairs)"
    )
    return result


def consensus_alignment(
    sequences: Mapping[SequenceId, str],
    scores: Union[EdgeScores, Mapping[Edge, float]],
    threshold: float,
) -> MSAPoset:
    """Max-recall alignment over links scoring at least ``threshold``."""
    if not isinstance(scores, EdgeScores):
        scores = EdgeScores(scores)
    return max_recall_msa(sequences, scores.above(threshold))


def process_benchmark_reference(msa: MSAPoset) -> MSAPoset:
    """Keep only links between upper-case letters, then upper-case all."""
    result = MSAPoset(msa.sequences)
    result.disable_linearization()
    for column in msa.columns():
        processed = {
            t: p
            for t, p in column.points.items()
            if msa.char_at(column, t).isupper()
        }
        result.try_adding(processed)
    for sequence_id in result.taxa:
        result.set_sequence(sequence_id, result.sequences[sequence_id].upper())
    result.enable_linearization()
    return result


def deep_equals(first: MSAPoset, second: MSAPoset) -> bool:
    """Same sequences and the same set of aligned pairs."""
    if dict(first.sequences) != dict(second.sequences):
        return False
    return set(first.edges()) == set(second.edges())
