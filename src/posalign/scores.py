#!/usr/bin/env python3
"""Weighted candidate links.

``EdgeScores`` holds one score per candidate edge and iterates from the
highest score down. Ties are broken by the edges' canonical sort key, so
a greedy replay over the scores is fully deterministic.

Scores usually come from a pairwise aligner as posterior matrices, one
per pair of sequences, where entry ``[i, j]`` is the probability that
position ``i`` of the first sequence is aligned to position ``j`` of the
second. ``from_posterior_matrix`` turns such a matrix into edges.
"""

import logging
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np

from posalign.types import Edge, SequenceId

LOGGER = logging.getLogger(__name__)


class EdgeScores:
    """Mapping from candidate edge to score, iterated best first."""

    def __init__(self, scores: Optional[Mapping[Edge, float]] = None) -> None:
        self._scores: Dict[Edge, float] = {}
        if scores:
            for edge, score in scores.items():
                self.set(edge, score)

    def set(self, edge: Edge, score: float) -> None:
        score = float(score)
        if np.isnan(score):
            raise ValueError(f"Score of {edge} is NaN")
        self._scores[edge] = score

    def get(self, edge: Edge, default: float = 0.0) -> float:
        return self._scores.get(edge, default)

    def ranked(self) -> List[Tuple[Edge, float]]:
        """All (edge, score) pairs, highest score first."""
        return sorted(
            self._scores.items(), key=lambda item: (-item[1], item[0].sort_key)
        )

    def above(self, threshold: float) -> "EdgeScores":
        """Edges scoring at least ``threshold``."""
        return EdgeScores(
            {edge: score for edge, score in self._scores.items() if score >= threshold}
        )

    def update_from_posterior_matrix(
        self,
        first: SequenceId,
        second: SequenceId,
        matrix: np.ndarray,
        min_score: Optional[float] = None,
    ) -> None:
        """Add one edge per matrix entry.

        Args:
            first: Sequence indexing the matrix rows.
            second: Sequence indexing the matrix columns.
            matrix: 2D array of link scores.
            min_score: If given, entries below it are skipped.
        """
        matrix = np.asarray(matrix, dtype=float)
        if matrix.ndim != 2:
            raise ValueError(
                f"Posterior matrix for {first}/{second} must be 2D; "
                f"got shape {matrix.shape}"
            )
        if min_score is None:
            mask = np.ones(matrix.shape, dtype=bool)
        else:
            mask = matrix >= min_score
        rows, cols = np.nonzero(mask)
        for i, j in zip(rows.tolist(), cols.tolist()):
            self.set(Edge.of(i, j, first, second), matrix[i, j])
        LOGGER.debug(
            f"Loaded {len(rows)} candidate links between {first} and {second}"
        )

    @classmethod
    def from_posterior_matrix(
        cls,
        first: SequenceId,
        second: SequenceId,
        matrix: np.ndarray,
        min_score: Optional[float] = None,
    ) -> "EdgeScores":
        scores = cls()
        scores.update_from_posterior_matrix(first, second, matrix, min_score)
        return scores

    def __iter__(self) -> Iterator[Edge]:
        return iter([edge for edge, _ in self.ranked()])

    def __contains__(self, edge: object) -> bool:
        return edge in self._scores

    def __getitem__(self, edge: Edge) -> float:
        return self._scores[edge]

    def __len__(self) -> int:
        return len(self._scores)

    def __repr__(self) -> str:
        return f"EdgeScores(n_edges={len(self._scores)})"
