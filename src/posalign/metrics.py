#!/usr/bin/env python3
"""Metrics comparing and summarizing alignments.

Comparisons take the reference (gold) alignment first and the guess
second. Precision is recall with the roles swapped.
"""

import logging
from dataclasses import dataclass
from typing import List, Mapping, Union

import numpy as np

from posalign.msa import MSAPoset
from posalign.scores import EdgeScores
from posalign.types import Edge, SequenceId

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ROCPoint:
    """Precision and recall after accepting links down to ``posterior``."""

    precision: float
    recall: float
    posterior: float


def _ratio(num: float, denom: float, name: str) -> float:
    if denom == 0:
        LOGGER.warning(f"{name} is undefined: reference has nothing to match")
        return float("nan")
    return num / denom


def edge_recall(gold: MSAPoset, guess: MSAPoset) -> float:
    """Fraction of the gold aligned pairs that the guess also aligns."""
    gold_edges = gold.edges()
    found = sum(1 for edge in gold_edges if guess.contains_edge(edge))
    return _ratio(found, len(gold_edges), "Edge recall")


def edge_precision(gold: MSAPoset, guess: MSAPoset) -> float:
    return edge_recall(guess, gold)


def f1_score(precision: float, recall: float) -> float:
    if precision + recall == 0.0:
        return 0.0
    return 2 * (precision * recall) / (precision + recall)


def edge_f1(gold: MSAPoset, guess: MSAPoset) -> float:
    return f1_score(edge_precision(gold, guess), edge_recall(gold, guess))


def column_recall(gold: MSAPoset, guess: MSAPoset) -> float:
    """Fraction of gold columns with two or more points found exactly."""
    guess_columns = guess.points()
    counted = [c for c in gold.points() if len(c) > 1]
    found = sum(1 for c in counted if c in guess_columns)
    return _ratio(found, len(counted), "Column recall")


def _pairwise_mean(msa: MSAPoset, identity: bool) -> float:
    values = [
        msa.basic_stat(first, second, identity)
        for first in msa.taxa
        for second in msa.taxa
        if first != second
    ]
    if not values:
        return float("nan")
    return float(np.mean(values))


def identity_statistic(msa: MSAPoset) -> float:
    """Mean over ordered sequence pairs of the fraction of identical links."""
    return _pairwise_mean(msa, identity=True)


def aligned_statistic(msa: MSAPoset) -> float:
    """Mean over ordered sequence pairs of the fraction of aligned letters."""
    return _pairwise_mean(msa, identity=False)


def mean_sequence_length(msa: MSAPoset) -> float:
    lengths = [len(s) for s in msa.sequences.values()]
    if not lengths:
        return float("nan")
    return float(np.mean(lengths))


def roc(
    sequences: Mapping[SequenceId, str],
    scores: Union[EdgeScores, Mapping[Edge, float]],
    reference: MSAPoset,
    n_points: int,
) -> List[ROCPoint]:
    """Trace precision and recall along the greedy max-recall replay.

    The replay is run once to count accepted links, then again recording
    a point every ``total // n_points`` accepted links and after the last.
    """
    if n_points < 1:
        raise ValueError(f"n_points must be positive; got {n_points}")
    if not isinstance(scores, EdgeScores):
        scores = EdgeScores(scores)

    ranked = scores.ranked()
    guess = MSAPoset(sequences)
    total = sum(1 for edge, _ in ranked if guess.try_adding(edge))
    interval = max(1, total // n_points)

    guess = MSAPoset(sequences)
    result = []
    accepted = 0
    for edge, score in ranked:
        if not guess.try_adding(edge):
            continue
        accepted += 1
        if accepted == total or accepted % interval == 0:
            result.append(
                ROCPoint(
                    precision=edge_precision(reference, guess),
                    recall=edge_recall(reference, guess),
                    posterior=score,
                )
            )
    LOGGER.info(f"ROC computed with {len(result)} points over {total} links")
    return result
