#!/usr/bin/env python3
"""Programmatic alignment build shared with the CLI.

``run_build_pipeline`` reads unaligned sequences and candidate link
scores, greedily builds the alignment, writes it as gap-padded FASTA and,
when a reference alignment is configured, scores the result against it.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from posalign import io, metrics, msa
from posalign.config import PipelineConfig
from posalign.scores import EdgeScores
from posalign.types import SequenceId

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Outcome of a pipeline run.

    Attributes:
        alignment: The alignment that was written.
        n_candidates: Number of candidate links considered.
        comparison: Metrics against the reference, empty without one.
        roc: ROC points against the reference, empty unless requested.
    """

    alignment: msa.MSAPoset
    n_candidates: int
    comparison: Dict[str, float] = field(default_factory=dict)
    roc: List[metrics.ROCPoint] = field(default_factory=list)


def _check_scores(
    sequences: Mapping[SequenceId, str], scores: EdgeScores
) -> None:
    for edge in scores:
        for point in (edge.point1, edge.point2):
            sequence = sequences.get(point.sequence_id)
            if sequence is None:
                raise ValueError(f"Link {edge} names unknown sequence")
            if point.position >= len(sequence):
                raise ValueError(
                    f"Link {edge} is past the end of {point.sequence_id} "
                    f"(length {len(sequence)})"
                )


def compare(gold: msa.MSAPoset, guess: msa.MSAPoset) -> Dict[str, float]:
    """Standard comparison metrics of ``guess`` against ``gold``."""
    return {
        "column_recall": metrics.column_recall(gold, guess),
        "edge_recall": metrics.edge_recall(gold, guess),
        "edge_precision": metrics.edge_precision(gold, guess),
        "edge_f1": metrics.edge_f1(gold, guess),
    }


def run_build_pipeline(config: PipelineConfig) -> BuildResult:
    """Build, write and optionally evaluate an alignment.

    Raises:
        FileExistsError: If the output exists and overwrite is not set.
        ValueError: If the inputs are malformed or inconsistent.
    """
    io_config = config.io
    if os.path.exists(io_config.output_file) and not io_config.overwrite:
        raise FileExistsError(
            f"{io_config.output_file} exists, rerun with --overwrite to replace it"
        )

    sequences = io.read_sequences(io_config.sequences_file)
    if not sequences:
        raise ValueError(f"No sequences in {io_config.sequences_file}")
    scores = io.load_edge_scores(io_config.scores_file)
    _check_scores(sequences, scores)

    threshold = config.build.threshold
    if threshold is None:
        alignment = msa.max_recall_msa(sequences, scores)
    else:
        LOGGER.info(f"Using links with score >= {threshold}")
        alignment = msa.consensus_alignment(sequences, scores, threshold)
    io.write_fasta_alignment(alignment, io_config.output_file)

    comparison: Dict[str, float] = {}
    roc: List[metrics.ROCPoint] = []
    if io_config.reference_file is not None:
        reference = msa.process_benchmark_reference(
            io.read_fasta_alignment(io_config.reference_file)
        )
        comparison = compare(reference, alignment)
        LOGGER.info(f"Comparison against reference: {comparison}")
        if config.build.roc_points > 0:
            candidates = scores if threshold is None else scores.above(threshold)
            roc = metrics.roc(
                sequences, candidates, reference, config.build.roc_points
            )

    LOGGER.info(
        f"Finished build; {alignment.n_edges()} aligned pairs written to "
        f"{io_config.output_file}"
    )
    return BuildResult(
        alignment=alignment,
        n_candidates=len(scores),
        comparison=comparison,
        roc=roc,
    )
