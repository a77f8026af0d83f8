#!/usr/bin/env python3
"""Reading and writing alignments, sequences and link scores.

Alignments are stored as gap-padded FASTA: one row per sequence, ``-``
or ``.`` for gaps, all rows the same length. Lines starting with ``;``
and blank lines are ignored. Raw sequences use plain FASTA, and
candidate link scores a CSV file with the columns
``seq1,pos1,seq2,pos2,score`` (positions are 0-indexed into the
ungapped sequences).
"""

import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqIO.FastaIO import SimpleFastaParser
from Bio.SeqRecord import SeqRecord

from posalign import constants
from posalign.msa import MSAPoset
from posalign.scores import EdgeScores
from posalign.types import Edge, SequenceId

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _read_records(path: PathLike) -> List[Tuple[str, str]]:
    with open(path, encoding="utf-8") as handle:
        lines = [
            line
            for line in handle
            if line.strip() and not line.startswith(constants.COMMENT_PREFIX)
        ]
    if lines and not lines[0].startswith(">"):
        raise ValueError(
            f"{path}: sequences must be preceded by a header line '>name'"
        )
    return list(SimpleFastaParser(iter(lines)))


def read_fasta_alignment(path: PathLike) -> MSAPoset:
    """Parse a gap-padded FASTA alignment.

    Raises:
        ValueError: On duplicate names, residues before the first header,
            invalid characters, or rows of unequal padded length.
    """
    rows: Dict[SequenceId, str] = {}
    for title, row in _read_records(path):
        sequence_id = SequenceId(title.strip())
        if sequence_id in rows:
            raise ValueError(f"{path}: duplicated sequence name {sequence_id}")
        if not constants.ALIGNED_ROW_PATTERN.fullmatch(row):
            raise ValueError(f"{path}: invalid characters in row {sequence_id}")
        rows[sequence_id] = row
    if not rows:
        raise ValueError(f"{path}: no sequences found")

    lengths = {len(row) for row in rows.values()}
    if len(lengths) > 1:
        raise ValueError(
            f"{path}: all gap-padded rows must have the same length; "
            f"got lengths {sorted(lengths)}"
        )

    sequences = {
        t: "".join(c for c in row if c not in constants.GAP_CHARS)
        for t, row in rows.items()
    }
    msa = MSAPoset(sequences)
    msa.disable_linearization()
    next_position = {t: 0 for t in rows}
    for p in range(lengths.pop()):
        points = {}
        for sequence_id, row in rows.items():
            if row[p] not in constants.GAP_CHARS:
                points[sequence_id] = next_position[sequence_id]
                next_position[sequence_id] += 1
        msa.try_adding(points)
    msa.enable_linearization()
    LOGGER.info(
        f"Read alignment of {msa.n_taxa} sequences and "
        f"{len(msa.columns())} columns from {path}"
    )
    return msa


def write_fasta_alignment(msa: MSAPoset, path: PathLike) -> None:
    """Write the linearized alignment as gap-padded FASTA."""
    records = [
        SeqRecord(Seq(row), id=str(sequence_id), description="")
        for sequence_id, row in msa.to_padded_strings().items()
    ]
    SeqIO.write(records, str(path), "fasta")
    LOGGER.info(f"Wrote alignment of {len(records)} sequences to {path}")


def read_sequences(path: PathLike) -> Dict[SequenceId, str]:
    """Read unaligned sequences, dropping any gap characters."""
    sequences: Dict[SequenceId, str] = {}
    for title, sequence in _read_records(path):
        sequence_id = SequenceId(title.strip())
        if sequence_id in sequences:
            raise ValueError(f"{path}: duplicated sequence name {sequence_id}")
        sequences[sequence_id] = "".join(
            c for c in sequence if c not in constants.GAP_CHARS
        )
    LOGGER.info(f"Read {len(sequences)} sequences from {path}")
    return sequences


def load_edge_scores(
    path: PathLike, scores: Optional[EdgeScores] = None
) -> EdgeScores:
    """Load candidate links from CSV.

    When the same link appears more than once the highest score is kept.
    """
    scores = EdgeScores() if scores is None else scores
    with open(path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        missing = set(constants.SCORE_CSV_FIELDS) - set(reader.fieldnames or ())
        if missing:
            raise ValueError(f"{path}: missing CSV columns {sorted(missing)}")
        for line_number, record in enumerate(reader, start=2):
            try:
                edge = Edge.of(
                    int(record["pos1"]),
                    int(record["pos2"]),
                    SequenceId(record["seq1"]),
                    SequenceId(record["seq2"]),
                )
                score = float(record["score"])
            except (TypeError, ValueError) as e:
                raise ValueError(f"{path}:{line_number}: {e}") from e
            if edge in scores:
                score = max(score, scores[edge])
            scores.set(edge, score)
    LOGGER.info(f"Loaded {len(scores)} candidate links from {path}")
    return scores
