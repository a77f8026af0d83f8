"""Shared test fixtures for posalign tests."""

from pathlib import Path
from typing import Callable, Dict, Tuple

import pytest

from posalign.msa import MSAPoset
from posalign.types import Edge, SequenceId

SEQ0 = SequenceId("seq-0")
SEQ1 = SequenceId("seq-1")
SEQ2 = SequenceId("seq-2")


@pytest.fixture
def seq_ids() -> Tuple[SequenceId, SequenceId, SequenceId]:
    return SEQ0, SEQ1, SEQ2


@pytest.fixture
def sequences() -> Dict[SequenceId, str]:
    """Three short sequences used throughout the alignment tests."""
    return {SEQ0: "ACA", SEQ1: "CC", SEQ2: "ACC"}


@pytest.fixture
def links() -> Dict[str, Edge]:
    """Named links over ``sequences``.

    e0 and e1 are compatible, e2 is implied by them, e3 crosses them and
    e4 extends them.
    """
    return {
        "e0": Edge.of(1, 0, SEQ0, SEQ1),
        "e1": Edge.of(0, 1, SEQ1, SEQ2),
        "e2": Edge.of(1, 1, SEQ0, SEQ2),
        "e3": Edge.of(0, 2, SEQ0, SEQ2),
        "e4": Edge.of(1, 2, SEQ1, SEQ2),
    }


@pytest.fixture
def aligned(sequences, links) -> MSAPoset:
    """Alignment holding e0 and e1, i.e. one three-way column."""
    msa = MSAPoset(sequences)
    assert msa.try_adding(links["e0"])
    assert msa.try_adding(links["e1"])
    return msa


@pytest.fixture
def write_fasta(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write FASTA text to a file under ``tmp_path`` and return its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


REFERENCE_FASTA = ">seq-0\n-ACA--\n>seq-1\n--C-C-\n>seq-2\nA-C--C\n"

SCORES_CSV = (
    "seq1,pos1,seq2,pos2,score\n"
    "seq-0,1,seq-1,0,100\n"
    "seq-1,0,seq-2,1,-5\n"
    "seq-0,1,seq-2,1,10.5\n"
    "seq-0,0,seq-2,2,1000\n"
    "seq-1,1,seq-2,2,-10\n"
)


@pytest.fixture
def build_inputs(tmp_path: Path) -> Dict[str, Path]:
    """Sequence, score and reference files for a small build."""
    paths = {
        "sequences": tmp_path / "seqs.fasta",
        "scores": tmp_path / "scores.csv",
        "reference": tmp_path / "reference.fasta",
        "output": tmp_path / "aligned.fasta",
    }
    paths["sequences"].write_text(">seq-0\nACA\n>seq-1\nCC\n>seq-2\nACC\n")
    paths["scores"].write_text(SCORES_CSV)
    paths["reference"].write_text(REFERENCE_FASTA)
    return paths
