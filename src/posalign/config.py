#!/usr/bin/env python3
"""Configuration dataclasses for the posalign build pipeline.

This module provides configuration dataclasses that consolidate
pipeline parameters, making it easier to manage and pass configuration
throughout the application.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class BuildConfig:
    """Configuration for greedy alignment construction.

    Attributes:
        threshold: Minimum link score to consider. None uses every
            candidate link (max-recall alignment).
        roc_points: Number of ROC points to report against a reference
            alignment (0 = no ROC).
    """

    threshold: Optional[float] = None
    roc_points: int = 0

    def __post_init__(self) -> None:
        if self.roc_points < 0:
            raise ValueError(
                f"roc_points must be non-negative; got {self.roc_points}"
            )


@dataclass(frozen=True)
class IOConfig:
    """Configuration for input/output operations.

    Attributes:
        sequences_file: FASTA file of unaligned sequences.
        scores_file: CSV file of candidate link scores.
        output_file: Destination for the gap-padded FASTA alignment.
        reference_file: Optional reference alignment to score against.
        overwrite: Whether to overwrite existing output.
    """

    sequences_file: str
    scores_file: str
    output_file: str
    reference_file: Optional[str] = None
    overwrite: bool = False


@dataclass(frozen=True)
class PipelineConfig:
    """Complete configuration for building an alignment.

    Example:
        config = PipelineConfig(
            io=IOConfig(
                sequences_file="seqs.fasta",
                scores_file="scores.csv",
                output_file="aligned.fasta",
            ),
            build=BuildConfig(threshold=0.5),
        )
    """

    io: IOConfig
    build: BuildConfig = field(default_factory=BuildConfig)
    verbose: bool = False

    @classmethod
    def from_cli_args(
        cls,
        sequences_file: str,
        scores_file: str,
        output_file: str,
        threshold: Optional[float] = None,
        reference_file: Optional[str] = None,
        roc_points: int = 0,
        overwrite: bool = False,
        verbose: bool = False,
    ) -> "PipelineConfig":
        """Create a PipelineConfig from CLI arguments."""
        return cls(
            io=IOConfig(
                sequences_file=sequences_file,
                scores_file=scores_file,
                output_file=output_file,
                reference_file=reference_file,
                overwrite=overwrite,
            ),
            build=BuildConfig(threshold=threshold, roc_points=roc_points),
            verbose=verbose,
        )
