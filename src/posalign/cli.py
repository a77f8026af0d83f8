#!/usr/bin/env python3
"""Command-line interface for posalign.

Two subcommands are provided:

1. ``build`` greedily assembles a multiple sequence alignment from
   unaligned sequences and scored candidate links, writes it as
   gap-padded FASTA, and optionally scores it against a reference
2. ``stats`` summarizes an alignment and, given a second alignment,
   compares the two

Usage:
    posalign build -s seqs.fasta -e scores.csv -o aligned.fasta
    posalign build -s seqs.fasta -e scores.csv -o aligned.fasta -t 0.5 -r ref.fasta
    posalign stats aligned.fasta ref.fasta
"""

import logging
from typing import Optional

import click

from posalign import io, metrics, pipeline, util
from posalign.config import PipelineConfig
from posalign.msa import MSAPoset

LOGGER = logging.getLogger(__name__)

FASTA_EXTENSIONS = (".fasta", ".fa", ".fas", ".afa", ".faa", ".fna")


def _check_fasta_extension(path: str, label: str) -> None:
    if not path.lower().endswith(FASTA_EXTENSIONS):
        raise click.ClickException(
            f"{label} must be a FASTA file ({', '.join(FASTA_EXTENSIONS)}). "
            f"Got: '{path}'"
        )


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    help=(
        "posalign builds multiple sequence alignments from scored "
        "pairwise links, keeping the alignment acyclic as each link is added."
    ),
)
def main() -> None:
    pass


@main.command(help="Build an alignment from sequences and link scores.")
@click.option(
    "-s",
    "--sequences",
    "sequences_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=str),
    help="Unaligned sequences in FASTA format.",
)
@click.option(
    "-e",
    "--edge-scores",
    "scores_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=str),
    help="CSV of candidate links with columns seq1,pos1,seq2,pos2,score.",
)
@click.option(
    "-o",
    "--output",
    "output_file",
    required=True,
    type=click.Path(dir_okay=False, writable=True, path_type=str),
    help="Destination gap-padded FASTA alignment.",
)
@click.option(
    "-t",
    "--threshold",
    "threshold",
    type=float,
    default=None,
    help=(
        "Only consider links scoring at least this value. "
        "By default every candidate link is considered."
    ),
)
@click.option(
    "-r",
    "--reference",
    "reference_file",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=str),
    default=None,
    help=(
        "Reference alignment (gap-padded FASTA) to score the result "
        "against. Only links between upper-case residues are counted."
    ),
)
@click.option(
    "--roc-points",
    "roc_points",
    type=int,
    default=0,
    show_default=True,
    help="Number of ROC points to report (requires --reference).",
)
@click.option(
    "--overwrite",
    is_flag=True,
    help="Overwrite the output alignment if it already exists.",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging.",
)
def build(
    sequences_file: str,
    scores_file: str,
    output_file: str,
    threshold: Optional[float],
    reference_file: Optional[str],
    roc_points: int,
    overwrite: bool,
    verbose: bool,
) -> None:
    """Run the alignment build workflow."""
    util.configure_logging(verbose)

    _check_fasta_extension(output_file, "Output file")
    if roc_points < 0:
        raise click.ClickException(
            f"--roc-points must be non-negative. Got: {roc_points}"
        )
    if roc_points > 0 and reference_file is None:
        raise click.ClickException("--roc-points requires --reference")

    config = PipelineConfig.from_cli_args(
        sequences_file=sequences_file,
        scores_file=scores_file,
        output_file=output_file,
        threshold=threshold,
        reference_file=reference_file,
        roc_points=roc_points,
        overwrite=overwrite,
        verbose=verbose,
    )
    LOGGER.info(
        f"Starting posalign build with sequences={sequences_file} "
        f"scores={scores_file} output={output_file}"
    )
    try:
        result = pipeline.run_build_pipeline(config)
    except (FileExistsError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(
        f"Aligned {result.alignment.n_edges()} pairs from "
        f"{result.n_candidates} candidate links"
    )
    for name, value in result.comparison.items():
        click.echo(f"{name}={value}")
    for point in result.roc:
        click.echo(
            f"roc precision={point.precision} recall={point.recall} "
            f"posterior={point.posterior}"
        )


def _echo_stats(alignment: MSAPoset) -> None:
    click.echo(f"identityStat={metrics.identity_statistic(alignment)}")
    click.echo(f"alignedStat={metrics.aligned_statistic(alignment)}")
    click.echo(f"meanSeqLen={metrics.mean_sequence_length(alignment)}")
    click.echo("---")
    click.echo(str(alignment), nl=False)
    click.echo("---")


@main.command(help="Summarize an alignment, or compare it to a second one.")
@click.argument(
    "alignment_file",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=str),
)
@click.argument(
    "guess_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=str),
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging.",
)
def stats(alignment_file: str, guess_file: Optional[str], verbose: bool) -> None:
    """Print statistics; the first alignment is the reference when comparing."""
    util.configure_logging(verbose)
    try:
        first = io.read_fasta_alignment(alignment_file)
        second = io.read_fasta_alignment(guess_file) if guess_file else None
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    _echo_stats(first)
    if second is None:
        return
    _echo_stats(second)
    try:
        comparison = pipeline.compare(first, second)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    for name, value in comparison.items():
        click.echo(f"{name}={value}")


if __name__ == "__main__":
    main()
