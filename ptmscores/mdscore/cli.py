#!/usr/bin/env python
# -*- coding: utf-8 -*-

import sys
import logging

import click

from ..constants import PHOSPHO_RESIDUES
from ..exceptions import PTMScoreError
from ..peptide import Modification
from ..utils import parse_peptide, setup_logging
from .mdscore import SearchEngineHit, get_md_score

logger = logging.getLogger(__name__)


def parse_hits(ctx, param, values):
    """Click callback splitting "ENGINE:SEQUENCE:EVALUE" strings"""
    hits = []
    for value in values:
        parts = value.split(":")
        if len(parts) != 3:
            raise click.BadParameter(f"expected ENGINE:SEQUENCE:EVALUE, got {value!r}")
        engine, sequence, evalue = parts
        try:
            hits.append((engine, sequence, float(evalue)))
        except ValueError:
            raise click.BadParameter(f"invalid e-value in {value!r}")
    return hits


@click.command()
@click.option(
    "--sequence",
    "sequence",
    required=True,
    help="Peptide sequence with its modifications, e.g. PEPT(Phospho)IDES",
)
@click.option(
    "--hit",
    "hits",
    multiple=True,
    callback=parse_hits,
    help="Search engine hit as ENGINE:SEQUENCE:EVALUE (repeat for every hit)",
)
@click.option(
    "--modification",
    "modification",
    default="Phospho",
    help="Name of the modification to localize (default: Phospho)",
)
@click.option(
    "--target-residues",
    "target_residues",
    default=PHOSPHO_RESIDUES,
    help="Residues the modification can be placed on (default: STY)",
)
@click.option("--debug", "debug", is_flag=True, help="Enable debug output and write debug log")
@click.option("--log-file", "log_file", type=str, help="Log file path (only used in debug mode)")
def mdscore(sequence, hits, modification, target_residues, debug, log_file):
    """MD score from the search engine ranking of competing localizations."""
    setup_logging(debug, log_file if debug else None)
    try:
        modifications = [Modification.from_openms(modification, residues=target_residues)]
        peptide = parse_peptide(sequence, modifications)
        engine_hits = [
            SearchEngineHit(engine, parse_peptide(hit_sequence, modifications), evalue)
            for engine, hit_sequence, evalue in hits
        ]
        logger.info(f"MD score {peptide.key}, {len(engine_hits)} hits")
        md_score = get_md_score(peptide, engine_hits, modifications)
    except PTMScoreError as e:
        click.echo(f"Error: {e}")
        sys.exit(1)

    if md_score is None:
        click.echo("No MD score: no competing localization found")
    else:
        click.echo(f"{md_score:.2f}")


def main():
    """Entry point for standalone MDScore CLI."""
    mdscore()


if __name__ == "__main__":
    main()
