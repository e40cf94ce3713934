#!/usr/bin/env python
# -*- coding: utf-8 -*-

import sys
import logging

import click

from ..constants import PHOSPHO_RESIDUES
from ..exceptions import PTMScoreError
from ..peptide import Modification
from ..spectrum import Precursor, Spectrum
from ..utils import (
    build_settings,
    format_site,
    parse_peaks,
    parse_peptide,
    setup_logging,
)
from .ascore import get_ascore

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--sequence",
    "sequence",
    required=True,
    help="Peptide sequence with its modification, e.g. PEPT(Phospho)IDES",
)
@click.option(
    "--peak",
    "peaks",
    multiple=True,
    required=True,
    callback=parse_peaks,
    help="Fragment peak as mz:intensity (repeat for every peak)",
)
@click.option(
    "--charge",
    "charge",
    type=int,
    default=2,
    help="Precursor charge (default: 2)",
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
@click.option(
    "--fragment-mass-tolerance",
    "fragment_mass_tolerance",
    type=float,
    default=0.5,
    help="Fragment mass tolerance value (default: 0.5)",
)
@click.option(
    "--fragment-mass-unit",
    "fragment_mass_unit",
    type=click.Choice(["Da", "ppm"]),
    default="Da",
    help="Tolerance unit (default: Da)",
)
@click.option(
    "--neutral-losses/--no-neutral-losses",
    "neutral_losses",
    default=False,
    help="Account for neutral losses of the fragment ions",
)
@click.option("--debug", "debug", is_flag=True, help="Enable debug output and write debug log")
@click.option("--log-file", "log_file", type=str, help="Log file path (only used in debug mode)")
def ascore(
    sequence,
    peaks,
    charge,
    modification,
    target_residues,
    fragment_mass_tolerance,
    fragment_mass_unit,
    neutral_losses,
    debug,
    log_file,
):
    """AScore algorithm for modification site localization."""
    setup_logging(debug, log_file if debug else None)
    try:
        modifications = [Modification.from_openms(modification, residues=target_residues)]
        peptide = parse_peptide(sequence, modifications)
        spectrum = Spectrum.from_peaks(peaks, precursor=Precursor(charge=charge))
        settings = build_settings(
            fragment_mass_tolerance, fragment_mass_unit, charge, neutral_losses
        )
        logger.info(f"AScore {peptide.key}, {spectrum.n_peaks} peaks, {settings}")
        scores = get_ascore(
            peptide,
            modifications,
            spectrum,
            settings,
            account_neutral_losses=neutral_losses,
        )
    except PTMScoreError as e:
        click.echo(f"Error: {e}")
        sys.exit(1)

    logger.info(f"AScore result: {scores}")
    for site, score in sorted(scores.items()):
        click.echo(f"{format_site(site, peptide)}\t{score:.2f}")


def main():
    """Entry point for standalone AScore CLI."""
    ascore()


if __name__ == "__main__":
    main()
