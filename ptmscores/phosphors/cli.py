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
from .phosphors import PhosphoRSResult, score_modification_sites

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--sequence",
    "sequence",
    required=True,
    help="Peptide sequence with its modifications, e.g. PEPT(Phospho)IDES",
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
    "--precision",
    "precision",
    type=int,
    default=34,
    help="Number of significant digits of the probabilities (default: 34)",
)
@click.option(
    "--neutral-losses/--no-neutral-losses",
    "neutral_losses",
    default=False,
    help="Account for neutral losses of the fragment ions",
)
@click.option(
    "--debug", "debug", is_flag=True, help="Enable debug output and write debug log"
)
@click.option("--log-file", "log_file", type=str, help="Log file path (only used in debug mode)")
def phosphors(
    sequence,
    peaks,
    charge,
    modification,
    target_residues,
    fragment_mass_tolerance,
    fragment_mass_unit,
    precision,
    neutral_losses,
    debug,
    log_file,
):
    """
    Modification site localization using the PhosphoRS algorithm.

    Prints the probability in percent of every possible site of the
    modification on the peptide.
    """
    setup_logging(debug, log_file if debug else None)
    try:
        modifications = [Modification.from_openms(modification, residues=target_residues)]
        peptide = parse_peptide(sequence, modifications)
        spectrum = Spectrum.from_peaks(peaks, precursor=Precursor(charge=charge))
        settings = build_settings(
            fragment_mass_tolerance,
            fragment_mass_unit,
            charge,
            neutral_losses,
            precision=precision,
        )
        logger.info(f"PhosphoRS {peptide.key}, {spectrum.n_peaks} peaks, {settings}")

        result = score_modification_sites(
            peptide,
            modifications,
            spectrum,
            settings,
            account_neutral_losses=neutral_losses,
        )
        if result.status == PhosphoRSResult.ERROR:
            raise result.error
    except PTMScoreError as e:
        click.echo(f"Error: {e}")
        sys.exit(1)

    logger.info(f"PhosphoRS result: {result}")
    if result.status == PhosphoRSResult.TRIVIAL:
        click.echo("All possible sites are modified")
    for site, probability in sorted(result.site_probabilities.items()):
        click.echo(f"{format_site(site, peptide)}\t{probability:.2f}")


def main():
    """Entry point for standalone PhosphoRS CLI."""
    phosphors()


if __name__ == "__main__":
    main()
