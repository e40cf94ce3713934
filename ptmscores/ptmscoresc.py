#!/usr/bin/env python3
"""
ptmscores CLI - Integrated command line interface for modification site scoring.

This module provides a unified interface for the PhosphoRS, AScore and MDScore
algorithms.
"""

import sys

import click

from . import __version__
from .ascore.cli import ascore
from .mdscore.cli import mdscore
from .phosphors.cli import phosphors


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    ptmscores: Post-translational modification site localization scores

    Available algorithms:
      phosphors   PhosphoRS site probabilities
      ascore      AScore of a singly modified peptide
      mdscore     MD score from search engine hits

    Examples:
      ptmscores phosphors --sequence "PEPT(Phospho)IDES" --peak 229.1:100 --peak 327.1:80
      ptmscores ascore --sequence "PEPT(Phospho)IDES" --peak 229.1:100 --peak 327.1:80
      ptmscores mdscore --sequence "PEPT(Phospho)IDES" --hit comet:PEPT(Phospho)IDES:1e-5
    """
    pass


cli.add_command(phosphors)
cli.add_command(ascore)
cli.add_command(mdscore)


def main():
    """Main entry point for ptmscores CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user")
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
