"""Logging and input helpers shared by the command line tools."""

import logging
from typing import Optional, Sequence

import click
from pyopenms import AASequence

from .config import AnnotationSettings
from .constants import NEUTRAL_LOSSES
from .exceptions import InvalidInputError
from .peptide import Modification, Peptide


def setup_logging(debug: bool, log_file: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        debug: Log at DEBUG level instead of WARNING
        log_file: Optional file also receiving the log records
    """
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = logging.Formatter(log_format)
    level = logging.DEBUG if debug else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Set third-party library log levels
    logging.getLogger("numpy").setLevel(logging.WARNING)
    logging.getLogger("scipy").setLevel(logging.WARNING)
    logging.getLogger("pyopenms").setLevel(logging.WARNING)


# --- Command line input parsing ---
def parse_peaks(ctx, param, values):
    """Click callback turning "mz:intensity" strings into (mz, intensity) pairs"""
    peaks = []
    for value in values:
        try:
            mz, intensity = value.split(":")
            peaks.append((float(mz), float(intensity)))
        except ValueError:
            raise click.BadParameter(f"expected mz:intensity, got {value!r}")
    return peaks


def parse_peptide(sequence: str, modifications: Sequence[Modification]) -> Peptide:
    """Peptide from an OpenMS sequence string such as PEPT(Phospho)IDES."""
    try:
        aa_sequence = AASequence.fromString(sequence)
    except Exception as e:
        raise InvalidInputError(f"Cannot parse peptide sequence {sequence}: {e}") from e
    return Peptide.from_openms(aa_sequence, modifications)


def build_settings(
    fragment_mass_tolerance: float,
    fragment_mass_unit: str,
    charge: int,
    neutral_losses: bool,
    precision: Optional[int] = None,
) -> AnnotationSettings:
    """Annotation settings from the command line options."""
    config = {
        "fragment_tolerance": fragment_mass_tolerance,
        "fragment_tolerance_ppm": fragment_mass_unit == "ppm",
        "precursor_charge": charge,
        "charges": tuple(range(1, max(1, charge - 1) + 1)),
        "neutral_losses": dict(NEUTRAL_LOSSES) if neutral_losses else {},
    }
    if precision is not None:
        config["precision"] = precision
    return AnnotationSettings(config)


def format_site(site: int, peptide: Peptide) -> str:
    if site == 0:
        return "N-term"
    if site == len(peptide) + 1:
        return "C-term"
    return f"{peptide.sequence[site - 1]}{site}"
