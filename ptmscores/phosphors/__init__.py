"""
PhosphoRS package for modification site localization.

This package provides the PhosphoRS algorithm implementation: profile
enumeration, spectrum filtering and reduction, site determining ions and
binomial probabilities normalized to per-site percentages.
"""

from .phosphors import (
    PhosphoRSResult,
    get_sequence_probabilities,
    score_modification_sites,
)

__all__ = [
    "PhosphoRSResult",
    "get_sequence_probabilities",
    "score_modification_sites",
]
