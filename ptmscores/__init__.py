"""
ptmscores: Mass spectrometry post-translational modification site scoring.

This package provides modification site localization scores computed from a
peptide and its fragment ion spectrum: PhosphoRS, AScore and MDScore.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .annotation import SpectrumAnnotator
from .ascore import get_ascore
from .config import AnnotationSettings
from .exceptions import InternalConsistencyError, InvalidInputError, PTMScoreError
from .mdscore import SearchEngineHit, get_md_score
from .peptide import Modification, ModificationMatch, Peptide
from .phosphors import (
    PhosphoRSResult,
    get_sequence_probabilities,
    score_modification_sites,
)
from .spectrum import Peak, Precursor, Spectrum

__all__ = [
    "AnnotationSettings",
    "InternalConsistencyError",
    "InvalidInputError",
    "Modification",
    "ModificationMatch",
    "PTMScoreError",
    "Peak",
    "Peptide",
    "PhosphoRSResult",
    "Precursor",
    "SearchEngineHit",
    "Spectrum",
    "SpectrumAnnotator",
    "get_ascore",
    "get_md_score",
    "get_sequence_probabilities",
    "score_modification_sites",
]
