"""
Test configuration and fixtures for ptmscores tests.
"""

import pytest
import sys
import os

# Add the parent directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ptmscores.annotation import SpectrumAnnotator
from ptmscores.config import AnnotationSettings
from ptmscores.peptide import Modification, ModificationMatch, Peptide
from ptmscores.spectrum import Spectrum

PHOSPHO_MASS = 79.966331


@pytest.fixture
def phospho():
    """Phosphorylation of S, T and Y."""
    return Modification("Phospho", PHOSPHO_MASS, residues="STY")


@pytest.fixture
def settings():
    """b and y ions, charge 1, 0.5 Da."""
    return AnnotationSettings(
        {
            "ion_types": ("b", "y"),
            "charges": (1,),
            "fragment_tolerance": 0.5,
            "fragment_tolerance_ppm": False,
            "precursor_charge": 2,
        }
    )


@pytest.fixture
def annotator():
    return SpectrumAnnotator()


@pytest.fixture
def pepstidek(phospho):
    """PEPSTIDEK phosphorylated on S4; T5 is the only other site."""
    return Peptide("PEPSTIDEK", [ModificationMatch(phospho, 4)])


@pytest.fixture
def pepstidek_spectrum(pepstidek, phospho, annotator, settings):
    """
    Every b and y ion of PEPSTIDEK phosphorylated on S4.

    The two ions telling S4 from T5 (b4 and y5) are twice as intense as the
    others.
    """
    ions = annotator.get_expected_ions(pepstidek, settings)
    peaks = []
    for ion in ions:
        site_determining = (ion.ion_type, ion.number) in (("b", 4), ("y", 5))
        peaks.append((ion.mz, 200.0 if site_determining else 100.0))
    return Spectrum.from_peaks(peaks, title="pepstidek")


# Markers for different test categories
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "cli: marks tests that test CLI functionality")
    config.addinivalue_line("markers", "algorithm: marks tests that test algorithm functionality")
