"""
Test imports of the package modules.
"""

import pytest
import sys
import os

# Add the parent directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def test_import_ptmscores():
    """Test importing the main package."""
    import ptmscores
    assert ptmscores.__version__ == "0.1.0"


def test_import_phosphors():
    from ptmscores.phosphors import get_sequence_probabilities, score_modification_sites
    assert get_sequence_probabilities is not None
    assert score_modification_sites is not None


def test_import_ascore():
    from ptmscores.ascore import get_ascore
    assert get_ascore is not None


def test_import_mdscore():
    from ptmscores.mdscore import SearchEngineHit, get_md_score
    assert SearchEngineHit is not None
    assert get_md_score is not None


def test_import_cli():
    from ptmscores.ptmscoresc import cli, main
    assert cli is not None
    assert main is not None


def test_all_exports():
    import ptmscores
    for name in ptmscores.__all__:
        assert hasattr(ptmscores, name)


def test_error_codes():
    from ptmscores.exceptions import InternalConsistencyError, InvalidInputError, PTMScoreError
    error = InvalidInputError("bad input")
    assert isinstance(error, PTMScoreError)
    assert isinstance(error, ValueError)
    assert error.error_code == "INVALID_INPUT"
    assert error.msg == "bad input"
    assert str(error) == "INVALID_INPUT: bad input"
    assert isinstance(InternalConsistencyError("x"), ArithmeticError)
