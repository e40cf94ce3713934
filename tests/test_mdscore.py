"""
Test MDScore.
"""

import pytest

from ptmscores.exceptions import InvalidInputError
from ptmscores.mdscore import SearchEngineHit, get_md_score
from ptmscores.peptide import ModificationMatch, Peptide


@pytest.fixture
def t5_peptide(phospho):
    return Peptide("PEPSTIDEK", [ModificationMatch(phospho, 5)])


def test_md_score_single_engine(pepstidek, t5_peptide, phospho):
    hits = [
        SearchEngineHit("comet", t5_peptide, 1e-3),
        SearchEngineHit("comet", pepstidek, 1e-5),
    ]
    assert get_md_score(pepstidek, hits, [phospho]) == pytest.approx(20.0)


def test_md_score_lowest_engine(pepstidek, t5_peptide, phospho):
    hits = [
        SearchEngineHit("comet", pepstidek, 1e-5),
        SearchEngineHit("comet", t5_peptide, 1e-3),
        SearchEngineHit("msgf", pepstidek, 1e-4),
        SearchEngineHit("msgf", t5_peptide, 1e-3),
    ]
    assert get_md_score(pepstidek, hits, [phospho]) == pytest.approx(10.0)


def test_md_score_negative(pepstidek, t5_peptide, phospho):
    """A better ranked competing localization gives a negative score."""
    hits = [
        SearchEngineHit("comet", t5_peptide, 1e-6),
        SearchEngineHit("comet", pepstidek, 1e-4),
    ]
    assert get_md_score(pepstidek, hits, [phospho]) == pytest.approx(-20.0)


def test_md_score_ignores_other_peptides(pepstidek, phospho):
    """Other sequences and other modification counts do not compete."""
    hits = [
        SearchEngineHit("comet", pepstidek, 1e-5),
        SearchEngineHit("comet", Peptide("PEPSTIDEKR", [ModificationMatch(phospho, 5)]), 1e-6),
        SearchEngineHit("comet", Peptide("PEPSTIDEK"), 1e-6),
    ]
    assert get_md_score(pepstidek, hits, [phospho]) is None


def test_md_score_no_hit(pepstidek, phospho):
    assert get_md_score(pepstidek, [], [phospho]) is None


def test_md_score_no_modification(pepstidek):
    with pytest.raises(InvalidInputError):
        get_md_score(pepstidek, [], [])


def test_search_engine_hit_score(pepstidek):
    assert SearchEngineHit("comet", pepstidek, 1e-5).score == pytest.approx(50.0)
