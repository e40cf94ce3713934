"""
Test theoretical fragment ions and spectrum annotation.
"""

import pytest

from ptmscores.annotation import FragmentIon
from ptmscores.config import AnnotationSettings
from ptmscores.peptide import Peptide
from ptmscores.spectrum import Spectrum


def test_expected_ions(pepstidek, annotator, settings):
    """b and y ions of every length, sorted by m/z."""
    ions = annotator.get_expected_ions(pepstidek, settings)
    assert len(ions) == 16
    mzs = [ion.mz for ion in ions]
    assert mzs == sorted(mzs)

    by_name = {ion.name: ion.mz for ion in ions}
    assert by_name["b2+"] == pytest.approx(227.1026, abs=1e-3)
    assert by_name["y1+"] == pytest.approx(147.1128, abs=1e-3)
    # b4 carries the phosphorylation
    assert by_name["b4+"] == pytest.approx(491.1537, abs=1e-3)


def test_expected_ions_cached(pepstidek, annotator, settings):
    first = annotator.get_expected_ions(pepstidek, settings)
    assert annotator.get_expected_ions(pepstidek, settings) is first
    annotator.clear_cache()
    assert annotator.get_expected_ions(pepstidek, settings) is not first


def test_expected_ions_charges_and_losses(annotator):
    peptide = Peptide("PEPTIDEK")
    settings = AnnotationSettings(
        {
            "charges": (1, 2),
            "precursor_charge": 2,
            "neutral_losses": {"H2O": 18.010565},
        }
    )
    ions = annotator.get_expected_ions(peptide, settings)
    # 2 ion types x 7 lengths x 2 charges x (no loss + H2O)
    assert len(ions) == 56
    by_name = {ion.name: ion.mz for ion in ions}
    assert by_name["b2++"] == pytest.approx((226.09535 + 2 * 1.00727646688) / 2, abs=1e-3)
    assert by_name["b2-H2O+"] == pytest.approx(227.1026 - 18.010565, abs=1e-3)


def test_covered_residue():
    assert FragmentIon("b", 3, 1, 300.0).covered_residue(9) == 3
    assert FragmentIon("y", 3, 1, 300.0).covered_residue(9) == 6


def test_spectrum_annotation(pepstidek, annotator, settings):
    spectrum = Spectrum([147.3, 227.0, 400.0], [10.0, 20.0, 30.0])
    matches = annotator.get_spectrum_annotation(pepstidek, spectrum, settings)

    assert sorted(match.ion.name for match in matches) == ["b2+", "y1+"]
    assert annotator.count_matches(pepstidek, spectrum, settings) == 2
    for match in matches:
        assert abs(match.error) <= 0.5


def test_spectrum_annotation_ppm(pepstidek, annotator):
    settings = AnnotationSettings({"fragment_tolerance": 10.0, "fragment_tolerance_ppm": True})
    spectrum = Spectrum([147.1128, 227.2], [10.0, 20.0])
    matches = annotator.get_spectrum_annotation(pepstidek, spectrum, settings)
    assert [match.ion.name for match in matches] == ["y1+"]


def test_empty_spectrum_annotation(pepstidek, annotator, settings):
    assert annotator.get_spectrum_annotation(pepstidek, Spectrum(), settings) == []
