"""
Test the spectrum model.
"""

import numpy as np
import pytest
from pyopenms import MSSpectrum

from ptmscores.exceptions import InvalidInputError
from ptmscores.spectrum import Peak, Precursor, Spectrum


def test_peaks_sorted_by_mz():
    spectrum = Spectrum([300.0, 100.0, 200.0], [3.0, 1.0, 2.0])
    assert spectrum.mz.tolist() == [100.0, 200.0, 300.0]
    assert spectrum.intensity.tolist() == [1.0, 2.0, 3.0]
    assert spectrum.min_mz == 100.0
    assert spectrum.max_mz == 300.0
    assert len(spectrum) == 3


def test_duplicate_mz_rejected():
    with pytest.raises(InvalidInputError):
        Spectrum([100.0, 100.0], [1.0, 2.0])


def test_length_mismatch_rejected():
    with pytest.raises(InvalidInputError):
        Spectrum([100.0, 200.0], [1.0])


def test_empty_spectrum():
    spectrum = Spectrum()
    assert spectrum.is_empty()
    assert spectrum.min_mz == 0.0
    assert spectrum.max_mz == 0.0


def test_from_peaks():
    spectrum = Spectrum.from_peaks([Peak(200.0, 2.0), (100.0, 1.0)], title="s1")
    assert spectrum.get_peak_list() == [Peak(100.0, 1.0), Peak(200.0, 2.0)]
    assert spectrum.title == "s1"


def test_windows():
    spectrum = Spectrum([100.0, 150.0, 200.0, 250.0], [1.0, 2.0, 3.0, 4.0])
    assert spectrum.get_window_indexes(100.0, 200.0) == (0, 2)
    assert spectrum.sub_spectrum(100.0, 200.0).mz.tolist() == [100.0, 150.0]
    assert spectrum.find_peaks_in_range(100.0, 200.0).tolist() == [0, 1, 2]
    assert spectrum.n_peaks_above_threshold(0, 4, 2.5) == 2


def test_select_keeps_precursor():
    spectrum = Spectrum([100.0, 200.0], [1.0, 2.0], precursor=Precursor(500.0, 2))
    selected = spectrum.select([1])
    assert selected.mz.tolist() == [200.0]
    assert selected.precursor.charge == 2


def test_openms_conversion():
    spectrum = Spectrum(
        [100.0, 200.0], [1.0, 2.0], precursor=Precursor(500.25, 2), title="scan=1"
    )
    ms_spectrum = spectrum.to_openms()
    assert isinstance(ms_spectrum, MSSpectrum)
    assert ms_spectrum.size() == 2

    converted = Spectrum.from_openms(ms_spectrum)
    assert np.allclose(converted.mz, spectrum.mz)
    assert np.allclose(converted.intensity, spectrum.intensity)
    assert converted.precursor.mz == pytest.approx(500.25)
    assert converted.precursor.charge == 2
    assert converted.title == "scan=1"
