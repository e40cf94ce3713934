"""
Spectrum module.

This module contains the Peak, Precursor and Spectrum classes used as the
in-memory representation of an MS/MS spectrum during scoring.
"""

import logging
import numpy as np
from typing import Iterable, List, Optional, Tuple
import pyopenms

from .exceptions import InvalidInputError

logger = logging.getLogger(__name__)


class Peak:
    """A single (m/z, intensity) pair."""

    __slots__ = ["mz", "intensity"]

    def __init__(self, mz: float, intensity: float):
        self.mz = float(mz)
        self.intensity = float(intensity)

    def __eq__(self, other):
        if not isinstance(other, Peak):
            return False
        return self.mz == other.mz and self.intensity == other.intensity

    def __hash__(self):
        return hash((self.mz, self.intensity))

    def __repr__(self):
        return f"Peak(mz={self.mz:.4f}, intensity={self.intensity:.1f})"


class Precursor:
    """Precursor ion of a spectrum."""

    __slots__ = ["mz", "charge"]

    def __init__(self, mz: float = 0.0, charge: int = 0):
        self.mz = float(mz)
        self.charge = int(charge)

    def __repr__(self):
        return f"Precursor(mz={self.mz:.4f}, charge={self.charge})"


class Spectrum:
    """
    Class representing a fragment ion spectrum.

    Peaks are stored as two numpy arrays sorted by m/z. The spectrum is keyed
    by m/z: two peaks with the same m/z are rejected.
    """

    def __init__(
        self,
        mz_array=None,
        intensity_array=None,
        precursor: Optional[Precursor] = None,
        title: str = "",
    ):
        """
        Initialize a new Spectrum instance.

        Args:
            mz_array: Array of m/z values
            intensity_array: Array of intensity values
            precursor: Precursor of the spectrum
            title: Spectrum title, used in log messages
        """
        mz = np.asarray(mz_array if mz_array is not None else [], dtype=float)
        intensity = np.asarray(
            intensity_array if intensity_array is not None else [], dtype=float
        )
        if mz.shape != intensity.shape:
            raise InvalidInputError(
                f"m/z and intensity arrays differ in length ({len(mz)} != {len(intensity)})"
            )

        order = np.argsort(mz, kind="stable")
        self.mz = mz[order]
        self.intensity = intensity[order]
        if len(self.mz) > 1 and np.any(np.diff(self.mz) == 0):
            duplicated = self.mz[1:][np.diff(self.mz) == 0][0]
            raise InvalidInputError(f"Duplicate m/z {duplicated} in spectrum {title}")

        self.precursor = precursor if precursor is not None else Precursor()
        self.title = title

    @classmethod
    def from_peaks(
        cls,
        peaks: Iterable,
        precursor: Optional[Precursor] = None,
        title: str = "",
    ) -> "Spectrum":
        """
        Build a spectrum from (m/z, intensity) pairs or Peak objects.

        Args:
            peaks: Iterable of Peak or (mz, intensity) tuples
            precursor: Precursor of the spectrum
            title: Spectrum title

        Returns:
            A new Spectrum
        """
        mzs = []
        intensities = []
        for peak in peaks:
            if isinstance(peak, Peak):
                mzs.append(peak.mz)
                intensities.append(peak.intensity)
            else:
                mzs.append(float(peak[0]))
                intensities.append(float(peak[1]))
        return cls(mzs, intensities, precursor=precursor, title=title)

    @classmethod
    def from_openms(cls, ms_spectrum: pyopenms.MSSpectrum) -> "Spectrum":
        """
        Convert a pyopenms MSSpectrum.

        Args:
            ms_spectrum: The pyopenms spectrum

        Returns:
            A new Spectrum
        """
        mz, intensity = ms_spectrum.get_peaks()
        precursor = None
        precursors = ms_spectrum.getPrecursors()
        if precursors:
            precursor = Precursor(precursors[0].getMZ(), precursors[0].getCharge())
        title = ms_spectrum.getNativeID()
        if isinstance(title, bytes):
            title = title.decode()
        return cls(mz, intensity, precursor=precursor, title=title)

    def to_openms(self) -> pyopenms.MSSpectrum:
        """Convert to a pyopenms MSSpectrum (MS level 2)."""
        ms_spectrum = pyopenms.MSSpectrum()
        ms_spectrum.setMSLevel(2)
        ms_spectrum.set_peaks((self.mz.tolist(), self.intensity.tolist()))
        if self.precursor.mz > 0:
            precursor = pyopenms.Precursor()
            precursor.setMZ(self.precursor.mz)
            precursor.setCharge(self.precursor.charge)
            ms_spectrum.setPrecursors([precursor])
        if self.title:
            ms_spectrum.setNativeID(self.title)
        return ms_spectrum

    @property
    def n_peaks(self) -> int:
        return len(self.mz)

    def __len__(self):
        return len(self.mz)

    def __repr__(self):
        return f"Spectrum(title={self.title!r}, n_peaks={self.n_peaks})"

    def is_empty(self) -> bool:
        return self.n_peaks == 0

    @property
    def min_mz(self) -> float:
        return float(self.mz[0]) if self.n_peaks else 0.0

    @property
    def max_mz(self) -> float:
        return float(self.mz[-1]) if self.n_peaks else 0.0

    def get_peaks(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Get peak arrays.

        Returns:
            Tuple of (m/z array, intensity array)
        """
        return self.mz, self.intensity

    def get_peak_list(self) -> List[Peak]:
        return [Peak(mz, it) for mz, it in zip(self.mz, self.intensity)]

    def get_window_indexes(self, min_mz: float, max_mz: float) -> Tuple[int, int]:
        """
        Index range of the peaks with min_mz <= m/z < max_mz.

        Returns:
            (start, end) with end exclusive
        """
        start = int(np.searchsorted(self.mz, min_mz, side="left"))
        end = int(np.searchsorted(self.mz, max_mz, side="left"))
        return start, end

    def find_peaks_in_range(self, mz_min: float, mz_max: float) -> np.ndarray:
        """
        Indices of the peaks with mz_min <= m/z <= mz_max.

        Args:
            mz_min: Minimum m/z value
            mz_max: Maximum m/z value

        Returns:
            Array of peak indices
        """
        start = np.searchsorted(self.mz, mz_min, side="left")
        end = np.searchsorted(self.mz, mz_max, side="right")
        return np.arange(start, end)

    def n_peaks_above_threshold(self, start: int, end: int, threshold: float) -> int:
        """Number of peaks in [start, end) with an intensity >= threshold."""
        return int(np.count_nonzero(self.intensity[start:end] >= threshold))

    def select(self, indexes, title: Optional[str] = None) -> "Spectrum":
        """
        New spectrum made of the peaks at the given indexes.

        Args:
            indexes: Peak indexes to keep
            title: Title of the new spectrum, defaults to this spectrum's

        Returns:
            A new Spectrum sharing this spectrum's precursor
        """
        indexes = np.asarray(indexes, dtype=int)
        return Spectrum(
            self.mz[indexes],
            self.intensity[indexes],
            precursor=self.precursor,
            title=self.title if title is None else title,
        )

    def sub_spectrum(self, min_mz: float, max_mz: float) -> "Spectrum":
        """New spectrum with the peaks of min_mz <= m/z < max_mz."""
        start, end = self.get_window_indexes(min_mz, max_mz)
        return self.select(np.arange(start, end), title=f"{self.title}_{min_mz:.2f}")
