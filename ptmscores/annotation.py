"""
Spectrum annotation.

Generates the theoretical fragment ions of a peptide and matches them against
the peaks of a spectrum. The scoring functions receive a SpectrumAnnotator as
a parameter so that another fragmentation model can be plugged in.
"""

import logging
import numpy as np
from typing import Dict, List, Tuple

from .config import AnnotationSettings
from .constants import ION_OFFSETS, N_TERMINAL_IONS, PROTON_MASS
from .peptide import Peptide
from .spectrum import Spectrum

logger = logging.getLogger(__name__)


class FragmentIon:
    """
    Theoretical peptide fragment ion.

    The number is the count of residues in the fragment: b3 covers residues
    1-3 and y3 covers the last three residues.
    """

    __slots__ = ["ion_type", "number", "charge", "neutral_loss", "mz"]

    def __init__(
        self, ion_type: str, number: int, charge: int, mz: float, neutral_loss: str = ""
    ):
        self.ion_type = ion_type
        self.number = number
        self.charge = charge
        self.mz = mz
        self.neutral_loss = neutral_loss

    @property
    def is_n_terminal(self) -> bool:
        return self.ion_type in N_TERMINAL_IONS

    def covered_residue(self, peptide_length: int) -> int:
        """Residue at the cleavage site: the last residue of a/b/c ions, the one
        before the first residue of x/y/z ions."""
        if self.is_n_terminal:
            return self.number
        return peptide_length - self.number

    @property
    def name(self) -> str:
        loss = f"-{self.neutral_loss}" if self.neutral_loss else ""
        return f"{self.ion_type}{self.number}{loss}{'+' * self.charge}"

    def __repr__(self):
        return f"FragmentIon({self.name}, mz={self.mz:.4f})"


class IonMatch:
    """A theoretical ion matched to an observed peak."""

    __slots__ = ["ion", "peak_mz", "peak_intensity"]

    def __init__(self, ion: FragmentIon, peak_mz: float, peak_intensity: float):
        self.ion = ion
        self.peak_mz = peak_mz
        self.peak_intensity = peak_intensity

    @property
    def error(self) -> float:
        return self.peak_mz - self.ion.mz

    def __repr__(self):
        return f"IonMatch({self.ion.name}, peak_mz={self.peak_mz:.4f})"


class SpectrumAnnotator:
    """
    Fragment ion generator and peak matcher.

    Only backbone fragment ions (a, b, c, x, y, z) are produced: precursor
    and immonium ions never take part in the scores. Theoretical ions are
    cached per peptide and settings.
    """

    def __init__(self, cache_size: int = 10000):
        self.cache_size = cache_size
        self._ion_cache: Dict[Tuple, List[FragmentIon]] = {}

    def clear_cache(self) -> None:
        self._ion_cache.clear()

    def get_expected_ions(
        self, peptide: Peptide, settings: AnnotationSettings
    ) -> List[FragmentIon]:
        """
        Theoretical fragment ions of the peptide.

        Every selected ion type is produced for every fragment length, every
        selected charge and every neutral loss in the settings.

        Args:
            peptide: The peptide with its modification matches
            settings: The annotation settings

        Returns:
            List of FragmentIon sorted by m/z
        """
        cache_key = (peptide, settings.cache_key())
        ions = self._ion_cache.get(cache_key)
        if ions is not None:
            return ions

        masses = peptide.residue_masses()
        length = len(masses)
        prefix = np.cumsum(masses)[:-1]
        suffix = np.cumsum(masses[::-1])[:-1]
        losses = [("", 0.0)] + sorted(settings["neutral_losses"].items())

        ions = []
        for ion_type in settings["ion_types"]:
            ladder = prefix if ion_type in N_TERMINAL_IONS else suffix
            neutral_masses = ladder + ION_OFFSETS[ion_type]
            for loss_name, loss_mass in losses:
                for charge in settings.fragment_charges:
                    mzs = (neutral_masses - loss_mass + charge * PROTON_MASS) / charge
                    for number in range(1, length):
                        ions.append(
                            FragmentIon(
                                ion_type,
                                number,
                                charge,
                                float(mzs[number - 1]),
                                neutral_loss=loss_name,
                            )
                        )
        ions.sort(key=lambda ion: ion.mz)

        if len(self._ion_cache) >= self.cache_size:
            self._ion_cache.clear()
        self._ion_cache[cache_key] = ions
        return ions

    def get_expected_mzs(self, peptide: Peptide, settings: AnnotationSettings) -> set:
        return {ion.mz for ion in self.get_expected_ions(peptide, settings)}

    def get_spectrum_annotation(
        self, peptide: Peptide, spectrum: Spectrum, settings: AnnotationSettings
    ) -> List[IonMatch]:
        """
        Match the theoretical ions of the peptide to the spectrum.

        Each theoretical ion is matched at most once, to the closest peak
        within the fragment tolerance.

        Args:
            peptide: The peptide with its modification matches
            spectrum: The spectrum to annotate
            settings: The annotation settings

        Returns:
            List of IonMatch
        """
        if spectrum.is_empty():
            return []

        ions = self.get_expected_ions(peptide, settings)
        if not ions:
            return []
        spectrum_mz, spectrum_intensity = spectrum.get_peaks()
        theoretical = np.array([ion.mz for ion in ions])

        right = np.searchsorted(spectrum_mz, theoretical)
        right = np.clip(right, 0, len(spectrum_mz) - 1)
        left = np.clip(right - 1, 0, len(spectrum_mz) - 1)
        right_error = np.abs(spectrum_mz[right] - theoretical)
        left_error = np.abs(spectrum_mz[left] - theoretical)
        closest = np.where(left_error < right_error, left, right)
        errors = np.minimum(left_error, right_error)

        matches = []
        for i, ion in enumerate(ions):
            if errors[i] <= settings.tolerance_in_da(ion.mz):
                peak_index = closest[i]
                matches.append(
                    IonMatch(
                        ion,
                        float(spectrum_mz[peak_index]),
                        float(spectrum_intensity[peak_index]),
                    )
                )
        return matches

    def count_matches(
        self, peptide: Peptide, spectrum: Spectrum, settings: AnnotationSettings
    ) -> int:
        return len(self.get_spectrum_annotation(peptide, spectrum, settings))
