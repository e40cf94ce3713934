"""
Configuration module for ptmscores.

This module contains the AnnotationSettings class, which manages the settings
used to generate and match theoretical fragment ions during scoring.
"""

import copy
import logging
from typing import Dict, Any, Optional

from .constants import DEFAULT_ANNOTATION_SETTINGS, ION_OFFSETS, PPM
from .exceptions import InvalidInputError

logger = logging.getLogger(__name__)


class AnnotationSettings:
    """
    Annotation settings for one peptide and spectrum.

    Holds the selected fragment ion types, fragment charges, fragment mass
    tolerance (Da or ppm), the neutral losses to account for, the precursor
    charge and the precision of the decimal arithmetic.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize a new AnnotationSettings instance.

        Args:
            config_dict: Optional dictionary overriding the default settings
        """
        self.config = copy.deepcopy(DEFAULT_ANNOTATION_SETTINGS)

        if config_dict:
            self.update(config_dict)

    def update(self, config_dict: Dict[str, Any]) -> None:
        """
        Update settings, ignoring unknown keys with a warning.

        Args:
            config_dict: Dictionary containing new settings
        """
        for key, value in config_dict.items():
            if key in self.config:
                self.config[key] = value
            else:
                logger.warning(f"Unknown annotation setting: {key}")
        self.validate()

    def validate(self) -> None:
        """Check that the settings can be used for annotation."""
        tolerance = self.config["fragment_tolerance"]
        if tolerance is None or tolerance <= 0:
            unit = "ppm" if self.config["fragment_tolerance_ppm"] else "Da"
            raise InvalidInputError(
                f"Fragment tolerance must be positive, got {tolerance} {unit}."
            )
        for ion_type in self.config["ion_types"]:
            if ion_type not in ION_OFFSETS:
                raise InvalidInputError(f"Unsupported fragment ion type: {ion_type}")
        if not self.config["charges"] or min(self.config["charges"]) < 1:
            raise InvalidInputError(
                f"Fragment charges must be positive, got {self.config['charges']}"
            )
        if self.config["precision"] < 1:
            raise InvalidInputError(
                f"Precision must be at least one digit, got {self.config['precision']}"
            )

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.config[key] = value

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.config)

    def copy(self) -> "AnnotationSettings":
        return AnnotationSettings(self.to_dict())

    def __getitem__(self, key: str) -> Any:
        return self.config[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.config[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.config

    def __repr__(self):
        return f"AnnotationSettings({self.config!r})"

    @property
    def fragment_charges(self) -> tuple:
        """Selected fragment charges, bounded by the precursor charge when known."""
        charges = sorted(set(self.config["charges"]))
        precursor_charge = self.config.get("precursor_charge")
        if precursor_charge:
            bounded = [c for c in charges if c <= max(1, precursor_charge)]
            if bounded:
                return tuple(bounded)
        return tuple(charges)

    def tolerance_in_da(self, reference_mz: float) -> float:
        """
        Fragment tolerance in Dalton at the given m/z.

        Args:
            reference_mz: m/z where the tolerance is evaluated (ppm only)

        Returns:
            The tolerance in Da
        """
        tolerance = self.config["fragment_tolerance"]
        if self.config["fragment_tolerance_ppm"]:
            return tolerance * reference_mz * PPM
        return tolerance

    def cache_key(self) -> tuple:
        """Hashable summary of the settings that change the theoretical ions."""
        return (
            tuple(self.config["ion_types"]),
            self.fragment_charges,
            tuple(sorted(self.config["neutral_losses"].items())),
        )

    def scoring_settings(
        self,
        modification_mass: float,
        account_neutral_losses: bool,
        reference_mz: float,
    ) -> "AnnotationSettings":
        """
        Settings restricted to what the localization scores use.

        Neutral losses are dropped entirely unless account_neutral_losses is
        set, and a loss whose mass equals the modification mass within the
        fragment tolerance is always dropped.

        Args:
            modification_mass: Mass of the modification being localized
            account_neutral_losses: Whether neutral losses should be scored
            reference_mz: m/z used to convert a ppm tolerance

        Returns:
            A new AnnotationSettings instance
        """
        scoring = self.copy()
        losses = {}
        if account_neutral_losses:
            tolerance = self.tolerance_in_da(reference_mz)
            for name, mass in self.config["neutral_losses"].items():
                if abs(mass - modification_mass) > tolerance:
                    losses[name] = mass
                else:
                    logger.debug(
                        f"Neutral loss {name} ({mass}) ignored, same mass as the modification"
                    )
        scoring["neutral_losses"] = losses
        return scoring
