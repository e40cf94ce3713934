"""
AScore package for modification site localization.

This package provides the AScore algorithm implementation for mass spectrometry
post-translational modification localization.
"""

from .ascore import get_ascore

__all__ = ["get_ascore"]
