"""
MDScore package.

Localization confidence derived from the ranking of competing localizations
by the search engines.
"""

from .mdscore import SearchEngineHit, get_md_score

__all__ = ["SearchEngineHit", "get_md_score"]
