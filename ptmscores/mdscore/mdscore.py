"""
MDScore.

The MD score of a peptide is the difference between the search engine score
of the best hit with the localization of the peptide and the score of the
best hit with the same sequence and a different localization of the
modifications.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..exceptions import InvalidInputError
from ..peptide import Modification, Peptide
from ..probability import phred_score

logger = logging.getLogger(__name__)


class SearchEngineHit:
    """A peptide reported by a search engine for a spectrum, with its e-value."""

    __slots__ = ["engine", "peptide", "evalue"]

    def __init__(self, engine: str, peptide: Peptide, evalue: float):
        self.engine = engine
        self.peptide = peptide
        self.evalue = float(evalue)

    @property
    def score(self) -> float:
        return phred_score(self.evalue)

    def __repr__(self):
        return f"SearchEngineHit({self.engine!r}, {self.peptide.key!r}, {self.evalue:g})"


def get_md_score(
    peptide: Peptide,
    hits: Sequence[SearchEngineHit],
    modifications: Sequence[Modification],
) -> Optional[float]:
    """
    MD score of the peptide over the hits of every search engine.

    Args:
        peptide: The peptide of interest
        hits: Search engine hits of the spectrum
        modifications: Modifications whose localization is scored

    Returns:
        The lowest MD score over the engines, None if no engine reports both
        the localization of the peptide and another one
    """
    if not modifications:
        raise InvalidInputError("No modification given for MD score calculation.")

    sequence = peptide.sequence
    sites = peptide.get_modification_sites(modifications)

    engine_hits: Dict[str, List[SearchEngineHit]] = {}
    for hit in hits:
        engine_hits.setdefault(hit.engine, []).append(hit)

    md_score = None
    for engine, engine_list in engine_hits.items():
        best = None
        second = None
        for hit in sorted(engine_list, key=lambda h: h.evalue):
            if hit.peptide.sequence != sequence:
                continue
            hit_sites = hit.peptide.get_modification_sites(modifications)
            if hit_sites == sites:
                if best is None:
                    best = hit
            elif len(hit_sites) == len(sites) and second is None:
                second = hit
            if best is not None and second is not None:
                break

        if best is None or second is None:
            logger.debug(f"No MD score from {engine} for {peptide.key}")
            continue
        engine_score = best.score - second.score
        logger.debug(f"MD score from {engine} for {peptide.key}: {engine_score:.3f}")
        if md_score is None or engine_score < md_score:
            md_score = engine_score
    return md_score
