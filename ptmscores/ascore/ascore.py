import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..annotation import SpectrumAnnotator
from ..config import AnnotationSettings
from ..constants import ASCORE_DEPTH_WEIGHTS, ASCORE_MAX_DEPTH, WINDOW_SIZE
from ..exceptions import InvalidInputError
from ..peptide import Modification, Peptide
from ..probability import binomial_tail_float, phred_score
from ..spectrum import Spectrum

logger = logging.getLogger(__name__)


def get_reduced_spectra(
    spectrum: Spectrum, max_depth: int = ASCORE_MAX_DEPTH
) -> List[Spectrum]:
    """
    Reduced spectra keeping the d most intense peaks of every 100 m/z window.

    Windows are a fixed 100 m/z wide as in the AScore publication and start
    at the first peak. They are not anchored at m/z 0 nor scaled with the
    fragment tolerance, so the peaks sharing a window do not depend on the
    tolerance. Peaks of equal intensity are taken by increasing m/z.

    Args:
        spectrum: The spectrum to reduce
        max_depth: Number of depths

    Returns:
        List of spectra, index d - 1 holding depth d
    """
    if spectrum.is_empty():
        return [spectrum] * max_depth

    mz, intensity = spectrum.get_peaks()
    bins = np.floor((mz - mz[0]) / WINDOW_SIZE).astype(int)
    order = np.lexsort((mz, -intensity, bins))

    # rank of every peak inside its window
    ranks = np.empty(len(mz), dtype=int)
    previous_bin = None
    rank = 0
    for index in order:
        if bins[index] != previous_bin:
            previous_bin = bins[index]
            rank = 0
        ranks[index] = rank
        rank += 1

    return [
        spectrum.select(np.flatnonzero(ranks < depth), title=f"{spectrum.title}_{depth}")
        for depth in range(1, max_depth + 1)
    ]


def _check_modifications(
    peptide: Peptide, modifications: Sequence[Modification]
) -> None:
    if not modifications:
        raise InvalidInputError("No modification given for AScore calculation.")
    n_modifications = peptide.count_variable_matches(modifications)
    if n_modifications == 0:
        raise InvalidInputError(
            "Given modifications not found in the peptide for AScore calculation."
        )
    if n_modifications > 1:
        raise InvalidInputError(
            f"AScore localizes a single modification, {n_modifications} found "
            f"on {peptide.key}."
        )


def get_depth_scores(
    peptide: Peptide,
    candidates: Dict[int, Peptide],
    reduced_spectra: Sequence[Spectrum],
    annotator: SpectrumAnnotator,
    settings: AnnotationSettings,
) -> List[Dict[int, float]]:
    """
    -10 log10(P) of every site at every depth.

    At depth d, P is the probability of matching at least n of the N
    expected ions of the peptide with p = d / 100.

    Returns:
        List indexed by depth - 1 of dictionaries site -> score
    """
    n_ions = len(annotator.get_expected_ions(peptide, settings))
    depth_scores = []
    for i, reduced in enumerate(reduced_spectra):
        p = (i + 1) / 100.0
        scores = {}
        for site, candidate in candidates.items():
            n_matches = annotator.count_matches(candidate, reduced, settings)
            scores[site] = phred_score(binomial_tail_float(n_matches, n_ions, p))
        depth_scores.append(scores)
    return depth_scores


def get_peptide_scores(depth_scores: Sequence[Dict[int, float]]) -> Dict[int, float]:
    """Depth scores of every site summed with the AScore depth weights."""
    peptide_scores: Dict[int, float] = {}
    for weight, scores in zip(ASCORE_DEPTH_WEIGHTS, depth_scores):
        for site, score in scores.items():
            peptide_scores[site] = peptide_scores.get(site, 0.0) + weight * score
    return peptide_scores


def get_best_depth(
    depth_scores: Sequence[Dict[int, float]], best_site: int, second_site: int
) -> int:
    """
    Index of the depth separating the two sites the most.

    Later depths win ties; 0 is returned when the best site never scores
    higher than the second.
    """
    best_i = 0
    max_diff = 0.0
    for i, scores in enumerate(depth_scores):
        diff = scores[best_site] - scores[second_site]
        if diff >= max_diff:
            max_diff = diff
            best_i = i
    return best_i


def get_score_for_positions(
    depth_index: int,
    site_1: int,
    site_2: int,
    peptide: Peptide,
    candidates: Dict[int, Peptide],
    reduced_spectra: Sequence[Spectrum],
    annotator: SpectrumAnnotator,
    settings: AnnotationSettings,
) -> Dict[int, float]:
    """
    AScore of one pair of sites.

    Only the fragment ions carrying exactly one of the two sites are counted:
    ions whose covered residue lies in [lower site, upper site).

    Args:
        depth_index: Index of the reduced spectrum to use
        site_1: First site
        site_2: Second site
        peptide: The peptide of interest
        candidates: Peptide with the modification at each site
        reduced_spectra: The reduced spectra
        annotator: The spectrum annotator
        settings: Scoring annotation settings

    Returns:
        {site: score} for the site with the lower probability, or both
        sites at 0 when the probabilities are equal
    """
    position_min = min(site_1, site_2)
    position_max = max(site_1, site_2)
    length = len(peptide)
    spectrum = reduced_spectra[depth_index]
    p = (depth_index + 1) / 100.0

    def in_range(ion) -> bool:
        return position_min <= ion.covered_residue(length) < position_max

    n_ions = sum(
        1 for ion in annotator.get_expected_ions(peptide, settings) if in_range(ion)
    )

    def tail(site: int) -> float:
        matches = annotator.get_spectrum_annotation(candidates[site], spectrum, settings)
        n_matches = sum(1 for match in matches if in_range(match.ion))
        return binomial_tail_float(n_matches, n_ions, p)

    p_1 = tail(position_min)
    p_2 = tail(position_max)
    logger.debug(
        f"AScore sites {position_min}/{position_max}, depth {depth_index + 1}: "
        f"N={n_ions}, P={p_1:.3e}/{p_2:.3e}"
    )
    if p_1 == p_2:
        return {position_min: 0.0, position_max: 0.0}
    if p_1 < p_2:
        return {position_min: phred_score(p_1) - phred_score(p_2)}
    return {position_max: phred_score(p_2) - phred_score(p_1)}


def _keep_lowest(current: Optional[Dict[int, float]], scores: Dict[int, float]):
    # lowest minimum score wins, equal minimums are merged
    if current is None:
        return scores
    current_min = min(current.values())
    new_min = min(scores.values())
    if new_min < current_min:
        return scores
    if new_min == current_min:
        merged = dict(current)
        merged.update(scores)
        return merged
    return current


def get_ascore(
    peptide: Peptide,
    modifications: Sequence[Modification],
    spectrum: Spectrum,
    settings: AnnotationSettings,
    annotator: Optional[SpectrumAnnotator] = None,
    account_neutral_losses: bool = True,
) -> Dict[int, float]:
    """
    AScore of a peptide carrying a single variable modification.

    Args:
        peptide: The peptide of interest
        modifications: Modifications to localize, of which the peptide
            carries exactly one
        spectrum: The fragment ion spectrum
        settings: The annotation settings
        annotator: Spectrum annotator; defaults to SpectrumAnnotator()
        account_neutral_losses: Whether to account for neutral losses

    Returns:
        Dictionary site -> AScore. A single possible site scores 100; tied
        sites score 0.
    """
    _check_modifications(peptide, modifications)

    sites = set()
    for modification in modifications:
        sites.update(peptide.get_potential_modification_sites(modification))
    sites = sorted(sites)
    if not sites:
        raise InvalidInputError(
            f"No potential modification site found on {peptide.key} for AScore."
        )
    if len(sites) == 1:
        return {sites[0]: 100.0}

    if annotator is None:
        annotator = SpectrumAnnotator()
    modification = modifications[0]
    scoring_settings = settings.scoring_settings(
        modification.mass, account_neutral_losses, spectrum.max_mz
    )

    no_mod_peptide = peptide.no_mod_peptide(modifications)
    candidates = {
        site: no_mod_peptide.with_modification_sites(modification, (site,))
        for site in sites
    }
    reduced_spectra = get_reduced_spectra(spectrum)
    depth_scores = get_depth_scores(
        peptide, candidates, reduced_spectra, annotator, scoring_settings
    )
    peptide_scores = get_peptide_scores(depth_scores)

    ranked = sorted(set(peptide_scores.values()), reverse=True)
    best_sites = [site for site in sites if peptide_scores[site] == ranked[0]]
    logger.debug(f"AScore {peptide.key}: peptide scores {peptide_scores}")

    def score_pair(best_site: int, second_site: int) -> Dict[int, float]:
        depth_index = get_best_depth(depth_scores, best_site, second_site)
        return get_score_for_positions(
            depth_index,
            best_site,
            second_site,
            peptide,
            candidates,
            reduced_spectra,
            annotator,
            scoring_settings,
        )

    result = None
    if len(best_sites) == 1:
        best_site = best_sites[0]
        second_sites = [site for site in sites if peptide_scores[site] == ranked[1]]
        for second_site in second_sites:
            result = _keep_lowest(result, score_pair(best_site, second_site))
    else:
        for best_site in best_sites:
            for second_site in best_sites:
                if second_site != best_site:
                    result = _keep_lowest(result, score_pair(best_site, second_site))
            if min(result.values()) == 0:
                break

    return result
