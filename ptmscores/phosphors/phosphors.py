import logging
from decimal import Context, Decimal
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..annotation import SpectrumAnnotator
from ..config import AnnotationSettings
from ..constants import (
    FILTER_MAX_PEAKS,
    FILTER_WINDOW_FACTOR,
    MAX_DEPTH,
    MZ_DECIMALS,
    WINDOW_SIZE,
)
from ..exceptions import InternalConsistencyError, InvalidInputError, PTMScoreError
from ..peptide import Modification, Peptide
from ..probability import (
    ONE,
    ZERO,
    binomial_tail,
    check_probability,
    make_context,
    resolution_limit,
)
from ..spectrum import Spectrum

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)

Profile = Tuple[int, ...]


class PhosphoRSResult:
    """
    Outcome of a PhosphoRS run.

    status is one of SUCCESS (profiles scored), TRIVIAL (as many sites as
    modifications, every site at 100%) or ERROR (error holds the message).
    """

    SUCCESS = "success"
    TRIVIAL = "trivial"
    ERROR = "error"

    def __init__(
        self,
        status: str,
        site_probabilities: Optional[Dict[int, float]] = None,
        profile_probabilities: Optional[Dict[Profile, float]] = None,
        profile_p_values: Optional[Dict[Profile, Decimal]] = None,
        error: Optional[PTMScoreError] = None,
    ):
        self.status = status
        self.site_probabilities = site_probabilities or {}
        self.profile_probabilities = profile_probabilities or {}
        self.profile_p_values = profile_p_values or {}
        self.error = error

    def __repr__(self):
        if self.status == self.ERROR:
            return f"PhosphoRSResult(error={self.error})"
        return f"PhosphoRSResult({self.status}, {self.site_probabilities})"


# --- Modification sites and profiles ---
def count_modifications(peptide: Peptide, modifications: Sequence[Modification]) -> int:
    """Number of variable matches of the scored modifications on the peptide."""
    if not modifications:
        raise InvalidInputError("No modification given for PhosphoRS calculation.")
    n_modifications = peptide.count_variable_matches(modifications)
    if n_modifications == 0:
        raise InvalidInputError(
            "Given modifications not found in the peptide for PhosphoRS calculation."
        )
    return n_modifications


def get_possible_sites(
    peptide: Peptide, modifications: Sequence[Modification]
) -> List[int]:
    """Sorted union of the potential sites of all the modifications."""
    sites = set()
    for modification in modifications:
        sites.update(peptide.get_potential_modification_sites(modification))
    return sorted(sites)


def get_possible_modification_profiles(
    possible_sites: Sequence[int], n_modifications: int
) -> List[Profile]:
    """
    All placements of n indistinguishable modifications on the sites.

    Profiles of size i are built by extending every profile of size i - 1
    with each site greater than its last site, so every profile is sorted and
    appears once.

    Args:
        possible_sites: Possible sites in increasing order
        n_modifications: Number of modifications to place

    Returns:
        List of profiles (tuples of sites)
    """
    result = [(site,) for site in possible_sites]
    for _ in range(2, n_modifications + 1):
        result = [
            profile + (site,)
            for profile in result
            for site in possible_sites
            if site > profile[-1]
        ]
    return result


# --- Spectrum filtering and reduction ---
def filter_spectrum(spectrum: Spectrum, settings: AnnotationSettings) -> Spectrum:
    """
    Keep the most intense peaks in windows of 10 times the fragment tolerance.

    With a tolerance d <= 10 Da, windows are 10 d wide and keep 10 peaks;
    above, windows are 100 wide and keep int(100 / d) peaks. This bounds the
    random match probability p to 1.

    Args:
        spectrum: The spectrum to filter
        settings: Annotation settings giving the fragment tolerance

    Returns:
        The filtered spectrum, the spectrum itself if no peak was removed
    """
    if spectrum.is_empty():
        return spectrum

    tolerance = settings.tolerance_in_da(spectrum.max_mz)
    if tolerance <= 10:
        window = FILTER_WINDOW_FACTOR * tolerance
        max_peaks = FILTER_MAX_PEAKS
    else:
        window = WINDOW_SIZE
        max_peaks = int(window / tolerance)

    if max_peaks < 1:
        raise InvalidInputError("All peaks removed by filtering.")

    mz, intensity = spectrum.get_peaks()
    bins = np.floor((mz - mz[0]) / window).astype(int)
    keep = np.ones(len(mz), dtype=bool)
    bin_ids, counts = np.unique(bins, return_counts=True)
    for bin_id in bin_ids[counts > max_peaks]:
        indexes = np.flatnonzero(bins == bin_id)
        by_intensity = indexes[np.argsort(-intensity[indexes], kind="stable")]
        keep[by_intensity[max_peaks:]] = False

    if keep.all():
        return spectrum
    logger.debug(
        f"Filtering removed {np.count_nonzero(~keep)} of {len(mz)} peaks "
        f"(window {window:.2f}, {max_peaks} peaks per window)"
    )
    return spectrum.select(np.flatnonzero(keep), title=f"{spectrum.title}_filtered")


def get_p(spectrum: Spectrum, tolerance: float) -> float:
    """
    Probability for a theoretical fragment to match a peak by chance.

    p = tolerance * number of peaks / m/z range, capped at 1.
    """
    n_peaks = spectrum.n_peaks
    width = spectrum.max_mz - spectrum.min_mz
    if n_peaks <= 1 or width <= 0:
        return 1.0
    return min(1.0, tolerance * n_peaks / width)


def get_reduced_spectra(spectrum: Spectrum, max_depth: int = MAX_DEPTH) -> List[Spectrum]:
    """
    Spectra made of the most intense peaks, one per depth.

    The spectrum at index i holds the i + 1 most intense peaks; peaks of
    equal intensity are taken by increasing m/z.

    Args:
        spectrum: Spectrum of one window
        max_depth: Number of reduced spectra

    Returns:
        List of max_depth spectra
    """
    mz, intensity = spectrum.get_peaks()
    order = np.lexsort((mz, -intensity))
    return [
        spectrum.select(np.sort(order[:depth]), title=f"{spectrum.title}_{depth}")
        for depth in range(1, max_depth + 1)
    ]


# --- Site determining ions ---
def get_site_determining_ions(
    no_mod_peptide: Peptide,
    profiles: Sequence[Profile],
    modification: Modification,
    annotator: SpectrumAnnotator,
    settings: AnnotationSettings,
) -> Dict[float, List[Profile]]:
    """
    Theoretical m/z found for some profiles but not for all of them.

    Args:
        no_mod_peptide: The peptide without the modifications being scored
        profiles: The possible modification profiles
        modification: Modification placed on the profile sites
        annotator: The spectrum annotator
        settings: Scoring annotation settings

    Returns:
        Dictionary m/z -> profiles producing an ion at this m/z
    """
    ion_profiles: Dict[float, List[Profile]] = {}
    for profile in profiles:
        candidate = no_mod_peptide.with_modification_sites(modification, profile)
        mzs = {
            round(mz, MZ_DECIMALS)
            for mz in annotator.get_expected_mzs(candidate, settings)
        }
        for mz in mzs:
            ion_profiles.setdefault(mz, []).append(profile)

    n_profiles = len(profiles)
    site_determining_ions = {
        mz: mz_profiles
        for mz, mz_profiles in ion_profiles.items()
        if len(mz_profiles) < n_profiles
    }
    logger.debug(
        f"{len(site_determining_ions)} site determining ions, "
        f"{len(ion_profiles) - len(site_determining_ions)} ions common to "
        f"{n_profiles} profiles"
    )
    return site_determining_ions


# --- Probabilities ---
def get_phosphors_score_p(
    peptide: Peptide,
    spectrum: Spectrum,
    p: float,
    annotator: SpectrumAnnotator,
    settings: AnnotationSettings,
    context: Context,
) -> Decimal:
    """
    Probability of matching at least k of the n theoretical ions by chance.

    n is the number of theoretical fragment ions of the peptide and k the
    number of them matched in the spectrum. No match gives 1.

    Returns:
        P as a Decimal (unchecked)
    """
    n = len(annotator.get_expected_ions(peptide, settings))
    k = annotator.count_matches(peptide, spectrum, settings)
    return binomial_tail(k, n, p, context)


def select_best_depth(deltas: Sequence[Sequence[Decimal]], n_spectra: int) -> int:
    """
    Index of the reduced spectrum separating the profiles best.

    deltas[i] holds the differences between consecutive probabilities of
    the reduced spectrum i, sorted from the highest probability. Ranks are
    inspected from the first: the depth with the largest positive delta at
    the first rank where one exists wins, the shallower depth on ties.
    Without any positive delta, min(MAX_DEPTH, n_spectra - 1) is returned.
    """
    n_deltas = max((len(d) for d in deltas), default=0)
    best_i = 0
    largest_delta = ZERO
    for j in range(n_deltas):
        for i, spectrum_deltas in enumerate(deltas):
            if j < len(spectrum_deltas) and spectrum_deltas[j] > largest_delta:
                largest_delta = spectrum_deltas[j]
                best_i = i
        if largest_delta > ZERO:
            return best_i
    return min(MAX_DEPTH, n_spectra - 1)


def _profile_deltas(
    profiles: Sequence[Profile],
    candidates: Dict[Profile, Peptide],
    profile_ions: Dict[Profile, frozenset],
    reduced: Spectrum,
    p: float,
    annotator: SpectrumAnnotator,
    settings: AnnotationSettings,
    context: Context,
) -> List[Decimal]:
    # profiles sharing their site determining ions are scored once, as are
    # profiles without any in the window
    big_ps = []
    scored = set()
    no_ions_scored = False
    for profile in profiles:
        ions = profile_ions.get(profile)
        if ions is None:
            if no_ions_scored:
                continue
            no_ions_scored = True
        elif ions in scored:
            continue
        else:
            scored.add(ions)
        big_p = get_phosphors_score_p(
            candidates[profile], reduced, p, annotator, settings, context
        )
        big_ps.append(check_probability(big_p, context))

    big_ps.sort(reverse=True)
    return [context.subtract(big_ps[j], big_ps[j + 1]) for j in range(len(big_ps) - 1)]


def build_phosphors_spectrum(
    peptide: Peptide,
    spectrum: Spectrum,
    profiles: Sequence[Profile],
    candidates: Dict[Profile, Peptide],
    site_determining_ions: Dict[float, List[Profile]],
    p: float,
    annotator: SpectrumAnnotator,
    settings: AnnotationSettings,
    context: Context,
) -> Spectrum:
    """
    Assemble the reduced spectrum used to score the profiles.

    The spectrum is cut in windows of WINDOW_SIZE. In every window the
    reduced spectrum at the depth that best separates the profiles is kept;
    windows without site determining ions keep the depth where the peptide
    gets the lowest probability.

    Returns:
        The reduced spectrum
    """
    kept_mz = []
    kept_intensity = []
    window_min = spectrum.min_mz
    max_mz = spectrum.max_mz

    while window_min <= max_mz:
        window_max = window_min + WINDOW_SIZE
        spectra = get_reduced_spectra(spectrum.sub_spectrum(window_min, window_max))

        window_ions: Dict[Profile, set] = {}
        for mz, mz_profiles in site_determining_ions.items():
            if window_min < mz <= window_max:
                for profile in mz_profiles:
                    window_ions.setdefault(profile, set()).add(mz)
        profile_ions = {
            profile: frozenset(ions) for profile, ions in window_ions.items()
        }

        if profile_ions:
            deltas = [
                _profile_deltas(
                    profiles,
                    candidates,
                    profile_ions,
                    reduced,
                    p,
                    annotator,
                    settings,
                    context,
                )
                for reduced in spectra
            ]
            best_i = select_best_depth(deltas, len(spectra))
        else:
            best_i = 0
            best_p = None
            for i, reduced in enumerate(spectra):
                big_p = check_probability(
                    get_phosphors_score_p(
                        peptide, reduced, p, annotator, settings, context
                    ),
                    context,
                )
                if best_p is None or big_p < best_p:
                    best_p = big_p
                    best_i = i

        logger.debug(
            f"Window {window_min:.2f}-{window_max:.2f}: depth {best_i + 1}, "
            f"{len(profile_ions)} profiles with site determining ions"
        )
        best = spectra[best_i]
        kept_mz.append(best.mz)
        kept_intensity.append(best.intensity)
        window_min = window_max

    if not kept_mz:
        return Spectrum(precursor=spectrum.precursor, title=f"{spectrum.title}_phosphoRS")
    return Spectrum(
        np.concatenate(kept_mz),
        np.concatenate(kept_intensity),
        precursor=spectrum.precursor,
        title=f"{spectrum.title}_phosphoRS",
    )


# --- Normalization ---
def normalize_profile_probabilities(
    profile_p_values: Dict[Profile, Decimal], context: Context
) -> Dict[Profile, float]:
    """
    Turn the profile probabilities into percentages summing to 100.

    Each profile gets (1 / P) / sum(1 / P) * 100. P below the resolution
    limit is raised to the limit first.

    Returns:
        Dictionary profile -> percentage
    """
    limit = resolution_limit(context)
    p_inverses = {}
    p_inverse_total = ZERO
    for profile, big_p in profile_p_values.items():
        if big_p < limit:
            big_p = limit
        p_inverse = context.divide(ONE, big_p)
        p_inverses[profile] = p_inverse
        p_inverse_total = context.add(p_inverse_total, p_inverse)

    if p_inverse_total <= ZERO:
        raise InternalConsistencyError("PhosphoRS inverse probability total <= 0.")

    percentages = {}
    upper = context.add(HUNDRED, limit)
    for profile, p_inverse in p_inverses.items():
        percentage = context.divide(context.multiply(p_inverse, HUNDRED), p_inverse_total)
        if percentage > upper:
            raise InternalConsistencyError(
                f"PhosphoRS probability {percentage} > 100% for profile {profile}."
            )
        if percentage < ZERO:
            raise InternalConsistencyError(
                f"PhosphoRS probability {percentage} < 0% for profile {profile}."
            )
        percentages[profile] = float(percentage)
    return percentages


def get_site_scores(
    profile_scores: Dict[Profile, float],
    possible_sites: Sequence[int],
) -> Dict[int, float]:
    """
    Sum the profile percentages per site.

    Raises:
        InternalConsistencyError: If a possible site has no score
    """
    scores: Dict[int, float] = {}
    for profile, score in profile_scores.items():
        for site in profile:
            scores[site] = scores.get(site, 0.0) + score

    for site in possible_sites:
        if site not in scores:
            raise InternalConsistencyError(f"Site {site} not scored.")
    return scores


# --- Main entry points ---
def score_modification_sites(
    peptide: Peptide,
    modifications: Sequence[Modification],
    spectrum: Spectrum,
    annotation_settings: AnnotationSettings,
    account_neutral_losses: bool = True,
    context: Optional[Context] = None,
    annotator: Optional[SpectrumAnnotator] = None,
) -> PhosphoRSResult:
    """
    PhosphoRS localization of modifications of same mass on a peptide.

    Sites are 1-indexed over the peptide sequence, 0 is the N-terminus and
    length + 1 the C-terminus. The peptide must carry the modifications as
    variable matches; their count is the number of modifications placed in
    every profile. Neutral losses of the settings are only used when
    account_neutral_losses is set, and never when their mass equals the
    modification mass.

    Args:
        peptide: The peptide of interest
        modifications: Modifications scored together, all of the same mass
        spectrum: The fragment ion spectrum
        annotation_settings: Settings for theoretical ion generation and matching
        account_neutral_losses: Whether to account for neutral losses
        context: Decimal context; defaults to the settings precision
        annotator: Spectrum annotator; defaults to SpectrumAnnotator()

    Returns:
        A PhosphoRSResult; errors are reported in the result, not raised
    """
    try:
        return _score_modification_sites(
            peptide,
            modifications,
            spectrum,
            annotation_settings,
            account_neutral_losses,
            context,
            annotator,
        )
    except PTMScoreError as e:
        logger.debug(f"PhosphoRS failed for {peptide}: {e}")
        return PhosphoRSResult(PhosphoRSResult.ERROR, error=e)


def _score_modification_sites(
    peptide: Peptide,
    modifications: Sequence[Modification],
    spectrum: Spectrum,
    annotation_settings: AnnotationSettings,
    account_neutral_losses: bool,
    context: Optional[Context],
    annotator: Optional[SpectrumAnnotator],
) -> PhosphoRSResult:
    n_modifications = count_modifications(peptide, modifications)
    reference = modifications[0]
    for modification in modifications[1:]:
        if abs(modification.mass - reference.mass) > 1e-6:
            raise InvalidInputError(
                f"Modifications scored together must have the same mass: "
                f"{reference} and {modification}"
            )

    if context is None:
        context = make_context(annotation_settings["precision"])
    if annotator is None:
        annotator = SpectrumAnnotator()

    possible_sites = get_possible_sites(peptide, modifications)
    if len(possible_sites) == n_modifications:
        profile = tuple(possible_sites)
        return PhosphoRSResult(
            PhosphoRSResult.TRIVIAL,
            site_probabilities={site: 100.0 for site in possible_sites},
            profile_probabilities={profile: 100.0},
        )
    if len(possible_sites) < n_modifications:
        raise InvalidInputError(
            f"Found less potential modification sites than modifications during "
            f"PhosphoRS calculation. Peptide key: {peptide.key}"
        )

    scoring_settings = annotation_settings.scoring_settings(
        reference.mass, account_neutral_losses, spectrum.max_mz
    )
    filtered = filter_spectrum(spectrum, scoring_settings)
    p = get_p(filtered, scoring_settings.tolerance_in_da(filtered.max_mz))

    profiles = get_possible_modification_profiles(possible_sites, n_modifications)
    no_mod_peptide = peptide.no_mod_peptide(modifications)
    candidates = {
        profile: no_mod_peptide.with_modification_sites(reference, profile)
        for profile in profiles
    }
    logger.debug(
        f"PhosphoRS {peptide.key}: {len(possible_sites)} sites, "
        f"{n_modifications} modifications, {len(profiles)} profiles, p={p:.6f}"
    )

    site_determining_ions = get_site_determining_ions(
        no_mod_peptide, profiles, reference, annotator, scoring_settings
    )
    phosphors_spectrum = build_phosphors_spectrum(
        peptide,
        filtered,
        profiles,
        candidates,
        site_determining_ions,
        p,
        annotator,
        scoring_settings,
        context,
    )

    profile_p_values = {}
    for profile in profiles:
        big_p = get_phosphors_score_p(
            candidates[profile],
            phosphors_spectrum,
            p,
            annotator,
            scoring_settings,
            context,
        )
        profile_p_values[profile] = check_probability(big_p, context)

    profile_probabilities = normalize_profile_probabilities(profile_p_values, context)
    site_probabilities = get_site_scores(profile_probabilities, possible_sites)
    return PhosphoRSResult(
        PhosphoRSResult.SUCCESS,
        site_probabilities=site_probabilities,
        profile_probabilities=profile_probabilities,
        profile_p_values=profile_p_values,
    )


def get_sequence_probabilities(
    peptide: Peptide,
    modifications: Sequence[Modification],
    spectrum: Spectrum,
    annotation_settings: AnnotationSettings,
    account_neutral_losses: bool = True,
    context: Optional[Context] = None,
    annotator: Optional[SpectrumAnnotator] = None,
) -> Dict[int, float]:
    """
    PhosphoRS site probabilities in percent.

    Same as score_modification_sites but returns the site map and raises
    the error of a failed run.
    """
    result = score_modification_sites(
        peptide,
        modifications,
        spectrum,
        annotation_settings,
        account_neutral_losses=account_neutral_losses,
        context=context,
        annotator=annotator,
    )
    if result.status == PhosphoRSResult.ERROR:
        raise result.error
    return result.site_probabilities
