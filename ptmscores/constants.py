"""
Constants and default settings for ptmscores
"""

# Physical constants
WATER_MASS = 18.010564684
PROTON_MASS = 1.00727646688
HYDROGEN_MASS = 1.007825035
AMMONIA_MASS = 17.026549101
CO_MASS = 27.994914620
PPM = 1.0 / 1000000.0

# Amino acid masses (monoisotopic residue masses)
AA_MASSES = {
    "A": 71.03711,
    "C": 103.00919,
    "D": 115.02694,
    "E": 129.04259,
    "F": 147.06841,
    "G": 57.02146,
    "H": 137.05891,
    "I": 113.08406,
    "K": 128.09496,
    "L": 113.08406,
    "M": 131.04049,
    "N": 114.04293,
    "P": 97.05276,
    "Q": 128.05858,
    "R": 156.10111,
    "S": 87.03203,
    "T": 101.04768,
    "V": 99.06841,
    "W": 186.07931,
    "Y": 163.06333,
}

# Offsets added to the residue mass sum of a fragment (neutral fragment mass)
ION_OFFSETS = {
    "a": -CO_MASS,
    "b": 0.0,
    "c": AMMONIA_MASS,
    "x": WATER_MASS + CO_MASS - 2 * HYDROGEN_MASS,
    "y": WATER_MASS,
    "z": WATER_MASS - AMMONIA_MASS + HYDROGEN_MASS,
}
N_TERMINAL_IONS = ("a", "b", "c")
C_TERMINAL_IONS = ("x", "y", "z")

# Neutral losses
NEUTRAL_LOSSES = {
    "H2O": 18.010565,
    "NH3": 17.026549,
    "H3PO4": 97.976896,
    "HPO3": 79.966331,
}

# Modification masses
PHOSPHO_MOD_MASS = 79.966331
PHOSPHO_RESIDUES = "STY"

# Decimals of the theoretical m/z compared across modification profiles
MZ_DECIMALS = 6

# PhosphoRS
WINDOW_SIZE = 100.0
MAX_DEPTH = 8
FILTER_MAX_PEAKS = 10
FILTER_WINDOW_FACTOR = 10.0

# AScore
ASCORE_MAX_DEPTH = 10
ASCORE_DEPTH_WEIGHTS = (0.5, 0.75, 1.0, 1.0, 1.0, 1.0, 0.75, 0.5, 0.25, 0.25)

# Precision of the decimal context (34 digits, IEEE decimal128)
DEFAULT_PRECISION = 34

# Default annotation settings
DEFAULT_ANNOTATION_SETTINGS = {
    "ion_types": ("b", "y"),
    "charges": (1,),
    "fragment_tolerance": 0.5,
    "fragment_tolerance_ppm": False,
    "neutral_losses": {},
    "precursor_charge": 2,
    "precision": DEFAULT_PRECISION,
}
