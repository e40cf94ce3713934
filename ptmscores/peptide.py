"""
Peptide module.

This module contains the Modification, ModificationMatch and Peptide classes.
Sites are 1-indexed over the sequence; 0 stands for the N-terminus and
length + 1 for the C-terminus.
"""

import logging
import numpy as np
from typing import Dict, Iterable, List, Optional, Sequence
from pyopenms import AASequence, ModificationsDB, ResidueModification

from .constants import AA_MASSES
from .exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def _as_str(value) -> str:
    return value.decode() if isinstance(value, bytes) else value


class Modification:
    """
    A modification that can be localized on a peptide.

    Args:
        name: Modification name, used to recognize matches on a peptide
        mass: Monoisotopic mass shift
        residues: Amino acids carrying the modification, empty for any residue
        n_term: Whether the modification is peptide N-terminal
        c_term: Whether the modification is peptide C-terminal
    """

    __slots__ = ["name", "mass", "residues", "n_term", "c_term"]

    def __init__(
        self,
        name: str,
        mass: float,
        residues: Iterable[str] = "",
        n_term: bool = False,
        c_term: bool = False,
    ):
        if n_term and c_term:
            raise InvalidInputError(
                f"Modification {name} cannot be both N- and C-terminal"
            )
        self.name = name
        self.mass = float(mass)
        self.residues = frozenset(residues)
        self.n_term = n_term
        self.c_term = c_term

    @classmethod
    def from_openms(
        cls, name: str, residues: Optional[Iterable[str]] = None
    ) -> "Modification":
        """
        Look a modification up in the OpenMS modification database.

        Args:
            name: Modification name, e.g. "Phospho" or "Phospho (S)"
            residues: Target residues overriding the database origin

        Returns:
            A new Modification named after the OpenMS modification id
        """
        try:
            residue_modification = ModificationsDB().getModification(name)
        except Exception as e:
            raise InvalidInputError(f"Unknown modification: {name}") from e

        specificity = residue_modification.getTermSpecificity()
        terms = ResidueModification.TermSpecificity
        n_term = specificity in (terms.N_TERM, terms.PROTEIN_N_TERM)
        c_term = specificity in (terms.C_TERM, terms.PROTEIN_C_TERM)
        if residues is None:
            origin = _as_str(residue_modification.getOrigin())
            residues = "" if origin in ("X", ".") else origin

        return cls(
            _as_str(residue_modification.getId()),
            residue_modification.getDiffMonoMass(),
            residues=residues,
            n_term=n_term,
            c_term=c_term,
        )

    def targets(self, amino_acid: str) -> bool:
        return not self.residues or amino_acid in self.residues

    def __eq__(self, other):
        if not isinstance(other, Modification):
            return False
        return (
            self.name == other.name
            and self.mass == other.mass
            and self.residues == other.residues
            and self.n_term == other.n_term
            and self.c_term == other.c_term
        )

    def __hash__(self):
        return hash((self.name, self.mass, self.residues, self.n_term, self.c_term))

    def __repr__(self):
        return f"Modification({self.name!r}, {self.mass:.6f})"


class ModificationMatch:
    """A modification placed on a residue of a peptide."""

    __slots__ = ["modification", "site", "variable"]

    def __init__(self, modification: Modification, site: int, variable: bool = True):
        self.modification = modification
        self.site = int(site)
        self.variable = variable

    @property
    def name(self) -> str:
        return self.modification.name

    def _key(self):
        return (self.modification, self.site, self.variable)

    def __eq__(self, other):
        if not isinstance(other, ModificationMatch):
            return False
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        kind = "variable" if self.variable else "fixed"
        return f"ModificationMatch({self.name!r}, site={self.site}, {kind})"


class Peptide:
    """
    Immutable peptide with its modification matches.

    Matches are stored on residues (1..length). Terminal placements are
    carried by the first or last residue, which gives the same fragment
    masses as the terminal modification.
    """

    def __init__(
        self,
        sequence: str,
        modification_matches: Optional[Iterable[ModificationMatch]] = None,
    ):
        sequence = sequence.upper()
        unknown = [aa for aa in sequence if aa not in AA_MASSES]
        if not sequence or unknown:
            raise InvalidInputError(
                f"Invalid peptide sequence {sequence!r}, unknown residues: {unknown}"
            )
        self._sequence = sequence
        matches = list(modification_matches or [])
        for match in matches:
            if not 1 <= match.site <= len(sequence):
                raise InvalidInputError(
                    f"Modification {match.name} at site {match.site} outside of {sequence}"
                )
        self._matches = tuple(sorted(matches, key=lambda m: (m.site, m.name)))

    @classmethod
    def from_openms(
        cls,
        aa_sequence: AASequence,
        modifications: Optional[Sequence[Modification]] = None,
    ) -> "Peptide":
        """
        Convert a pyopenms AASequence.

        Modifications found on the sequence are matched by name against the
        given modifications first and otherwise looked up in the OpenMS
        modification database. Every match is variable.

        Args:
            aa_sequence: The pyopenms sequence
            modifications: Known modifications, e.g. the ones being scored

        Returns:
            A new Peptide
        """
        known: Dict[str, Modification] = {m.name: m for m in modifications or []}

        def resolve(name: str) -> Modification:
            if name not in known:
                known[name] = Modification.from_openms(name)
            return known[name]

        sequence = _as_str(aa_sequence.toUnmodifiedString())
        matches = []
        if aa_sequence.hasNTerminalModification():
            name = _as_str(aa_sequence.getNTerminalModificationName())
            matches.append(ModificationMatch(resolve(name), 1))
        for i in range(aa_sequence.size()):
            residue = aa_sequence.getResidue(i)
            if residue.isModified():
                matches.append(
                    ModificationMatch(resolve(_as_str(residue.getModificationName())), i + 1)
                )
        if aa_sequence.hasCTerminalModification():
            name = _as_str(aa_sequence.getCTerminalModificationName())
            matches.append(ModificationMatch(resolve(name), len(sequence)))
        return cls(sequence, matches)

    @property
    def sequence(self) -> str:
        return self._sequence

    @property
    def modification_matches(self) -> tuple:
        return self._matches

    def __len__(self):
        return len(self._sequence)

    @property
    def key(self) -> str:
        """Sequence with the modification names in brackets after their residue."""
        names: Dict[int, List[str]] = {}
        for match in self._matches:
            names.setdefault(match.site, []).append(match.name)
        parts = []
        for i, aa in enumerate(self._sequence, start=1):
            parts.append(aa)
            for name in names.get(i, []):
                parts.append(f"({name})")
        return "".join(parts)

    def __eq__(self, other):
        if not isinstance(other, Peptide):
            return False
        return self._sequence == other._sequence and self._matches == other._matches

    def __hash__(self):
        return hash((self._sequence, self._matches))

    def __repr__(self):
        return f"Peptide({self.key!r})"

    def residue_masses(self) -> np.ndarray:
        """Residue masses including the mass of every modification match."""
        masses = np.array([AA_MASSES[aa] for aa in self._sequence], dtype=float)
        for match in self._matches:
            masses[match.site - 1] += match.modification.mass
        return masses

    def count_variable_matches(self, modifications: Sequence[Modification]) -> int:
        """Number of variable matches whose name is one of the modifications."""
        names = {m.name for m in modifications}
        return sum(1 for m in self._matches if m.variable and m.name in names)

    def get_modification_sites(self, modifications: Sequence[Modification]) -> tuple:
        """Sorted residues carrying a variable match of the modifications."""
        names = {m.name for m in modifications}
        return tuple(
            sorted(m.site for m in self._matches if m.variable and m.name in names)
        )

    def get_potential_modification_sites(self, modification: Modification) -> List[int]:
        """
        Sites where the modification can be placed.

        Returns:
            [0] or [length + 1] for terminal modifications compatible with the
            terminal residue, else the residues the modification targets
        """
        length = len(self._sequence)
        if modification.n_term:
            return [0] if modification.targets(self._sequence[0]) else []
        if modification.c_term:
            return [length + 1] if modification.targets(self._sequence[-1]) else []
        return [
            i
            for i, aa in enumerate(self._sequence, start=1)
            if modification.targets(aa)
        ]

    def no_mod_peptide(self, modifications: Sequence[Modification]) -> "Peptide":
        """Copy of the peptide without the variable matches of the modifications."""
        names = {m.name for m in modifications}
        kept = [m for m in self._matches if not (m.variable and m.name in names)]
        return Peptide(self._sequence, kept)

    def with_modification_sites(
        self, modification: Modification, sites: Iterable[int]
    ) -> "Peptide":
        """
        Copy of the peptide with the modification added at the given sites.

        Site 0 is carried by the first residue and site length + 1 by the last.
        """
        length = len(self._sequence)
        matches = list(self._matches)
        for site in sites:
            if site == 0:
                site = 1
            elif site == length + 1:
                site = length
            matches.append(ModificationMatch(modification, site))
        return Peptide(self._sequence, matches)
