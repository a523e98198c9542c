"""
Nucleotide Alphabets

Each aligned character falls into exactly one class:

    resolved    one of the four unambiguous nucleotides (A, C, G, T or U)
    gap         '-' (MAF also uses '.' for unaligned positions)
    unresolved  anything else: IUPAC ambiguity codes, N, unknown symbols

Lower-case (soft-masked) characters are classified like their upper-case form.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from Bio.Data.IUPACData import (
    ambiguous_dna_letters,
    ambiguous_rna_letters,
    unambiguous_dna_letters,
    unambiguous_rna_letters,
)

GAP_CHARACTERS: str = "-."


@dataclass(frozen=True)
class NucleotideAlphabet:
    """Resolved states in canonical order, e.g. ('A', 'C', 'G', 'T')."""
    name: str
    states: Tuple[str, ...]
    ambiguous: str
    gaps: str = GAP_CHARACTERS

    def is_gap(self, char: str) -> bool:
        return char in self.gaps

    def is_resolved(self, char: str) -> bool:
        return char.upper() in self.states

    def is_unresolved(self, char: str) -> bool:
        return not self.is_gap(char) and not self.is_resolved(char)

    # ---------- Vectorised helpers on numpy character arrays ----------

    def gap_mask(self, chars: np.ndarray) -> np.ndarray:
        return np.isin(chars, list(self.gaps))

    def resolved_mask(self, chars: np.ndarray) -> np.ndarray:
        return np.isin(chars, list(self.states))

    def is_complete(self, column: np.ndarray) -> bool:
        """True if every character of the column is a resolved state."""
        return bool(self.resolved_mask(column).all())


def _ordered(letters: str) -> Tuple[str, ...]:
    return tuple(sorted(letters))


DNA = NucleotideAlphabet("DNA", _ordered(unambiguous_dna_letters), ambiguous_dna_letters)
RNA = NucleotideAlphabet("RNA", _ordered(unambiguous_rna_letters), ambiguous_rna_letters)

ALPHABETS = {"DNA": DNA, "RNA": RNA}


def get_alphabet(name: str) -> NucleotideAlphabet:
    """
    Look up an alphabet by name (case-insensitive).

    Raises:
        ValueError: If the alphabet is unknown
    """
    try:
        return ALPHABETS[name.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown alphabet '{name}', expected one of {sorted(ALPHABETS)}"
        ) from None
