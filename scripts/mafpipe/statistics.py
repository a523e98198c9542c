"""
Statistics Computed on MAF Blocks

Every statistic follows the same life cycle: build it once with its
configuration, call compute(block) for every block of a stream, and read
result after each call. Nothing accumulates across blocks.

    counts = CharacterCounts(species=["hg18", "panTro2"], suffix="HP")
    for block in read_maf_blocks("chr7.maf.gz"):
        counts.compute(block)
        print(counts.short_name, counts.result.value("Gap"))

compute() fills a fresh result and only replaces the current one when the
whole block has been processed, so an exception leaves the previous result
as it was.

Block descriptors (single value):
- BlockSize, BlockLength, AlignmentScore, SequenceLength, PairwiseDivergence

Site-wise statistics on a species selection (several values):
- CharacterCounts: A, C, G, T/U, Gap, Unresolved
- SiteStatistics: gap-free, complete, constant, bi/tri/quadri-allelic and
  parsimony informative sites
- FourSpeciesPatternCounts: P1 (1100), P2 (0110), P3 (1010)
- PolymorphismStatistics: P, F, FF, PF, FP, X, FX, PX, XF, XP

SiteFrequencySpectrum and SequenceDiversity live in mafpipe.diversity.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .alphabet import DNA, NucleotideAlphabet
from .blocks import MafBlock
from .errors import ConfigurationError, DataInconsistencyError
from .results import NumberKind, SingleValueResult, StatResult
from .selection import MultipleSpeciesSelection, SiteMatrix, SpeciesSelection

logger = logging.getLogger(__name__)


# ============================================================================
# Base classes
# ============================================================================

class MafStatistic(ABC):
    """Common interface of all block statistics."""

    def __init__(self):
        self._result = self._new_result()

    @property
    @abstractmethod
    def short_name(self) -> str:
        ...

    @property
    @abstractmethod
    def full_name(self) -> str:
        ...

    @abstractmethod
    def supported_tags(self) -> List[str]:
        ...

    @abstractmethod
    def _new_result(self) -> StatResult:
        ...

    @abstractmethod
    def _compute(self, block: MafBlock, result: StatResult) -> None:
        """Fill result with the values for block."""

    @property
    def result(self) -> StatResult:
        return self._result

    def compute(self, block: MafBlock) -> None:
        staged = self._new_result()
        self._compute(block, staged)
        self._result = staged

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.short_name}>"


class SingleValueStatistic(MafStatistic):
    """Statistic producing one value under a fixed tag."""

    tag: str = ""

    def _new_result(self) -> SingleValueResult:
        return SingleValueResult(self.tag)

    def supported_tags(self) -> List[str]:
        return [self.tag]


class MultiValueStatistic(MafStatistic):
    """Statistic producing a fixed set of tagged counts."""

    def _new_result(self) -> StatResult:
        return StatResult()


def _single_row(block: MafBlock, species: str, statistic: str) -> Optional[str]:
    """Upper-cased row of a species, None if absent, error if several."""
    rows = block.sequences_for_species(species)
    if len(rows) > 1:
        raise DataInconsistencyError(
            f"{statistic}: more than one sequence found for species {species} "
            f"in current block."
        )
    if not rows:
        return None
    return str(rows[0].seq).upper()


# ============================================================================
# Block descriptors
# ============================================================================

class BlockSize(SingleValueStatistic):
    """Number of sequences in a block."""
    tag = "BlockSize"
    short_name = "BlockSize"
    full_name = "Number of sequences."

    def _compute(self, block: MafBlock, result: SingleValueResult) -> None:
        result.set(block.number_of_sequences, NumberKind.UNSIGNED)


class BlockLength(SingleValueStatistic):
    """Number of columns in a block."""
    tag = "BlockLength"
    short_name = "BlockLength"
    full_name = "Number of sites."

    def _compute(self, block: MafBlock, result: SingleValueResult) -> None:
        result.set(block.number_of_sites, NumberKind.UNSIGNED)


class AlignmentScore(SingleValueStatistic):
    """Score of a block, NaN when the block carries none."""
    tag = "AlnScore"
    short_name = "AlnScore"
    full_name = "Alignment score."

    def _compute(self, block: MafBlock, result: SingleValueResult) -> None:
        score = block.score
        result.set(math.nan if score is None else float(score))


class SequenceLength(SingleValueStatistic):
    """
    Number of nucleotides (non-gap characters) of one species in a block.

    0 if the species has no row in the block.

    Raises:
        DataInconsistencyError: If the species has several rows in a block
    """
    tag = "SequenceLength"

    def __init__(self, species: str):
        self.species = species
        super().__init__()

    @property
    def short_name(self) -> str:
        return f"SequenceLengthFor{self.species}"

    @property
    def full_name(self) -> str:
        return f"Sequence length for species {self.species}"

    def _compute(self, block: MafBlock, result: SingleValueResult) -> None:
        rows = block.sequences_for_species(self.species)
        if len(rows) > 1:
            raise DataInconsistencyError(
                f"SequenceLength: more than one sequence found for species "
                f"{self.species} in current block."
            )
        length = MafBlock.count_nucleotides(rows[0]) if rows else 0
        result.set(length, NumberKind.UNSIGNED)


class PairwiseDivergence(SingleValueStatistic):
    """
    Proportion of differing sites between two species.

    Only columns where both rows carry a resolved nucleotide are compared.
    NaN if a species is missing or no column can be compared.
    """
    tag = "Divergence"

    def __init__(self, species1: str, species2: str, alphabet: NucleotideAlphabet = DNA):
        if species1 == species2:
            raise ConfigurationError(
                f"PairwiseDivergence: the two species must differ, got '{species1}' twice."
            )
        self.species1 = species1
        self.species2 = species2
        self.alphabet = alphabet
        super().__init__()

    @property
    def short_name(self) -> str:
        return f"Div.{self.species1}-{self.species2}"

    @property
    def full_name(self) -> str:
        return f"Pairwise divergence between {self.species1} and {self.species2}."

    def _compute(self, block: MafBlock, result: SingleValueResult) -> None:
        seq1 = _single_row(block, self.species1, "PairwiseDivergence")
        seq2 = _single_row(block, self.species2, "PairwiseDivergence")
        if seq1 is None or seq2 is None:
            result.set(math.nan)
            return
        chars1 = np.array(list(seq1), dtype="<U1")
        chars2 = np.array(list(seq2), dtype="<U1")
        compared = self.alphabet.resolved_mask(chars1) & self.alphabet.resolved_mask(chars2)
        n_compared = int(compared.sum())
        if n_compared == 0:
            result.set(math.nan)
            return
        n_diff = int((compared & (chars1 != chars2)).sum())
        result.set(n_diff / n_compared)


# ============================================================================
# Site-wise statistics
# ============================================================================

class CharacterCounts(MultiValueStatistic):
    """
    Character composition of a block.

    For each block, provides (with their tags):
    - A, C, G, T (U for RNA): counts of each nucleotide
    - Gap: counts of gaps
    - Unresolved: counts of any other character

    The counts sum to (number of selected rows) x (number of sites). An empty
    species list selects all rows.
    """

    def __init__(
        self,
        alphabet: NucleotideAlphabet = DNA,
        species: Sequence[str] = (),
        suffix: str = ""
    ):
        self.alphabet = alphabet
        self.selection = SpeciesSelection(species, no_species_means_all=True)
        self.suffix = suffix
        super().__init__()

    @property
    def short_name(self) -> str:
        return "Counts" + self.suffix

    @property
    def full_name(self) -> str:
        return f"Character counts ({self.suffix})."

    def supported_tags(self) -> List[str]:
        return list(self.alphabet.states) + ["Gap", "Unresolved"]

    def _compute(self, block: MafBlock, result: StatResult) -> None:
        chars = self.selection.project(block).chars
        resolved = 0
        for state in self.alphabet.states:
            n = int((chars == state).sum())
            resolved += n
            result.set_value(state, n, NumberKind.UNSIGNED)
        gaps = int(self.alphabet.gap_mask(chars).sum())
        result.set_value("Gap", gaps, NumberKind.UNSIGNED)
        result.set_value("Unresolved", chars.size - resolved - gaps, NumberKind.UNSIGNED)


class SiteStatistics(MultiValueStatistic):
    """
    Site classification in a block.

    Computed statistics include:
    - NbWithoutGap: sites without gaps
    - NbComplete: complete sites (no gap, no unresolved character)
    - NbConstant: complete sites with only one state
    - NbBiallelic / NbTriallelic / NbQuadriallelic: complete sites with 2/3/4 states
    - NbParsimonyInformative: complete sites where at least two states occur
      at least twice each
    """

    TAGS = [
        "NbWithoutGap",
        "NbComplete",
        "NbConstant",
        "NbBiallelic",
        "NbTriallelic",
        "NbQuadriallelic",
        "NbParsimonyInformative",
    ]

    short_name = "SiteStatistics"
    full_name = "Site statistics."

    def __init__(
        self,
        species: Sequence[str] = (),
        alphabet: NucleotideAlphabet = DNA,
        no_species_means_all: bool = False
    ):
        self.selection = SpeciesSelection(species, no_species_means_all)
        self.alphabet = alphabet
        super().__init__()

    def supported_tags(self) -> List[str]:
        return list(self.TAGS)

    def _compute(self, block: MafBlock, result: StatResult) -> None:
        counts = dict.fromkeys(self.TAGS, 0)
        sites = self.selection.project(block)
        allelic = {1: "NbConstant", 2: "NbBiallelic", 3: "NbTriallelic", 4: "NbQuadriallelic"}

        if sites.number_of_sequences > 0:
            for column in sites.columns():
                if self.alphabet.gap_mask(column).any():
                    continue
                counts["NbWithoutGap"] += 1
                if not self.alphabet.is_complete(column):
                    continue
                counts["NbComplete"] += 1
                _, freqs = np.unique(column, return_counts=True)
                counts[allelic[len(freqs)]] += 1
                if (freqs >= 2).sum() >= 2:
                    counts["NbParsimonyInformative"] += 1

        for tag in self.TAGS:
            result.set_value(tag, counts[tag], NumberKind.UNSIGNED)


class FourSpeciesPatternCounts(MultiValueStatistic):
    """
    Counts of site patterns for a quadruplet of species.

    Only complete biallelic sites splitting the species two against two are
    categorized:

        Species: A B C D
        P1       1 1 0 0
        P2       0 1 1 0
        P3       1 0 1 0

    Sites with more than two states, singleton sites, and sites containing gaps
    or unresolved characters are ignored. Blocks missing one of the species
    give zero counts.

    Raises:
        ConfigurationError: At construction, unless exactly four distinct
            species are given
        DataInconsistencyError: If a species has several rows in a block
    """

    TAGS = ["P1", "P2", "P3"]

    short_name = "FourSpeciesPatternCounts"
    full_name = "FourSpecies pattern counts."

    def __init__(self, species: Sequence[str], alphabet: NucleotideAlphabet = DNA):
        if len(species) != 4:
            raise ConfigurationError(
                f"FourSpeciesPatternCounts: 4 species should be provided, got {len(species)}."
            )
        self.selection = SpeciesSelection(species)
        self.alphabet = alphabet
        super().__init__()

    def supported_tags(self) -> List[str]:
        return list(self.TAGS)

    @staticmethod
    def _pattern(a: str, b: str, c: str, d: str) -> Optional[str]:
        if a == b and c == d:
            return "P1"
        if b == c and a == d:
            return "P2"
        if a == c and b == d:
            return "P3"
        return None

    def _ordered_rows(self, sites: SiteMatrix) -> Optional[np.ndarray]:
        rows = []
        for species in self.selection.species:
            found = sites.rows_for_species(species)
            if len(found) > 1:
                raise DataInconsistencyError(
                    f"FourSpeciesPatternCounts: more than one sequence found for "
                    f"species {species} in current block."
                )
            if len(found) == 0:
                return None
            rows.append(found[0])
        return np.vstack(rows)

    def _compute(self, block: MafBlock, result: StatResult) -> None:
        counts = dict.fromkeys(self.TAGS, 0)
        ordered = self._ordered_rows(self.selection.project(block))
        if ordered is None:
            logger.debug(f"{self.short_name}: not all four species in {block!r}")
        else:
            for i in range(ordered.shape[1]):
                column = ordered[:, i]
                if not self.alphabet.is_complete(column) or len(set(column)) != 2:
                    continue
                pattern = self._pattern(*column)
                if pattern is not None:
                    counts[pattern] += 1

        for tag in self.TAGS:
            result.set_value(tag, counts[tag], NumberKind.UNSIGNED)


FIXED, POLYMORPHIC, UNRESOLVED = "F", "P", "X"


def population_pattern(column: np.ndarray, alphabet: NucleotideAlphabet) -> Tuple[str, Optional[str]]:
    """
    Status of one population at one site.

    Returns:
        (status, state): ('F', state) if fixed, ('P', None) if polymorphic,
        ('X', None) if any character is a gap or unresolved, or the
        population has no row
    """
    if column.size == 0 or not alphabet.is_complete(column):
        return UNRESOLVED, None
    states = np.unique(column)
    if len(states) == 1:
        return FIXED, str(states[0])
    return POLYMORPHIC, None


class PolymorphismStatistics(MultiValueStatistic):
    """
    Counts of polymorphic / fixed sites in two populations.

    The two populations are defined as two distinct sets of species.
    The following counts are computed and returned:
    - P: number of sites polymorphic in both populations
    - F: number of sites fixed in both populations, with the same state
    - FF: number of sites fixed in both populations, but with distinct states
    - PF / FP: polymorphic in one population and fixed in the other
    - X: unresolved in both populations (because of gap or generic character)
    - FX / PX / XF / XP: unresolved in one population

    Every site increments exactly one count.
    """

    TAGS = ["P", "F", "FF", "PF", "FP", "X", "FX", "PX", "XF", "XP"]

    short_name = "PolymorphismStatistics"
    full_name = "Polymorphism statistics."

    def __init__(self, species: Sequence[Sequence[str]], alphabet: NucleotideAlphabet = DNA):
        if len(species) != 2:
            raise ConfigurationError(
                "PolymorphismStatistics: exactly two species selections should be provided."
            )
        self.selections = MultipleSpeciesSelection(species)
        self.alphabet = alphabet
        super().__init__()

    def supported_tags(self) -> List[str]:
        return list(self.TAGS)

    def classify(self, column1: np.ndarray, column2: np.ndarray) -> str:
        """Tag of a site given the characters of both populations."""
        status1, state1 = population_pattern(column1, self.alphabet)
        status2, state2 = population_pattern(column2, self.alphabet)
        if status1 == FIXED and status2 == FIXED:
            return "F" if state1 == state2 else "FF"
        if status1 == status2:
            return status1
        return status1 + status2

    def _compute(self, block: MafBlock, result: StatResult) -> None:
        counts = dict.fromkeys(self.TAGS, 0)
        sites1, sites2 = self.selections.project(block)
        for i in range(block.number_of_sites):
            counts[self.classify(sites1.column(i), sites2.column(i))] += 1

        for tag in self.TAGS:
            result.set_value(tag, counts[tag], NumberKind.UNSIGNED)
