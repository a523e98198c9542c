"""
Population Genetics Statistics on MAF Blocks

Site Frequency Spectrum
-----------------------
Allele counts of informative sites are binned by a Categorizer. Bins are
half-open, [b0, b1), [b1, b2), ..., and numbered from 1.

Without an outgroup the ancestral state is unknown, and the spectrum uses the
minor allele count, so that 10000 and 01111 sites are treated equally. With an
outgroup, the count is the number of ingroup sequences differing from the
outgroup state (derived alleles). Sites carrying no derived allele (a single
state, equal to the outgroup state if there is one) are not counted.

Sequence Diversity
------------------
On the n sequences of the selection, restricted to complete sites
(no gap, no unresolved character), with S segregating sites:

    a1 = sum(1/i, i = 1..n-1)        a2 = sum(1/i^2, i = 1..n-1)
    theta_W = S / a1                 (Watterson 1975)
    pi = mean number of pairwise differences (Tajima 1983)
    D = (pi - theta_W) / sqrt(e1 * S + e2 * S * (S - 1))   (Tajima 1989)

with
    b1 = (n + 1) / (3 (n - 1))       b2 = 2 (n^2 + n + 3) / (9 n (n - 1))
    c1 = b1 - 1 / a1                 c2 = b2 - (n + 2) / (a1 n) + a2 / a1^2
    e1 = c1 / a1                     e2 = c2 / (a1^2 + a2)

D is undefined (NaN) when S = 0 or the variance is 0, which is always the
case for n <= 3.
"""

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from .alphabet import DNA, NucleotideAlphabet
from .blocks import MafBlock
from .errors import ConfigurationError, DataInconsistencyError, OutOfRangeError
from .results import NumberKind, StatResult
from .selection import SpeciesSelection
from .statistics import MultiValueStatistic

logger = logging.getLogger(__name__)


# ============================================================================
# Estimators
# ============================================================================

def harmonic_sum(n: int, power: int = 1) -> float:
    """
    Sum of 1/i^power for i = 1..n-1.

    Examples:
        >>> harmonic_sum(2)
        1.0
        >>> harmonic_sum(4)
        1.8333333333333333
    """
    return sum(1.0 / i ** power for i in range(1, n))


def watterson_theta(n_segregating: int, n_sequences: int) -> float:
    """Watterson's estimator S / a1 (0 for fewer than two sequences)."""
    if n_sequences < 2:
        return 0.0
    return n_segregating / harmonic_sum(n_sequences)


def tajima_d(pi: float, n_segregating: int, n_sequences: int) -> float:
    """
    Tajima's D from the mean pairwise differences over the whole region.

    Args:
        pi: Mean number of pairwise differences (not per site)
        n_segregating: Number of segregating sites S
        n_sequences: Sample size n

    Returns:
        D, or NaN when undefined (S = 0, n < 2 or null variance)
    """
    n = n_sequences
    s = n_segregating
    if n < 2 or s == 0:
        return math.nan
    a1 = harmonic_sum(n)
    a2 = harmonic_sum(n, 2)
    b1 = (n + 1) / (3.0 * (n - 1))
    b2 = 2.0 * (n * n + n + 3) / (9.0 * n * (n - 1))
    c1 = b1 - 1.0 / a1
    c2 = b2 - (n + 2) / (a1 * n) + a2 / (a1 * a1)
    e1 = c1 / a1
    e2 = c2 / (a1 * a1 + a2)
    variance = e1 * s + e2 * s * (s - 1)
    # c1 and c2 vanish analytically for n <= 3
    if variance <= 1e-12:
        return math.nan
    return (pi - s / a1) / math.sqrt(variance)


# ============================================================================
# Site frequency spectrum
# ============================================================================

class Categorizer:
    """
    Assign values to half-open bins [b[i-1], b[i]), numbered from 1.

    Examples:
        >>> c = Categorizer([0, 1, 2, 3])
        >>> c.category(0), c.category(0.9), c.category(1)
        (1, 1, 2)
    """

    def __init__(self, bounds: Sequence[float]):
        if len(bounds) < 2:
            raise ConfigurationError(
                f"Categorizer: at least two bounds are required, got {list(bounds)}."
            )
        self.bounds: List[float] = sorted(bounds)

    @property
    def number_of_categories(self) -> int:
        return len(self.bounds) - 1

    def category(self, value: float) -> int:
        """
        Raises:
            OutOfRangeError: If value < first bound or value >= last bound
        """
        if value >= self.bounds[0]:
            for i in range(1, len(self.bounds)):
                if value < self.bounds[i]:
                    return i
        raise OutOfRangeError(
            "Categorizer.category.", value, self.bounds[0], self.bounds[-1]
        )


class SiteFrequencySpectrum(MultiValueStatistic):
    """
    Site frequency spectrum of a block, binned into Bin1..BinN.

    Only complete sites with two states in the ingroup, or with one state
    differing from the outgroup, are counted.
    When an outgroup is given, blocks without it give empty spectra, and sites
    where it is gapped or unresolved, or carries a third state, are ignored.

    Raises:
        ConfigurationError: Bad bounds, duplicated species, outgroup in ingroup
        OutOfRangeError: During compute, if a count falls outside the bounds
        DataInconsistencyError: If the outgroup has several rows in a block
    """

    short_name = "SiteFrequencySpectrum"
    full_name = "Site frequency spectrum."

    def __init__(
        self,
        bounds: Sequence[float],
        ingroup: Sequence[str],
        outgroup: Optional[str] = None,
        alphabet: NucleotideAlphabet = DNA
    ):
        self.categorizer = Categorizer(bounds)
        self.selection = SpeciesSelection(ingroup)
        if outgroup and outgroup in self.selection.species:
            raise ConfigurationError(
                f"SiteFrequencySpectrum: outgroup '{outgroup}' is also in the ingroup."
            )
        self.outgroup = outgroup or None
        self.alphabet = alphabet
        super().__init__()

    def supported_tags(self) -> List[str]:
        return [f"Bin{i + 1}" for i in range(self.categorizer.number_of_categories)]

    def _outgroup_row(self, block: MafBlock) -> Optional[str]:
        rows = block.sequences_for_species(self.outgroup)
        if len(rows) > 1:
            raise DataInconsistencyError(
                f"SiteFrequencySpectrum: more than one sequence found for outgroup "
                f"{self.outgroup} in current block."
            )
        return str(rows[0].seq).upper() if rows else None

    def _site_value(self, column: np.ndarray, ancestral: Optional[str]) -> Optional[int]:
        states, freqs = np.unique(column, return_counts=True)
        if len(states) > 2:
            return None
        if ancestral is None:
            return int(freqs.min()) if len(states) == 2 else None
        if not self.alphabet.is_resolved(ancestral):
            return None
        if len(states) == 2 and ancestral not in states:
            return None
        if len(states) == 1 and states[0] == ancestral:
            return None
        return int((column != ancestral).sum())

    def _compute(self, block: MafBlock, result: StatResult) -> None:
        counts = [0] * self.categorizer.number_of_categories
        outgroup_seq = None
        analyzable = True
        if self.outgroup is not None:
            outgroup_seq = self._outgroup_row(block)
            analyzable = outgroup_seq is not None

        if analyzable:
            sites = self.selection.project(block)
            if sites.number_of_sequences == 0:
                analyzable = False
            else:
                for i, column in enumerate(sites.columns()):
                    if not self.alphabet.is_complete(column):
                        continue
                    ancestral = outgroup_seq[i] if outgroup_seq is not None else None
                    value = self._site_value(column, ancestral)
                    if value is not None:
                        counts[self.categorizer.category(value) - 1] += 1

        if not analyzable:
            logger.debug(f"{self.short_name}: nothing to analyse in {block!r}")

        for tag, count in zip(self.supported_tags(), counts):
            result.set_value(tag, count, NumberKind.UNSIGNED)


# ============================================================================
# Sequence diversity
# ============================================================================

class SequenceDiversity(MultiValueStatistic):
    """
    Estimates of sequence diversity in a block.

    - NbSegregating: number of segregating sites
    - WattersonTheta: Watterson's theta, S / a1
    - TajimaPi: mean pairwise differences per complete site
    - TajimaD: Tajima's D (NaN when undefined)

    Only complete sites are analyzed (no gap, no generic character).
    """

    TAGS = ["NbSegregating", "WattersonTheta", "TajimaPi", "TajimaD"]

    short_name = "SequenceDiversityStatistics"
    full_name = "Sequence diversity statistics."

    def __init__(
        self,
        ingroup: Sequence[str] = (),
        alphabet: NucleotideAlphabet = DNA,
        no_species_means_all: bool = False
    ):
        self.selection = SpeciesSelection(ingroup, no_species_means_all)
        self.alphabet = alphabet
        super().__init__()

    def supported_tags(self) -> List[str]:
        return list(self.TAGS)

    def _compute(self, block: MafBlock, result: StatResult) -> None:
        chars = self.selection.project(block).chars
        n = chars.shape[0]
        complete = chars[:, self.alphabet.resolved_mask(chars).all(axis=0)] if n else chars
        n_sites = complete.shape[1]

        s = 0
        theta = pi_per_site = 0.0
        d = math.nan
        if n >= 2 and n_sites > 0:
            s = int((complete != complete[0]).any(axis=0).sum())
            # Differing pairs per site: (n^2 - sum of squared state counts) / 2
            sum_sq = sum(
                (complete == state).sum(axis=0) ** 2 for state in self.alphabet.states
            )
            pair_diffs = float(((n * n - sum_sq) / 2.0).sum())
            pi = pair_diffs / (n * (n - 1) / 2.0)
            theta = watterson_theta(s, n)
            pi_per_site = pi / n_sites
            d = tajima_d(pi, s, n)

        result.set_value("NbSegregating", s, NumberKind.UNSIGNED)
        result.set_value("WattersonTheta", float(theta))
        result.set_value("TajimaPi", float(pi_per_site))
        result.set_value("TajimaD", d)
