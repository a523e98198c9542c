"""
Tests for the site frequency spectrum and sequence diversity estimators.
"""

import math
import sys
from pathlib import Path

import pytest

# Add scripts directory to path for imports
scripts_dir = Path(__file__).parent.parent / "scripts"
sys.path.insert(0, str(scripts_dir))

from mafpipe.diversity import (
    Categorizer,
    SequenceDiversity,
    SiteFrequencySpectrum,
    harmonic_sum,
    tajima_d,
    watterson_theta,
)
from mafpipe.errors import ConfigurationError, DataInconsistencyError, OutOfRangeError


def values(statistic):
    return {tag: statistic.result.value(tag) for tag in statistic.supported_tags()}


# ============================================================================
# Tests: Categorizer
# ============================================================================

class TestCategorizer:
    """Tests for Categorizer bins."""

    @pytest.fixture
    def categorizer(self):
        return Categorizer([0, 1, 2, 3])

    def test_number_of_categories(self, categorizer):
        assert categorizer.number_of_categories == 3

    @pytest.mark.parametrize("value,expected", [
        (0, 1),
        (0.9, 1),
        (1, 2),
        (2.5, 3),
    ])
    def test_category(self, categorizer, value, expected):
        assert categorizer.category(value) == expected

    @pytest.mark.parametrize("value", [3, -0.1, 10])
    def test_out_of_range(self, categorizer, value):
        with pytest.raises(OutOfRangeError) as excinfo:
            categorizer.category(value)
        assert excinfo.value.lower == 0
        assert excinfo.value.upper == 3

    def test_unsorted_bounds(self):
        """Bounds are sorted at construction."""
        assert Categorizer([3, 0, 2, 1]).category(1.5) == 2

    def test_too_few_bounds(self):
        with pytest.raises(ConfigurationError):
            Categorizer([1])


# ============================================================================
# Tests: SiteFrequencySpectrum
# ============================================================================

class TestSiteFrequencySpectrum:
    """Tests for SiteFrequencySpectrum."""

    INGROUP = ["i1", "i2", "i3", "i4"]

    @pytest.fixture
    def block(self, make_block):
        """
        col 0: constant       col 1: 1 minor allele
        col 2: 1 minor (3 C)  col 3: 2/2 split
        col 4: three states   col 5: gap
        """
        return make_block([
            ("i1.1", "AACAAA"),
            ("i2.1", "AACAC-"),
            ("i3.1", "AACGGA"),
            ("i4.1", "ATAGTA"),
            ("out.1", "ATAGAA"),
        ])

    def test_tags(self):
        sfs = SiteFrequencySpectrum([0, 1, 2, 3], self.INGROUP)
        assert sfs.supported_tags() == ["Bin1", "Bin2", "Bin3"]

    def test_minor_allele_counts(self, block):
        """Without outgroup, k and n-k fall in the same bin."""
        sfs = SiteFrequencySpectrum([1, 2, 3], self.INGROUP)
        sfs.compute(block)
        assert values(sfs) == {"Bin1": 2, "Bin2": 1}

    def test_constant_sites_not_counted(self, make_block):
        """Monomorphic sites carry no allele count and fill no bin."""
        sfs = SiteFrequencySpectrum([1, 2, 3], self.INGROUP)
        sfs.compute(make_block([
            ("i1.1", "AA"),
            ("i2.1", "AA"),
            ("i3.1", "AC"),
            ("i4.1", "AC"),
        ]))
        assert values(sfs) == {"Bin1": 0, "Bin2": 1}

    def test_constant_sites_with_zero_bound(self, block):
        """With a bin starting at 0, constant sites still stay out of it."""
        sfs = SiteFrequencySpectrum([0, 1, 2, 3], self.INGROUP)
        sfs.compute(block)
        assert values(sfs) == {"Bin1": 0, "Bin2": 2, "Bin3": 1}

    def test_outgroup(self, block):
        """With an outgroup, derived alleles are counted."""
        sfs = SiteFrequencySpectrum([1, 2, 3, 4, 5], self.INGROUP, outgroup="out")
        sfs.compute(block)
        # col 0: ancestral only, col 1: 3 derived, col 2: 3, col 3: 2
        assert values(sfs) == {"Bin1": 0, "Bin2": 1, "Bin3": 2, "Bin4": 0}

    def test_fixed_derived_state(self, make_block):
        """A constant ingroup differing from the outgroup is fully derived."""
        sfs = SiteFrequencySpectrum([1, 2, 3, 4, 5], self.INGROUP, outgroup="out")
        sfs.compute(make_block([
            ("i1.1", "CA"),
            ("i2.1", "CA"),
            ("i3.1", "CA"),
            ("i4.1", "CA"),
            ("out.1", "AA"),
        ]))
        assert values(sfs) == {"Bin1": 0, "Bin2": 0, "Bin3": 0, "Bin4": 1}

    def test_missing_outgroup(self, make_block):
        sfs = SiteFrequencySpectrum([0, 1, 2, 3], self.INGROUP, outgroup="out")
        sfs.compute(make_block([("i1.1", "AC"), ("i2.1", "AA")]))
        assert values(sfs) == {"Bin1": 0, "Bin2": 0, "Bin3": 0}

    def test_duplicated_outgroup(self, make_block):
        sfs = SiteFrequencySpectrum([0, 1, 2, 3], self.INGROUP, outgroup="out")
        with pytest.raises(DataInconsistencyError):
            sfs.compute(make_block([("i1.1", "A"), ("out.1", "A"), ("out.2", "A")]))

    def test_outgroup_in_ingroup(self):
        with pytest.raises(ConfigurationError):
            SiteFrequencySpectrum([0, 1, 2], ["a", "b"], outgroup="a")

    def test_out_of_range_rolls_back(self, block, make_block):
        """A count outside the bounds fails and keeps the previous result."""
        sfs = SiteFrequencySpectrum([1, 2], self.INGROUP)
        sfs.compute(make_block([("i1.1", "AA"), ("i2.1", "AC")]))
        assert values(sfs) == {"Bin1": 1}
        with pytest.raises(OutOfRangeError):
            sfs.compute(block)
        assert values(sfs) == {"Bin1": 1}


# ============================================================================
# Tests: Estimators
# ============================================================================

class TestEstimators:
    """Tests for Watterson's theta and Tajima's D."""

    def test_harmonic_sum(self):
        assert harmonic_sum(2) == 1.0
        assert harmonic_sum(4) == pytest.approx(11 / 6)
        assert harmonic_sum(4, 2) == pytest.approx(49 / 36)

    def test_watterson_theta(self):
        assert watterson_theta(1, 2) == 1.0
        assert watterson_theta(11, 4) == pytest.approx(6.0)
        assert watterson_theta(3, 1) == 0.0

    def test_tajima_d_no_segregating_site(self):
        assert math.isnan(tajima_d(0.0, 0, 10))

    def test_tajima_d_small_samples(self):
        """The variance vanishes for n <= 3."""
        assert math.isnan(tajima_d(1.0, 1, 2))
        assert math.isnan(tajima_d(2 / 3, 1, 3))

    def test_tajima_d_singleton(self):
        """One singleton among four sequences: pi = 1/2."""
        assert tajima_d(0.5, 1, 4) == pytest.approx(-math.sqrt(3 / 8))

    def test_tajima_d_balanced(self):
        """One 2/2 site among four sequences: pi = 2/3."""
        assert tajima_d(2 / 3, 1, 4) == pytest.approx(4 / math.sqrt(6))


# ============================================================================
# Tests: SequenceDiversity
# ============================================================================

class TestSequenceDiversity:
    """Tests for SequenceDiversity."""

    def test_two_sequences(self, make_block):
        """2 rows, 5 complete sites, 1 segregating: theta = 1, pi = 1/5."""
        stat = SequenceDiversity(["a", "b"])
        stat.compute(make_block([("a.1", "ACGTA"), ("b.1", "ACGTT")]))
        result = values(stat)
        assert result["NbSegregating"] == 1
        assert result["WattersonTheta"] == pytest.approx(1.0)
        assert result["TajimaPi"] == pytest.approx(0.2)
        assert math.isnan(result["TajimaD"])

    def test_incomplete_sites_ignored(self, make_block):
        stat = SequenceDiversity(["a", "b"])
        stat.compute(make_block([("a.1", "ACGTA-N"), ("b.1", "ACGTTAT")]))
        assert stat.result.value("NbSegregating") == 1
        assert stat.result.value("TajimaPi") == pytest.approx(0.2)

    def test_no_segregating_site(self, make_block):
        stat = SequenceDiversity(no_species_means_all=True)
        stat.compute(make_block([("a.1", "ACGT"), ("b.1", "ACGT"), ("c.1", "ACGT")]))
        result = values(stat)
        assert result["NbSegregating"] == 0
        assert result["WattersonTheta"] == 0.0
        assert result["TajimaPi"] == 0.0
        assert math.isnan(result["TajimaD"])

    def test_four_sequences(self, make_block):
        """One balanced and one singleton site among four sequences."""
        stat = SequenceDiversity(["a", "b", "c", "d"])
        stat.compute(make_block([
            ("a.1", "AAA"),
            ("b.1", "AAA"),
            ("c.1", "CAA"),
            ("d.1", "CTA"),
        ]))
        result = values(stat)
        pi = 2 / 3 + 1 / 2
        assert result["NbSegregating"] == 2
        assert result["WattersonTheta"] == pytest.approx(2 / (11 / 6))
        assert result["TajimaPi"] == pytest.approx(pi / 3)
        assert result["TajimaD"] == pytest.approx(tajima_d(pi, 2, 4))
        assert not math.isnan(result["TajimaD"])

    def test_single_sequence(self, make_block):
        stat = SequenceDiversity(["a", "b"])
        stat.compute(make_block([("a.1", "ACGT"), ("c.1", "ACGA")]))
        assert stat.result.value("NbSegregating") == 0
        assert math.isnan(stat.result.value("TajimaD"))
