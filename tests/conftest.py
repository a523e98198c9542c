"""
Pytest configuration and fixtures for MAF pipeline tests.
"""

import sys
import tempfile
from pathlib import Path

import pytest

# Add scripts directory to path for imports
scripts_dir = Path(__file__).parent.parent / "scripts"
sys.path.insert(0, str(scripts_dir))

from mafpipe.blocks import MafBlock
from mafpipe.features import SequenceFeature
from mafpipe.intervals import Interval


# ============================================================================
# Path Fixtures
# ============================================================================

@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Block Fixtures
# ============================================================================

@pytest.fixture
def make_block():
    """Factory fixture building a block from (source, sequence) pairs."""
    def _make_block(rows, score=None):
        return MafBlock.from_rows(rows, score=score)
    return _make_block


@pytest.fixture
def three_species_block(make_block):
    """3 rows x 4 sites, one gap."""
    return make_block([
        ("hg18.chr7", "ACGT"),
        ("panTro2.chr7", "ACGA"),
        ("rheMac2.chr3", "AC-T"),
    ], score=23262.0)


@pytest.fixture
def four_species_block(make_block):
    """
    Four species, one column per kind of pattern:

        col  0 1 2 3 4 5 6 7
        A    A A A A A A A A
        B    A C C A A C A -
        C    C C A A A C G A
        D    C A C C A C T A

    col 0: 1100 (P1), col 1: 0110 (P2), col 2: 1010 (P3),
    col 3: singleton, col 4: constant, col 5: singleton,
    col 6: more than two states, col 7: gap
    """
    return make_block([
        ("A.chr1", "AAAAAAAA"),
        ("B.chr1", "ACCAACA-"),
        ("C.chr1", "CCAAACGA"),
        ("D.chr1", "CACCACTA"),
    ])


@pytest.fixture
def sample_maf_content():
    """Provide sample MAF content for testing."""
    return """\
##maf version=1 scoring=tba.v8

a score=23262.0
s hg18.chr7    27578828 10 + 158545518 AAA-GGGAATG
s panTro1.chr6 28741140 10 + 161576975 AAA-GGGAATG
s baboon         116834 10 +   4622798 AAA-GGGAATG

a score=5062.0
s hg18.chr7    27699739 6 + 158545518 TAAAGA
s panTro1.chr6 28862317 6 + 161576975 TAAAGA

"""


@pytest.fixture
def sample_maf_file(temp_dir, sample_maf_content):
    """Create a temporary MAF file."""
    maf_path = temp_dir / "test.maf"
    maf_path.write_text(sample_maf_content)
    return maf_path


# ============================================================================
# Feature Fixtures
# ============================================================================

@pytest.fixture
def sample_features():
    """Features on two sequences, of three types."""
    return [
        SequenceFeature("gene1", "chr1", "manual", "gene", Interval(100, 500, "+")),
        SequenceFeature("exon1", "chr1", "manual", "exon", Interval(100, 200, "+")),
        SequenceFeature("exon2", "chr1", "manual", "exon", Interval(450, 600, "+")),
        SequenceFeature("gene2", "chr2", "predicted", "gene", Interval(0, 50, "-"), score=0.9),
        SequenceFeature("site1", "chr1", "predicted", "TF binding site", Interval(300, 300)),
    ]


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config():
    """Provide a sample configuration dictionary."""
    return {
        "alphabet": "DNA",
        "statistics": [
            {"name": "BlockSize"},
            {"name": "BlockLength"},
            {"name": "CharacterCounts", "species": ["hg18", "panTro2"], "suffix": "HP"},
            {"name": "SiteFrequencySpectrum", "bounds": [0, 1, 2, 3],
             "ingroup": ["hg18", "panTro2", "rheMac2"]},
            {"name": "PolymorphismStatistics", "species": [["hg18"], ["panTro2"]]},
            {"name": "FourSpeciesPatternCounts", "species": ["A", "B", "C", "D"]},
            {"name": "SequenceDiversity", "ingroup": ["hg18", "panTro2"]},
        ],
    }
