"""
Tests for the YAML configuration layer and the statistic factory.
"""

import sys
from pathlib import Path

import pytest
import yaml

# Add scripts directory to path for imports
scripts_dir = Path(__file__).parent.parent / "scripts"
sys.path.insert(0, str(scripts_dir))

from mafpipe.alphabet import RNA
from mafpipe.config import (
    build_statistic,
    build_statistics,
    get_nested,
    load_config,
    validate_config,
)
from mafpipe.diversity import SequenceDiversity, SiteFrequencySpectrum
from mafpipe.errors import ConfigurationError
from mafpipe.statistics import (
    BlockLength,
    BlockSize,
    CharacterCounts,
    FourSpeciesPatternCounts,
    PolymorphismStatistics,
)


# ============================================================================
# Tests: Loading
# ============================================================================

class TestLoadConfig:
    """Tests for load_config and get_nested."""

    def test_load(self, temp_dir, sample_config):
        path = temp_dir / "stats.yaml"
        path.write_text(yaml.safe_dump(sample_config))
        assert load_config(str(path)) == sample_config

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == {}

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_config(str(temp_dir / "absent.yaml"))

    def test_get_nested(self):
        config = {"output": {"prefix": "chr7"}, "alphabet": "DNA"}
        assert get_nested(config, "alphabet") == "DNA"
        assert get_nested(config, "output.prefix") == "chr7"
        assert get_nested(config, "output.missing", "default") == "default"
        assert get_nested(config, "alphabet.name") is None


# ============================================================================
# Tests: Statistic Factory
# ============================================================================

class TestBuildStatistics:
    """Tests for build_statistic and build_statistics."""

    def test_sample_config(self, sample_config):
        """Statistics are built in the listed order."""
        statistics = build_statistics(sample_config)
        assert [type(s) for s in statistics] == [
            BlockSize,
            BlockLength,
            CharacterCounts,
            SiteFrequencySpectrum,
            PolymorphismStatistics,
            FourSpeciesPatternCounts,
            SequenceDiversity,
        ]
        assert statistics[2].short_name == "CountsHP"
        assert statistics[3].supported_tags() == ["Bin1", "Bin2", "Bin3"]

    def test_computes_on_block(self, sample_config, three_species_block):
        for statistic in build_statistics(sample_config):
            statistic.compute(three_species_block)
            for tag in statistic.supported_tags():
                statistic.result.value(tag)

    def test_alphabet(self):
        stat = build_statistic({"name": "CharacterCounts"}, "RNA")
        assert stat.alphabet is RNA

    def test_entry_alphabet_overrides(self):
        stat = build_statistic({"name": "CharacterCounts", "alphabet": "RNA"}, "DNA")
        assert stat.alphabet is RNA

    def test_single_species_string(self):
        stat = build_statistic({"name": "CharacterCounts", "species": "hg18"})
        assert stat.selection.species == ["hg18"]

    def test_unknown_statistic(self):
        with pytest.raises(ConfigurationError):
            build_statistic({"name": "Codons"})

    def test_unknown_alphabet(self):
        with pytest.raises(ConfigurationError):
            build_statistic({"name": "BlockSize"}, "Protein")

    def test_missing_parameter(self):
        with pytest.raises(ConfigurationError):
            build_statistic({"name": "SiteFrequencySpectrum", "ingroup": ["a", "b"]})

    def test_empty(self):
        assert build_statistics({}) == []


# ============================================================================
# Tests: Validation
# ============================================================================

class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid(self, sample_config):
        is_valid, errors = validate_config(sample_config)
        assert is_valid
        assert errors == []

    def test_no_statistics(self):
        is_valid, errors = validate_config({"alphabet": "DNA"})
        assert not is_valid
        assert len(errors) == 1

    def test_collects_all_errors(self):
        """Every bad entry is reported, not only the first one."""
        config = {
            "statistics": [
                {"name": "BlockSize"},
                {"name": "FourSpeciesPatternCounts", "species": ["A", "B", "C"]},
                {"name": "PolymorphismStatistics", "species": [["a", "b"], ["b"]]},
                "BlockLength",
            ]
        }
        is_valid, errors = validate_config(config)
        assert not is_valid
        assert len(errors) == 3
        assert errors[0].startswith("statistics[1] (FourSpeciesPatternCounts)")
