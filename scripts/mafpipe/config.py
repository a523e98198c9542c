#!/usr/bin/env python3
"""
MAF Statistics Configuration

Statistics to compute are described in a YAML file:

    alphabet: DNA
    statistics:
      - name: BlockSize
      - name: CharacterCounts
        species: [hg18, panTro2]
        suffix: HP
      - name: SiteFrequencySpectrum
        bounds: [0, 1, 2, 3, 4]
        ingroup: [ind1, ind2, ind3, ind4]
        outgroup: panTro2
      - name: PolymorphismStatistics
        species: [[hg18, hg19], [panTro2, panTro3]]

Usage:
    # Validate configuration
    python -m mafpipe.config stats.yaml --validate

    # List the statistics that will be computed
    python -m mafpipe.config stats.yaml --list

    # Get single value
    python -m mafpipe.config stats.yaml --get alphabet

    # As Python module
    from mafpipe.config import load_config, build_statistics
    statistics = build_statistics(load_config("stats.yaml"))
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import yaml

from .alphabet import get_alphabet
from .diversity import SequenceDiversity, SiteFrequencySpectrum
from .errors import ConfigurationError
from .statistics import (
    AlignmentScore,
    BlockLength,
    BlockSize,
    CharacterCounts,
    FourSpeciesPatternCounts,
    MafStatistic,
    PairwiseDivergence,
    PolymorphismStatistics,
    SequenceLength,
    SiteStatistics,
)

logger = logging.getLogger(__name__)


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Dictionary containing configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}

    return config


def get_nested(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a nested value from config using dot notation.

    Examples:
        >>> config = {"output": {"prefix": "chr7"}}
        >>> get_nested(config, "output.prefix")
        'chr7'
        >>> get_nested(config, "output.missing", "default")
        'default'
    """
    value = config

    for key in key_path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


# ============================================================================
# Statistic factory
# ============================================================================

def _species(entry: Dict[str, Any], key: str = "species") -> List[str]:
    value = entry.get(key) or []
    if isinstance(value, str):
        return [value]
    return [str(s) for s in value]


def _required(entry: Dict[str, Any], key: str) -> Any:
    if key not in entry:
        raise ConfigurationError(f"Statistic '{entry.get('name')}' requires '{key}'.")
    return entry[key]


BUILDERS: Dict[str, Callable[[Dict[str, Any], Any], MafStatistic]] = {
    "BlockSize": lambda e, a: BlockSize(),
    "BlockLength": lambda e, a: BlockLength(),
    "AlnScore": lambda e, a: AlignmentScore(),
    "SequenceLength": lambda e, a: SequenceLength(str(_required(e, "species"))),
    "PairwiseDivergence": lambda e, a: PairwiseDivergence(
        str(_required(e, "species1")), str(_required(e, "species2")), a
    ),
    "CharacterCounts": lambda e, a: CharacterCounts(a, _species(e), e.get("suffix", "")),
    "SiteStatistics": lambda e, a: SiteStatistics(
        _species(e), a, bool(e.get("all_species", False))
    ),
    "FourSpeciesPatternCounts": lambda e, a: FourSpeciesPatternCounts(
        _species(e), a
    ),
    "PolymorphismStatistics": lambda e, a: PolymorphismStatistics(
        [[str(s) for s in group] for group in _required(e, "species")], a
    ),
    "SiteFrequencySpectrum": lambda e, a: SiteFrequencySpectrum(
        [float(b) for b in _required(e, "bounds")],
        _species(e, "ingroup"),
        e.get("outgroup"),
        a,
    ),
    "SequenceDiversity": lambda e, a: SequenceDiversity(
        _species(e, "ingroup"), a, bool(e.get("all_species", False))
    ),
}


def build_statistic(entry: Dict[str, Any], alphabet_name: str = "DNA") -> MafStatistic:
    """
    Instantiate one statistic from its configuration entry.

    Raises:
        ConfigurationError: Unknown statistic, missing or invalid parameters
    """
    name = entry.get("name")
    if name not in BUILDERS:
        raise ConfigurationError(
            f"Unknown statistic '{name}', expected one of {sorted(BUILDERS)}"
        )
    try:
        alphabet = get_alphabet(entry.get("alphabet", alphabet_name))
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    statistic = BUILDERS[name](entry, alphabet)
    logger.debug(f"Configured {statistic!r}")
    return statistic


def build_statistics(config: Dict[str, Any]) -> List[MafStatistic]:
    """Instantiate every statistic listed under 'statistics', in order."""
    alphabet_name = config.get("alphabet", "DNA")
    return [build_statistic(entry, alphabet_name) for entry in config.get("statistics") or []]


def validate_config(config: Dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate configuration by building every statistic.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors = []

    entries = config.get("statistics")
    if not entries:
        errors.append("No statistics configured (statistics)")
        return False, errors

    alphabet_name = config.get("alphabet", "DNA")
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            errors.append(f"statistics[{i}] must be a mapping, got {entry!r}")
            continue
        try:
            build_statistic(entry, alphabet_name)
        except (ConfigurationError, TypeError, ValueError) as e:
            errors.append(f"statistics[{i}] ({entry.get('name')}): {e}")

    return len(errors) == 0, errors


def print_config_summary(config: Dict[str, Any]) -> None:
    """Print a human-readable config summary."""
    print("=" * 60)
    print("MAF Statistics Configuration Summary")
    print("=" * 60)

    print(f"\nAlphabet: {config.get('alphabet', 'DNA')}")
    print("\nStatistics:")
    for statistic in build_statistics(config):
        print(f"  {statistic.short_name}: {statistic.full_name}")
        print(f"    tags: {', '.join(statistic.supported_tags())}")

    print("\n" + "=" * 60)


def main():
    parser = argparse.ArgumentParser(
        description="MAF Statistics Configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "config",
        help="Path to YAML configuration file"
    )

    parser.add_argument(
        "--get",
        metavar="KEY",
        help="Get single value using dot notation (e.g., alphabet)"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and report errors"
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="List configured statistics and their tags"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON (for --get with complex values)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug messages"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML: {e}")
        sys.exit(1)

    if args.get:
        value = get_nested(config, args.get)
        if value is None:
            print(f"Key not found: {args.get}", file=sys.stderr)
            sys.exit(1)
        if args.json:
            print(json.dumps(value))
        else:
            print(value)

    elif args.validate:
        is_valid, errors = validate_config(config)
        if is_valid:
            print("Configuration is valid!")
            sys.exit(0)
        else:
            print("Configuration errors:", file=sys.stderr)
            for error in errors:
                print(f"  - {error}", file=sys.stderr)
            sys.exit(1)

    else:
        try:
            if args.list:
                for statistic in build_statistics(config):
                    print(f"{statistic.short_name}\t{','.join(statistic.supported_tags())}")
            else:
                print_config_summary(config)
        except ConfigurationError as e:
            logger.error(f"Invalid configuration: {e}")
            sys.exit(1)


if __name__ == "__main__":
    main()
