"""
MAF Pipeline - Core Library

Genomic feature intervals and per-block statistics on multiple alignments:
- Stranded half-open intervals, sequence features and feature sets
- Tagged numeric results
- Species projection of MAF blocks
- Composition, site classification, pattern counts, polymorphism,
  site frequency spectrum and diversity statistics
"""

from .errors import (
    MafPipeError,
    ConfigurationError,
    OutOfRangeError,
    MissingTagError,
    InvalidTagError,
    DataInconsistencyError,
)

from .intervals import Strand, Interval, merge_intervals

from .features import SequenceFeature, FeatureSet

from .results import NumberKind, TaggedValue, StatResult, SingleValueResult

from .alphabet import DNA, RNA, NucleotideAlphabet, get_alphabet

from .blocks import MafBlock, read_maf_blocks

from .selection import SiteMatrix, SpeciesSelection, MultipleSpeciesSelection

from .statistics import (
    MafStatistic,
    BlockSize,
    BlockLength,
    AlignmentScore,
    SequenceLength,
    PairwiseDivergence,
    CharacterCounts,
    SiteStatistics,
    FourSpeciesPatternCounts,
    PolymorphismStatistics,
)

from .diversity import (
    Categorizer,
    SiteFrequencySpectrum,
    SequenceDiversity,
    harmonic_sum,
    watterson_theta,
    tajima_d,
)

__version__ = "1.0.0"

__all__ = [
    # Errors
    "MafPipeError",
    "ConfigurationError",
    "OutOfRangeError",
    "MissingTagError",
    "InvalidTagError",
    "DataInconsistencyError",
    # Features
    "Strand",
    "Interval",
    "merge_intervals",
    "SequenceFeature",
    "FeatureSet",
    # Results
    "NumberKind",
    "TaggedValue",
    "StatResult",
    "SingleValueResult",
    # Blocks
    "DNA",
    "RNA",
    "NucleotideAlphabet",
    "get_alphabet",
    "MafBlock",
    "read_maf_blocks",
    "SiteMatrix",
    "SpeciesSelection",
    "MultipleSpeciesSelection",
    # Statistics
    "MafStatistic",
    "BlockSize",
    "BlockLength",
    "AlignmentScore",
    "SequenceLength",
    "PairwiseDivergence",
    "CharacterCounts",
    "SiteStatistics",
    "FourSpeciesPatternCounts",
    "PolymorphismStatistics",
    "Categorizer",
    "SiteFrequencySpectrum",
    "SequenceDiversity",
    "harmonic_sum",
    "watterson_theta",
    "tajima_d",
]
