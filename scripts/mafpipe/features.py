"""
Sequence Features and Feature Sets

A SequenceFeature is a named, typed annotation on one sequence: where it lies
(an Interval), which procedure produced it (source), an optional score and a
free-form string attribute map, as found in GFF-like annotation files.

A FeatureSet owns its features. Every feature added is cloned, and every
subset query returns a new set of clones, so editing a feature obtained from
one set never changes another set.
"""

import copy
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

from .intervals import Interval, merge_intervals

NO_SCORE: float = -1.0


@dataclass
class SequenceFeature:
    """
    A feature located on a sequence.

    Coordinates are 0-based, half-open: start included, end excluded.
    A score of -1 means no score was set.

    Examples:
        >>> f = SequenceFeature("gene1", "chr1", "manual", "gene", Interval(10, 20, "+"))
        >>> f.size
        10
        >>> f.get_attribute("Name") is None
        True
    """
    id: str
    sequence_id: str
    source: str
    type: str
    range: Interval
    score: float = NO_SCORE
    attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def start(self) -> int:
        return self.range.start

    @property
    def end(self) -> int:
        return self.range.end

    @property
    def size(self) -> int:
        return self.range.length

    @property
    def is_empty(self) -> bool:
        return self.range.is_empty

    @property
    def is_point(self) -> bool:
        return self.range.is_point

    @property
    def is_stranded(self) -> bool:
        return self.range.is_stranded

    @property
    def is_negative_strand(self) -> bool:
        return self.range.is_negative_strand

    @property
    def has_score(self) -> bool:
        return self.score != NO_SCORE

    def invert(self) -> None:
        """Change the orientation of the feature."""
        self.range.invert()

    def overlap(self, other: Union["SequenceFeature", Interval]) -> bool:
        """
        True if this feature overlaps another feature or a bare interval.

        Two features only overlap when they lie on the same sequence.
        """
        if isinstance(other, SequenceFeature):
            if other.sequence_id != self.sequence_id:
                return False
            return self.range.overlap(other.range)
        return self.range.overlap(other)

    def includes(self, interval: Interval) -> bool:
        """True if the feature fully contains the interval."""
        return self.range.contains(interval)

    def is_included_in(self, interval: Interval) -> bool:
        """True if the feature is fully contained in the interval."""
        return self.range.is_included_in(interval)

    # ---------- Attributes ----------

    def get_attribute(self, name: str) -> Optional[str]:
        """Return the attribute value, or None if it is not set."""
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        self.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)

    def attribute_names(self) -> Set[str]:
        return set(self.attributes)

    def clone(self) -> "SequenceFeature":
        """Deep copy, including the range and the attribute map."""
        return copy.deepcopy(self)


class FeatureSet:
    """
    Ordered collection of owned SequenceFeature objects.

    Insertion order is kept and duplicates are allowed. Copying a set
    (copy(), copy.copy or copy.deepcopy) clones every feature.
    """

    def __init__(self, features: Optional[Iterable[SequenceFeature]] = None):
        self._features: List[SequenceFeature] = []
        if features is not None:
            for feature in features:
                self.add_feature(feature)

    def add_feature(self, feature: SequenceFeature) -> None:
        """Add a copy of the feature. The caller keeps ownership of the original."""
        self._features.append(feature.clone())

    def clear(self) -> None:
        self._features.clear()

    def __len__(self) -> int:
        return len(self._features)

    def __getitem__(self, i: int) -> SequenceFeature:
        return self._features[i]

    def __iter__(self) -> Iterator[SequenceFeature]:
        return iter(self._features)

    def __repr__(self) -> str:
        return f"FeatureSet({len(self._features)} features)"

    @property
    def is_empty(self) -> bool:
        return len(self._features) == 0

    def copy(self) -> "FeatureSet":
        return FeatureSet(self._features)

    __copy__ = copy

    def __deepcopy__(self, memo) -> "FeatureSet":
        return self.copy()

    # ---------- Summaries ----------

    def sequence_ids(self) -> Set[str]:
        """All sequence ids referenced by features in this set."""
        return {f.sequence_id for f in self._features}

    def types(self) -> Set[str]:
        """All feature types in this set."""
        return {f.type for f in self._features}

    def range_collection(
        self,
        sequence_id: Optional[str] = None,
        merge_distance: int = 0
    ) -> List[Tuple[int, int]]:
        """
        Merged coordinates of the features, strand ignored.

        Args:
            sequence_id: Only consider features on this sequence (all if None)
            merge_distance: Merge ranges within this distance

        Returns:
            Sorted list of disjoint (start, end) tuples
        """
        return merge_intervals(
            (f.range for f in self._features
             if sequence_id is None or f.sequence_id == sequence_id),
            merge_distance,
        )

    # ---------- Subsets ----------

    def _subset(self, keep) -> "FeatureSet":
        return FeatureSet(f for f in self._features if keep(f))

    def by_type(self, feature_type: str) -> "FeatureSet":
        """New set with all features of the given type."""
        return self._subset(lambda f: f.type == feature_type)

    def by_types(self, feature_types: Iterable[str]) -> "FeatureSet":
        """New set with all features of any of the given types."""
        wanted = set(feature_types)
        return self._subset(lambda f: f.type in wanted)

    def by_sequence_id(self, sequence_id: str) -> "FeatureSet":
        """New set with all features on the given sequence."""
        return self._subset(lambda f: f.sequence_id == sequence_id)

    def by_sequence_ids(self, sequence_ids: Iterable[str]) -> "FeatureSet":
        """New set with all features on any of the given sequences."""
        wanted = set(sequence_ids)
        return self._subset(lambda f: f.sequence_id in wanted)

    def by_range(self, interval: Interval, complete: bool) -> "FeatureSet":
        """
        New set with the features falling in a range.

        Args:
            interval: The range to look in. Sequence ids are not checked.
            complete: If True, keep only features fully included in the range,
                otherwise keep features overlapping it.

        Returns:
            A new FeatureSet. The complete=True result is always a subset of
            the complete=False one: empty features lying inside the range
            overlap nothing but are kept by both.
        """
        if complete:
            return self._subset(lambda f: f.is_included_in(interval))
        return self._subset(
            lambda f: f.overlap(interval) or (f.is_empty and f.is_included_in(interval))
        )
