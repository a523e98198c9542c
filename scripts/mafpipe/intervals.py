"""
Stranded Coordinate Intervals

Coordinates follow the 0-based, half-open convention used by MAF and PAF:

    [start, end)   start included, end excluded
    length = end - start, so start == end is an empty interval
    a one-base annotation at position 12 is start=12, end=13

Strand is one of four symbols:

    '+'  positive strand
    '-'  negative strand
    '.'  not stranded
    '?'  strandedness relevant but unknown

Any other symbol is read as '.'.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple, Union


class Strand(Enum):
    """Strand of a coordinate range."""
    PLUS = "+"
    MINUS = "-"
    UNSTRANDED = "."
    UNKNOWN = "?"

    @classmethod
    def from_symbol(cls, symbol: Union[str, "Strand"]) -> "Strand":
        """
        Parse a strand symbol, defaulting to UNSTRANDED.

        Examples:
            >>> Strand.from_symbol("-")
            <Strand.MINUS: '-'>
            >>> Strand.from_symbol("x")
            <Strand.UNSTRANDED: '.'>
        """
        if isinstance(symbol, Strand):
            return symbol
        try:
            return cls(symbol)
        except ValueError:
            return cls.UNSTRANDED


@dataclass(frozen=True)
class Interval:
    """
    A half-open coordinate range [start, end) with strand information.

    Only the strand can change after construction, through invert().
    Assigning to any field raises dataclasses.FrozenInstanceError.
    """
    start: int
    end: int
    strand: Strand = Strand.UNSTRANDED

    # invert() changes the strand in place, so intervals are not hashable
    __hash__ = None

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"Interval start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(
                f"Interval end must be >= start, got [{self.start}, {self.end})"
            )
        object.__setattr__(self, "strand", Strand.from_symbol(self.strand))

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def length(self) -> int:
        """Number of positions covered."""
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @property
    def is_point(self) -> bool:
        return self.end - self.start == 1

    @property
    def is_stranded(self) -> bool:
        """True for '+' and '-' only."""
        return self.strand in (Strand.PLUS, Strand.MINUS)

    @property
    def is_negative_strand(self) -> bool:
        return self.strand is Strand.MINUS

    def invert(self) -> None:
        """Swap '+' and '-'. Unstranded and unknown strands are left as they are."""
        if self.strand is Strand.PLUS:
            object.__setattr__(self, "strand", Strand.MINUS)
        elif self.strand is Strand.MINUS:
            object.__setattr__(self, "strand", Strand.PLUS)

    def overlap(self, other: "Interval") -> bool:
        """
        True if the two intervals share at least one position.

        Touching intervals such as [0, 10) and [10, 20) do not overlap,
        and an empty interval overlaps nothing.

        Examples:
            >>> Interval(0, 10).overlap(Interval(9, 20))
            True
            >>> Interval(0, 10).overlap(Interval(10, 20))
            False
        """
        return max(self.start, other.start) < min(self.end, other.end)

    def contains(self, other: "Interval") -> bool:
        """True if this interval fully covers other."""
        return self.start <= other.start and other.end <= self.end

    def is_included_in(self, other: "Interval") -> bool:
        """True if this interval is fully covered by other."""
        return other.contains(self)

    def as_tuple(self) -> Tuple[int, int]:
        return (self.start, self.end)

    def __str__(self) -> str:
        return f"[{self.start}, {self.end}){self.strand.value}"


def merge_intervals(
    intervals: Iterable[Union[Interval, Tuple[int, int]]],
    merge_distance: int = 0
) -> List[Tuple[int, int]]:
    """
    Merge overlapping or nearby intervals, ignoring strand.

    Args:
        intervals: Interval objects or (start, end) tuples (0-based, half-open)
        merge_distance: Merge intervals within this distance

    Returns:
        Sorted list of disjoint (start, end) tuples

    Examples:
        >>> merge_intervals([(0, 100), (90, 200), (250, 300)])
        [(0, 200), (250, 300)]
        >>> merge_intervals([Interval(0, 100), Interval(110, 200)], merge_distance=10)
        [(0, 200)]
    """
    pairs = [
        iv.as_tuple() if isinstance(iv, Interval) else (iv[0], iv[1])
        for iv in intervals
    ]
    if not pairs:
        return []

    pairs.sort(key=lambda x: x[0])
    merged = [list(pairs[0])]

    for start, end in pairs[1:]:
        prev_end = merged[-1][1]
        if start <= prev_end + merge_distance:
            merged[-1][1] = max(prev_end, end)
        else:
            merged.append([start, end])

    return [(s, e) for s, e in merged]
