"""
Species Selection and Projection

Statistics usually look at a subset of the rows of a block. A selection holds
the species names to keep and, for every block, projects the block onto a
SiteMatrix: the selected rows (in block order) as an upper-case numpy
character matrix, one row per sequence and one column per site.

    selection = SpeciesSelection(["hg18", "panTro2"])
    sites = selection.project(block)
    for column in sites.columns():
        ...

The projection is rebuilt on every call since blocks differ in which rows
they hold.
"""

import logging
from typing import Callable, Iterator, List, Optional, Sequence

import numpy as np

from .blocks import MafBlock, species_of
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class SiteMatrix:
    """Aligned characters of a set of rows, as a (sequences x sites) array."""

    def __init__(self, species: Sequence[str], sequences: Sequence[str], number_of_sites: int = 0):
        self.species: List[str] = list(species)
        if sequences:
            self.chars = np.array([list(s.upper()) for s in sequences], dtype="<U1")
        else:
            self.chars = np.empty((0, number_of_sites), dtype="<U1")

    @classmethod
    def from_block(
        cls,
        block: MafBlock,
        keep: Optional[Callable[[str], bool]] = None
    ) -> "SiteMatrix":
        """Rows of the block whose species passes keep (all rows if keep is None)."""
        records = [
            r for r in block.alignment
            if keep is None or keep(species_of(r))
        ]
        return cls(
            [species_of(r) for r in records],
            [str(r.seq) for r in records],
            block.number_of_sites,
        )

    @property
    def number_of_sequences(self) -> int:
        return self.chars.shape[0]

    @property
    def number_of_sites(self) -> int:
        return self.chars.shape[1]

    def column(self, i: int) -> np.ndarray:
        return self.chars[:, i]

    def columns(self) -> Iterator[np.ndarray]:
        for i in range(self.number_of_sites):
            yield self.chars[:, i]

    def rows_for_species(self, species: str) -> np.ndarray:
        return self.chars[[i for i, s in enumerate(self.species) if s == species]]

    def __repr__(self) -> str:
        return f"SiteMatrix({self.number_of_sequences} x {self.number_of_sites})"


def _check_unique(species: Sequence[str], what: str) -> None:
    seen = set()
    for name in species:
        if name in seen:
            raise ConfigurationError(f"{what}: duplicated species name '{name}'.")
        seen.add(name)


class SpeciesSelection:
    """
    A list of species to analyse.

    Args:
        species: Species names, each at most once
        no_species_means_all: If True, an empty list selects every row

    Raises:
        ConfigurationError: If a species is named more than once
    """

    def __init__(self, species: Sequence[str] = (), no_species_means_all: bool = False):
        self.species: List[str] = list(species)
        self.no_species_means_all = no_species_means_all
        _check_unique(self.species, "Species selection")

    @property
    def selects_all(self) -> bool:
        return not self.species and self.no_species_means_all

    def project(self, block: MafBlock) -> SiteMatrix:
        """Sub-alignment of the block restricted to the selected species."""
        if self.selects_all:
            sites = SiteMatrix.from_block(block)
        else:
            wanted = set(self.species)
            sites = SiteMatrix.from_block(block, keep=wanted.__contains__)
        logger.debug(f"Projected {block!r} onto {sites!r}")
        return sites

    def __repr__(self) -> str:
        return f"SpeciesSelection({self.species}, no_species_means_all={self.no_species_means_all})"


class MultipleSpeciesSelection:
    """
    Several disjoint species selections, projected independently.

    Raises:
        ConfigurationError: If a group names a species twice, or two groups
            share a species
    """

    def __init__(self, groups: Sequence[Sequence[str]]):
        self.groups: List[SpeciesSelection] = []
        owner = {}
        for i, group in enumerate(groups):
            selection = SpeciesSelection(group)
            for name in selection.species:
                if name in owner:
                    raise ConfigurationError(
                        f"Species selections {owner[name] + 1} and {i + 1} "
                        f"both contain '{name}'."
                    )
                owner[name] = i
            self.groups.append(selection)

    def __len__(self) -> int:
        return len(self.groups)

    def project(self, block: MafBlock) -> List[SiteMatrix]:
        return [g.project(block) for g in self.groups]
