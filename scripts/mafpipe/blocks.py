"""
MAF Alignment Blocks

Thin adapter over Biopython's MultipleSeqAlignment, as produced by
Bio.AlignIO's MAF reader. In MAF, each 's' line names its source as
'species.chromosome' (e.g. 'hg18.chr7'), so the species of a row is the part
of the record id before the first dot.

    block = MafBlock.from_rows([("hg18.chr7", "ACGT"), ("panTro2.chr7", "ACGA")])
    block.number_of_sequences   # 2
    block.number_of_sites       # 4
    block.sequences_for_species("hg18")

Blocks are read-only for the statistics engine.
"""

import gzip
import logging
from typing import Iterator, List, Optional, Sequence, Tuple

from Bio import AlignIO
from Bio.Align import MultipleSeqAlignment
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from .alphabet import GAP_CHARACTERS

logger = logging.getLogger(__name__)


def species_of(record: SeqRecord) -> str:
    """Species name of a MAF row: 'hg18.chr7' -> 'hg18'."""
    return record.id.split(".", 1)[0]


class MafBlock:
    """An alignment block: aligned rows of equal length, tagged by species."""

    def __init__(self, alignment: MultipleSeqAlignment, score: Optional[float] = None):
        self.alignment = alignment
        if score is None:
            # Bio.AlignIO.MafIO stores the "a" line fields in _annotations
            annotations = (
                getattr(alignment, "annotations", None)
                or getattr(alignment, "_annotations", None)
                or {}
            )
            if "score" in annotations:
                score = float(annotations["score"])
        self._score = score

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Tuple[str, str]],
        score: Optional[float] = None
    ) -> "MafBlock":
        """
        Build a block in memory from (source, aligned sequence) pairs.

        Raises:
            ValueError: If the aligned sequences differ in length
        """
        records = [SeqRecord(Seq(seq), id=src, description="") for src, seq in rows]
        return cls(MultipleSeqAlignment(records), score)

    @property
    def rows(self) -> List[SeqRecord]:
        return list(self.alignment)

    @property
    def number_of_sequences(self) -> int:
        return len(self.alignment)

    @property
    def number_of_sites(self) -> int:
        return self.alignment.get_alignment_length() if len(self.alignment) else 0

    @property
    def score(self) -> Optional[float]:
        """Block score from the 'a score=' line, None if absent."""
        return self._score

    def species(self) -> List[str]:
        """Species present in the block, in row order, without repeats."""
        seen = []
        for record in self.alignment:
            name = species_of(record)
            if name not in seen:
                seen.append(name)
        return seen

    def sequences_for_species(self, species: str) -> List[SeqRecord]:
        """All rows of a species, in block order (possibly empty)."""
        return [r for r in self.alignment if species_of(r) == species]

    def has_sequence_for_species(self, species: str) -> bool:
        return any(species_of(r) == species for r in self.alignment)

    @staticmethod
    def count_nucleotides(record: SeqRecord) -> int:
        """Number of non-gap characters of a row."""
        seq = str(record.seq)
        return len(seq) - sum(seq.count(g) for g in GAP_CHARACTERS)

    def __len__(self) -> int:
        return len(self.alignment)

    def __repr__(self) -> str:
        return (
            f"MafBlock({self.number_of_sequences} sequences, "
            f"{self.number_of_sites} sites, score={self._score})"
        )


def read_maf_blocks(maf_path: str) -> Iterator[MafBlock]:
    """
    Iterate over the blocks of a MAF file.

    Args:
        maf_path: Path to MAF file (supports .gz)

    Yields:
        MafBlock objects, in file order
    """
    opener = gzip.open if str(maf_path).endswith('.gz') else open

    with opener(maf_path, 'rt') as f:
        for i, alignment in enumerate(AlignIO.parse(f, "maf")):
            block = MafBlock(alignment)
            logger.debug(f"Read block {i}: {block!r}")
            yield block
