#!/usr/bin/env python3
"""
High-scoring segment pair (HSP) models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .coords import CoordinateSegment


class IndelKind(Enum):
    """Kind of indel event; the value is the token sign"""
    INSERT = '+'   # residues in the sequence with no model counterpart
    DELETE = '-'   # model positions with no sequence counterpart


@dataclass(frozen=True)
class IndelToken:
    """One insert or delete event after seq_pos / mdl_pos"""
    seq_pos: int
    mdl_pos: int
    length: int
    kind: IndelKind

    def __str__(self) -> str:
        return f"Q{self.seq_pos}:S{self.mdl_pos}{self.kind.value}{self.length}"


@dataclass(frozen=True)
class HSP:
    """Data for a single alignment block between a sequence and a model

    Sequence coordinates are reported on the HSP strand (descending on the
    minus strand); model coordinates are always ascending.
    """
    sequence: str
    model: str
    strand: str
    bitscore: float
    seq_start: int
    seq_stop: int
    mdl_start: int
    mdl_stop: int
    evalue: Optional[float] = None
    seq_length: Optional[int] = None
    model_length: Optional[int] = None
    inserts: Tuple[IndelToken, ...] = ()
    deletes: Tuple[IndelToken, ...] = ()
    hsp_number: Optional[int] = None
    alignment_length: Optional[int] = None
    bias: float = 0.0

    @property
    def key(self) -> Tuple[str, str, str]:
        """(model, sequence, strand) aggregation key"""
        return self.model, self.sequence, self.strand

    @property
    def hit_length(self) -> int:
        """Number of sequence positions covered"""
        return abs(self.seq_stop - self.seq_start) + 1

    @property
    def seq_segment(self) -> CoordinateSegment:
        return CoordinateSegment(min(self.seq_start, self.seq_stop),
                                 max(self.seq_start, self.seq_stop), self.strand)

    @property
    def mdl_segment(self) -> CoordinateSegment:
        return CoordinateSegment(min(self.mdl_start, self.mdl_stop),
                                 max(self.mdl_start, self.mdl_stop), '+')
