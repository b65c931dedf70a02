#!/usr/bin/env python3
"""
Alignment models: ungapped segment pairs, flank subsequences and joined
alignments.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .coords import Coords, CoordinateSegment
from ..exceptions import SanityError

# characters treated as gaps in aligned rows
GAP_CHARS = ".-~"


@dataclass(frozen=True)
class UngappedAlignment:
    """Parallel model/sequence coords of the ungapped blocks of one HSP"""
    mdl_coords: Coords
    seq_coords: Coords

    def __post_init__(self):
        if len(self.mdl_coords) != len(self.seq_coords):
            raise SanityError(
                f"Ungapped model coords {self.mdl_coords} and sequence coords "
                f"{self.seq_coords} have different segment counts"
            )
        for mdl_segment, seq_segment in self.pairs():
            if mdl_segment.length != seq_segment.length:
                raise SanityError(
                    f"Ungapped segments differ in length: model {mdl_segment}, sequence {seq_segment}"
                )

    def pairs(self) -> List[Tuple[CoordinateSegment, CoordinateSegment]]:
        """(model segment, sequence segment) pairs in coordinate order"""
        return list(zip(self.mdl_coords, self.seq_coords))

    @property
    def length(self) -> int:
        return self.seq_coords.length

    def max_length_pair(self) -> Tuple[CoordinateSegment, CoordinateSegment]:
        """Longest ungapped block; ties go to the first one"""
        seq_segment, _ = self.seq_coords.max_length_segment()
        index = self.seq_coords.index_of(seq_segment)
        return self.mdl_coords[index], seq_segment


class FlankSide(Enum):
    """Which part of a sequence a subsequence covers"""
    FIVE_PRIME = "5'"
    THREE_PRIME = "3'"
    FULL = "full"


@dataclass(frozen=True)
class SubsequenceSpec:
    """A region of a source sequence to be realigned independently"""
    name: str
    start: int
    stop: int
    source: str
    side: FlankSide

    @classmethod
    def create(cls, source: str, start: int, stop: int, side: FlankSide) -> 'SubsequenceSpec':
        """Build a spec named "<source>/<start>-<stop>" """
        return cls(name=f"{source}/{start}-{stop}", start=start, stop=stop,
                   source=source, side=side)

    @property
    def length(self) -> int:
        return self.stop - self.start + 1

    def to_line(self) -> str:
        return f"{self.name} {self.start} {self.stop} {self.source}"


@dataclass(frozen=True)
class FlankAlignment:
    """Aligned rows for one realigned flank

    seq_row holds the aligned sequence and rf_row the reference (model)
    annotation; a non-gap rf_row character is one model position.
    seq_segment and mdl_segment are the absolute coordinates spanned by the
    rows.
    """
    seq_row: str
    rf_row: str
    seq_segment: CoordinateSegment
    mdl_segment: CoordinateSegment

    def __post_init__(self):
        if len(self.seq_row) != len(self.rf_row):
            raise SanityError(
                f"Flank sequence row ({len(self.seq_row)}) and RF row ({len(self.rf_row)}) differ in length"
            )

    @property
    def residues(self) -> str:
        """Sequence row with gaps removed"""
        return "".join(c for c in self.seq_row if c not in GAP_CHARS)


@dataclass(frozen=True)
class JoinedAlignment:
    """Full-length aligned sequence with its parallel RF annotation"""
    name: str
    seq_row: str
    rf_row: str

    def __post_init__(self):
        if len(self.seq_row) != len(self.rf_row):
            raise SanityError(
                f"Joined sequence row ({len(self.seq_row)}) and RF row ({len(self.rf_row)}) differ in length"
            )

    @property
    def residues(self) -> str:
        return "".join(c for c in self.seq_row if c not in GAP_CHARS)


@dataclass(frozen=True)
class JoinResult:
    """Outcome of joining one sequence; alignment is None on a boundary mismatch"""
    name: str
    alignment: Optional[JoinedAlignment] = None
    boundary_mismatch: bool = False
    message: str = ""

    @property
    def joined(self) -> bool:
        return self.alignment is not None


@dataclass(frozen=True)
class SeedRegion:
    """Longest ungapped block of a sequence's top HSP, used to anchor flank joins"""
    sequence: str
    seq_segment: CoordinateSegment
    mdl_segment: CoordinateSegment
    seq_length: int
    mdl_length: int

    def __post_init__(self):
        if self.seq_segment.length != self.mdl_segment.length:
            raise SanityError(
                f"Seed for {self.sequence} has sequence {self.seq_segment} and model "
                f"{self.mdl_segment} of different lengths"
            )
