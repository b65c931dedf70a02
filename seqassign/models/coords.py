#!/usr/bin/env python3
"""
Coordinate segment models.

CoordinateSegment stores its endpoints in ascending order and records the
orientation in its strand; the wire form ("stop..start:-" for the minus
strand) is produced by to_string(). Coords is an ordered list of segments
whose constructor rejects out-of-order or overlapping segments.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from ..exceptions import InvalidCoordinateError
from ..utils.coords_utils import (
    STRANDS, SEGMENT_DELIMITER, format_segment, parse_segment, split_coords, validate_segment
)


@dataclass(frozen=True)
class CoordinateSegment:
    """A 1-based inclusive interval on one strand"""
    start: int
    stop: int
    strand: str = '+'

    def __post_init__(self):
        # stored ascending; orientation lives in the strand
        validate_segment(self.start, self.stop, '+')
        if self.strand not in STRANDS:
            raise InvalidCoordinateError(f"Invalid strand {self.strand!r}")

    @classmethod
    def from_oriented(cls, start: int, stop: int, strand: str) -> 'CoordinateSegment':
        """Create from wire-order endpoints (descending on the minus strand)"""
        validate_segment(start, stop, strand)
        return cls(min(start, stop), max(start, stop), strand)

    @classmethod
    def from_string(cls, segment_str: str) -> 'CoordinateSegment':
        """Parse "start..stop:strand" """
        return cls.from_oriented(*parse_segment(segment_str))

    @property
    def length(self) -> int:
        return self.stop - self.start + 1

    @property
    def oriented(self) -> Tuple[int, int, str]:
        """(start, stop, strand) in wire order"""
        if self.strand == '-':
            return self.stop, self.start, self.strand
        return self.start, self.stop, self.strand

    def contains(self, position: int) -> bool:
        return self.start <= position <= self.stop

    def overlaps(self, other: 'CoordinateSegment') -> bool:
        return self.start <= other.stop and other.start <= self.stop

    def to_string(self) -> str:
        return format_segment(*self.oriented)

    def __str__(self) -> str:
        return self.to_string()


class Coords:
    """Ordered, non-overlapping list of coordinate segments"""

    def __init__(self, segments: Iterable[CoordinateSegment] = ()):
        self._segments: List[CoordinateSegment] = []
        for segment in segments:
            self.append(segment)

    @classmethod
    def from_string(cls, coords_str: str) -> 'Coords':
        """Parse a ","-joined coords string"""
        return cls(CoordinateSegment.from_string(segment) for segment in split_coords(coords_str))

    def append(self, segment: CoordinateSegment) -> None:
        """Append a segment after the current last one; segments are never merged"""
        if self._segments:
            last = self._segments[-1]
            if last.strand == segment.strand:
                # minus strand segments run in descending order
                if segment.strand == '-':
                    in_order = segment.stop < last.start
                else:
                    in_order = segment.start > last.stop
                if not in_order:
                    raise InvalidCoordinateError(
                        f"Segment {segment} overlaps or precedes {last}"
                    )
        self._segments.append(segment)

    @property
    def segments(self) -> List[CoordinateSegment]:
        return list(self._segments)

    @property
    def length(self) -> int:
        """Total positions covered by all segments"""
        return sum(segment.length for segment in self._segments)

    @property
    def span(self) -> Optional[CoordinateSegment]:
        """Smallest single segment containing every segment (None when empty)"""
        if not self._segments:
            return None
        strands = {segment.strand for segment in self._segments}
        strand = strands.pop() if len(strands) == 1 else '?'
        return CoordinateSegment(min(s.start for s in self._segments),
                                 max(s.stop for s in self._segments), strand)

    def max_length_segment(self) -> Tuple[CoordinateSegment, int]:
        """Longest segment and its length; ties go to the first one"""
        if not self._segments:
            raise InvalidCoordinateError("Cannot select the longest segment of empty coords")
        best = self._segments[0]
        for segment in self._segments[1:]:
            if segment.length > best.length:
                best = segment
        return best, best.length

    def index_of(self, segment: CoordinateSegment) -> int:
        return self._segments.index(segment)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[CoordinateSegment]:
        return iter(self._segments)

    def __getitem__(self, index: int) -> CoordinateSegment:
        return self._segments[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Coords):
            return NotImplemented
        return self._segments == other._segments

    def __str__(self) -> str:
        return SEGMENT_DELIMITER.join(str(segment) for segment in self._segments)

    def __repr__(self) -> str:
        return f"Coords({str(self)!r})"
