# seqassign/utils/coords_utils.py
"""
Codec for coordinate segments ("start..stop:strand") and coords strings
(segments joined with ",").

All positions are 1-based and inclusive. A "+" segment is ascending, a "-"
segment is descending (start is the 5' end on the minus strand) and a "?"
segment is ascending with unknown orientation.
"""

import re
from typing import List, Tuple

from ..exceptions import InvalidCoordinateError

SEGMENT_PATTERN = re.compile(r'^(\d+)\.\.(\d+):([+\-?])$')
STRANDS = ('+', '-', '?')
SEGMENT_DELIMITER = ','

Segment = Tuple[int, int, str]


def validate_segment(start: int, stop: int, strand: str) -> None:
    """Raise InvalidCoordinateError unless (start, stop, strand) is a valid segment"""
    for value in (start, stop):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidCoordinateError(f"Segment positions must be integers, got {value!r}")
        if value < 1:
            raise InvalidCoordinateError(f"Segment positions are 1-based, got {value}")
    if strand not in STRANDS:
        raise InvalidCoordinateError(f"Invalid strand {strand!r}, expected one of {', '.join(STRANDS)}")
    if strand == '-':
        if start < stop:
            raise InvalidCoordinateError(f"Minus strand segment must be descending: {start}..{stop}")
    elif start > stop:
        raise InvalidCoordinateError(f"Segment must be ascending on strand {strand}: {start}..{stop}")


def format_segment(start: int, stop: int, strand: str) -> str:
    """Format a segment as "start..stop:strand" """
    validate_segment(start, stop, strand)
    return f"{start}..{stop}:{strand}"


def parse_segment(segment_str: str) -> Segment:
    """Parse "start..stop:strand" into (start, stop, strand)"""
    match = SEGMENT_PATTERN.match(segment_str or "")
    if not match:
        raise InvalidCoordinateError(f"Unable to parse coordinate segment: {segment_str!r}")
    start, stop, strand = int(match.group(1)), int(match.group(2)), match.group(3)
    validate_segment(start, stop, strand)
    return start, stop, strand


def segment_length(segment_str: str) -> int:
    """Number of positions covered by a segment"""
    start, stop, _ = parse_segment(segment_str)
    return abs(stop - start) + 1


def segment_contains(segment_str: str, position: int) -> bool:
    """Check whether a position lies within a segment, regardless of strand"""
    start, stop, _ = parse_segment(segment_str)
    return min(start, stop) <= position <= max(start, stop)


def split_coords(coords_str: str) -> List[str]:
    """Split a coords string into its segment strings (empty string gives [])"""
    if not coords_str:
        return []
    return coords_str.split(SEGMENT_DELIMITER)


def parse_coords(coords_str: str) -> List[Segment]:
    """Parse every segment of a coords string"""
    return [parse_segment(segment) for segment in split_coords(coords_str)]


def append_segment(coords_str: str, segment_str: str) -> str:
    """Append a segment to a coords string; adjacent segments are never merged"""
    parse_segment(segment_str)
    if not coords_str:
        return segment_str
    return f"{coords_str}{SEGMENT_DELIMITER}{segment_str}"


def coords_length(coords_str: str) -> int:
    """Total number of positions over all segments of a coords string"""
    return sum(abs(stop - start) + 1 for start, stop, _ in parse_coords(coords_str))


def max_length_segment(coords_str: str) -> Tuple[str, int]:
    """Return the longest segment and its length; ties go to the first one"""
    best_segment = None
    best_length = 0
    for segment in split_coords(coords_str):
        length = segment_length(segment)
        if best_segment is None or length > best_length:
            best_segment, best_length = segment, length
    if best_segment is None:
        raise InvalidCoordinateError("Cannot select the longest segment of an empty coords string")
    return best_segment, best_length
