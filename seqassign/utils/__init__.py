#!/usr/bin/env python3
"""
seqassign Utilities Module
"""
from .coords_utils import (
    parse_segment, format_segment, validate_segment, segment_length,
    segment_contains, parse_coords, append_segment, coords_length,
    max_length_segment
)
from .file import ensure_dir, prefixed_path, check_input_file, safe_open, atomic_write

__all__ = [
    # Coordinate codec
    'parse_segment', 'format_segment', 'validate_segment', 'segment_length',
    'segment_contains', 'parse_coords', 'append_segment', 'coords_length',
    'max_length_segment',
    # File utilities
    'ensure_dir', 'prefixed_path', 'check_input_file', 'safe_open', 'atomic_write',
]
