#!/usr/bin/env python3
"""
seqassign data models
"""
from .coords import CoordinateSegment, Coords
from .hsp import HSP, IndelKind, IndelToken
from .scores import (
    AggregateScore, SequenceRanking, Outcome, UnexpectedFeature,
    ClassificationDecision, UNASSIGNED
)
from .alignment import (
    GAP_CHARS, UngappedAlignment, FlankSide, SubsequenceSpec,
    FlankAlignment, JoinedAlignment, JoinResult, SeedRegion
)

__all__ = [
    'CoordinateSegment', 'Coords',
    'HSP', 'IndelKind', 'IndelToken',
    'AggregateScore', 'SequenceRanking', 'Outcome', 'UnexpectedFeature',
    'ClassificationDecision', 'UNASSIGNED',
    'GAP_CHARS', 'UngappedAlignment', 'FlankSide', 'SubsequenceSpec',
    'FlankAlignment', 'JoinedAlignment', 'JoinResult', 'SeedRegion',
]
