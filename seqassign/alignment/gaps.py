#!/usr/bin/env python3
"""
Gap scanning for pairwise alignment rows.

Walks the aligned query (sequence) and subject (model) rows of one HSP and
reports runs of gaps as indel tokens. Gaps in the query are deletes (model
positions the sequence lacks); gaps in the subject are inserts.
"""

from enum import Enum, auto
from typing import Iterable, List, Optional, Tuple

from ..exceptions import ValidationError
from ..models.hsp import IndelKind, IndelToken

GAP_CHAR = '-'


class GapState(Enum):
    NOT_IN_GAP = auto()
    IN_GAP = auto()


def _check_rows(query_row: str, subject_row: str) -> None:
    if len(query_row) != len(subject_row):
        raise ValidationError(
            f"Query row ({len(query_row)}) and subject row ({len(subject_row)}) differ in length"
        )


def _step(query_strand: str) -> int:
    if query_strand not in ('+', '-'):
        raise ValidationError(f"Invalid query strand {query_strand!r}")
    return 1 if query_strand == '+' else -1


def find_deletes(query_row: str, subject_row: str, query_start: int, subject_start: int,
                 query_strand: str = '+') -> List[IndelToken]:
    """Find runs of gaps in the query row

    Args:
        query_row: Aligned query characters
        subject_row: Aligned subject characters
        query_start: Query position of the first aligned query residue
        subject_start: Subject position of the first aligned subject residue
        query_strand: "+" or "-"; query positions descend on the minus strand

    Returns:
        Delete tokens in ascending query order
    """
    _check_rows(query_row, subject_row)
    step = _step(query_strand)

    tokens: List[IndelToken] = []
    state = GapState.NOT_IN_GAP
    q_pos, s_pos = query_start, subject_start
    gap_q = gap_s = gap_len = 0

    for q_char, s_char in zip(query_row, subject_row):
        if q_char != GAP_CHAR:
            if state == GapState.IN_GAP:
                tokens.append(IndelToken(gap_q, gap_s, gap_len, IndelKind.DELETE))
                state = GapState.NOT_IN_GAP
            if s_char != GAP_CHAR:
                s_pos += 1
            q_pos += step
        else:
            if state == GapState.NOT_IN_GAP:
                state = GapState.IN_GAP
                gap_q, gap_s, gap_len = q_pos - step, s_pos - 1, 1
            else:
                gap_len += 1
            s_pos += 1

    if state == GapState.IN_GAP:
        tokens.append(IndelToken(gap_q, gap_s, gap_len, IndelKind.DELETE))

    if step < 0:
        tokens.reverse()
    return tokens


def find_inserts(query_row: str, subject_row: str, query_start: int, subject_start: int,
                 query_strand: str = '+') -> List[IndelToken]:
    """Find runs of gaps in the subject row

    Arguments are as for find_deletes. Returns insert tokens in ascending
    query order.
    """
    _check_rows(query_row, subject_row)
    step = _step(query_strand)

    tokens: List[IndelToken] = []
    state = GapState.NOT_IN_GAP
    q_pos, s_pos = query_start, subject_start
    gap_q = gap_s = gap_len = 0

    def close_gap():
        if step > 0:
            return IndelToken(gap_q, gap_s, gap_len, IndelKind.INSERT)
        # on the minus strand the next query residue precedes the insert
        return IndelToken(q_pos, s_pos, gap_len, IndelKind.INSERT)

    for q_char, s_char in zip(query_row, subject_row):
        if s_char != GAP_CHAR:
            if state == GapState.IN_GAP:
                tokens.append(close_gap())
                state = GapState.NOT_IN_GAP
            s_pos += 1
            if q_char != GAP_CHAR:
                q_pos += step
        else:
            if state == GapState.NOT_IN_GAP:
                state = GapState.IN_GAP
                gap_q, gap_s, gap_len = q_pos - step, s_pos - 1, 1
            else:
                gap_len += 1
            q_pos += step

    if state == GapState.IN_GAP:
        tokens.append(close_gap())

    if step < 0:
        tokens.reverse()
    return tokens


def scan_gaps(query_row: str, subject_row: str, query_start: int, subject_start: int,
              query_strand: str = '+') -> Tuple[List[IndelToken], List[IndelToken]]:
    """Return (inserts, deletes) for one pair of alignment rows"""
    return (find_inserts(query_row, subject_row, query_start, subject_start, query_strand),
            find_deletes(query_row, subject_row, query_start, subject_start, query_strand))


def longest_gap(tokens: Iterable[IndelToken]) -> Optional[IndelToken]:
    """Longest token; ties go to the first one"""
    best = None
    for token in tokens:
        if best is None or token.length > best.length:
            best = token
    return best
