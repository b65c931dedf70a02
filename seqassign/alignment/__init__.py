"""Indel reconciliation, flank selection and alignment joining"""

from .gaps import GapState, scan_gaps, find_inserts, find_deletes, longest_gap
from .indels import IndelReconciler
from .subseq import SubsequenceSelector
from .joiner import AlignmentJoiner

__all__ = [
    'GapState', 'scan_gaps', 'find_inserts', 'find_deletes', 'longest_gap',
    'IndelReconciler', 'SubsequenceSelector', 'AlignmentJoiner',
]
