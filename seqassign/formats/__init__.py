"""File formats read and written by seqassign"""

from .indel_file import IndelRecord, read_indel_file, write_indel_file
from .tblout import (
    SummaryRow, write_model_summary, write_summed_model_summary, read_model_summary,
    write_search_tblout
)
from .stockholm import read_stockholm_rows, read_flank_alignments, write_joined_alignments
from .reports import decisions_to_frame, write_decision_table, write_outcome_summary

__all__ = [
    'IndelRecord', 'read_indel_file', 'write_indel_file',
    'SummaryRow', 'write_model_summary', 'write_summed_model_summary', 'read_model_summary',
    'write_search_tblout',
    'read_stockholm_rows', 'read_flank_alignments', 'write_joined_alignments',
    'decisions_to_frame', 'write_decision_table', 'write_outcome_summary',
]
