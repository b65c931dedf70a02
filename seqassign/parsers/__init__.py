"""Parsers for search program output"""

from .hit_parser import HitRecordParser
from .hmmer_tblout import HmmerTbloutParser

__all__ = ['HitRecordParser', 'HmmerTbloutParser']
