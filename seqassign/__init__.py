#!/usr/bin/env python3
"""
seqassign - nucleotide sequence classification against reference models,
with seed-and-flank alignment joining.
"""

__version__ = "0.1.0"

from .exceptions import SeqAssignError, ParseError, SanityError, InvalidCoordinateError
from .error_handlers import handle_exceptions
from .config import ConfigManager
from .core import LoggingManager

__all__ = [
    'SeqAssignError', 'ParseError', 'SanityError', 'InvalidCoordinateError',
    'handle_exceptions', 'ConfigManager', 'LoggingManager',
]
