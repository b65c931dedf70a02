#!/usr/bin/env python3
"""
Exception hierarchy for seqassign.
All custom exceptions should inherit from SeqAssignError.
"""
from typing import Dict, Any, Optional


class SeqAssignError(Exception):
    """Base exception for all seqassign errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize with error message and optional details

        Args:
            message: Error message
            details: Optional details dictionary with context
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(SeqAssignError):
    """Error related to configuration issues"""
    pass


class ValidationError(SeqAssignError):
    """Caller-supplied data failed validation"""
    pass


class FileOperationError(SeqAssignError):
    """Error during file operations"""
    pass


class ParseError(SeqAssignError):
    """Malformed input line; aborts the run"""

    def __init__(self, message: str, line_number: Optional[int] = None,
                 line: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize with the offending line

        Args:
            message: Error message
            line_number: 1-based line number of the offending line
            line: Text of the offending line
            details: Optional details dictionary with context
        """
        self.line_number = line_number
        self.line = line
        details = dict(details or {})
        if line_number is not None:
            details['line_number'] = line_number
            message = f"{message} (line {line_number}: {line!r})"
        super().__init__(message, details)


class SanityError(SeqAssignError):
    """Coordinates or lengths are internally inconsistent"""
    pass


class InvalidCoordinateError(SeqAssignError):
    """Malformed coordinate segment or coords string"""
    pass
