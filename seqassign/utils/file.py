#!/usr/bin/env python3
"""
File helpers shared by the parsers, writers and pipelines.

Every OSError is re-raised as FileOperationError so the CLI reports it with
the path that failed.
"""
import os
import shutil
import logging
import tempfile
from contextlib import contextmanager
from typing import IO, Iterator, Optional, TextIO

from ..exceptions import FileOperationError

logger = logging.getLogger("seqassign.utils.file")


def _file_error(action: str, path: str, error: OSError, **details) -> FileOperationError:
    message = f"Error {action} {path}: {error}"
    logger.error(message)
    return FileOperationError(message, {"file_path": path, **details})


def ensure_dir(directory: str) -> str:
    """Create a directory (and parents) if it does not exist yet

    Returns:
        The directory path
    """
    if directory and not os.path.isdir(directory):
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise _file_error("creating directory", directory, e) from e
        logger.debug(f"Created directory {directory}")
    return directory


def prefixed_path(out_dir: str, prefix: str, *parts: str) -> str:
    """Output path "<out_dir>/<prefix>.<part>.<part>..." """
    return os.path.join(out_dir, ".".join((prefix,) + parts))


def check_input_file(file_path: str, description: str = "input file") -> str:
    """Require an existing, non-empty input file

    Raises:
        FileOperationError: If the file is missing or empty
    """
    if not file_path or not os.path.isfile(file_path):
        raise FileOperationError(f"{description} not found: {file_path}", {"file_path": file_path})
    if os.path.getsize(file_path) == 0:
        raise FileOperationError(f"{description} is empty: {file_path}", {"file_path": file_path})
    return file_path


@contextmanager
def safe_open(file_path: str, mode: str = 'r', encoding: Optional[str] = None) -> Iterator[IO]:
    """Open a file, creating the parent directory for writes"""
    if mode[0] in 'wa':
        ensure_dir(os.path.dirname(file_path))
    try:
        handle = open(file_path, mode, encoding=encoding)
    except OSError as e:
        raise _file_error("opening", file_path, e, mode=mode) from e
    with handle:
        yield handle


@contextmanager
def atomic_write(file_path: str, encoding: str = 'utf-8') -> Iterator[TextIO]:
    """Write a text file through a temporary sibling that replaces it on success

    A failed write leaves any existing file untouched.
    """
    directory = ensure_dir(os.path.dirname(file_path)) or '.'
    try:
        fd, temp_path = tempfile.mkstemp(prefix=f".{os.path.basename(file_path)}.", dir=directory)
        handle = os.fdopen(fd, 'w', encoding=encoding)
    except OSError as e:
        raise _file_error("writing", file_path, e) from e

    try:
        with handle:
            yield handle
        shutil.move(temp_path, file_path)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
    logger.debug(f"Wrote {file_path}")
