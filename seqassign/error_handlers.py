#!/usr/bin/env python3
"""
Error reporting for the seqassign command line.

Package errors (bad input, bad configuration, inconsistent coordinates) end
a run with exit status 1, anything else with 2, and an interrupt with 130.
"""
import sys
import logging
import traceback
from functools import wraps
from typing import Callable, TypeVar, Union

from .exceptions import ParseError, SeqAssignError

T = TypeVar('T')

EXIT_ERROR = 1
EXIT_UNEXPECTED = 2
EXIT_INTERRUPTED = 130


def format_error(error: Exception, verbose: bool = False) -> str:
    """One-line description of an error, plus details or traceback when verbose"""
    if not isinstance(error, SeqAssignError):
        text = f"Unexpected Error: {error}"
        if verbose:
            text = f"Unexpected Error ({type(error).__name__}): {error}\n{traceback.format_exc()}"
        return text

    text = f"{type(error).__name__}: {error.message}"
    if verbose and error.details:
        text += f"\nDetails: {error.details}"
    return text


def exit_code(error: BaseException) -> int:
    """Process exit status for an error escaping a command"""
    if isinstance(error, KeyboardInterrupt):
        return EXIT_INTERRUPTED
    if isinstance(error, SeqAssignError):
        return EXIT_ERROR
    return EXIT_UNEXPECTED


def handle_exceptions(exit_on_error: bool = False) -> Callable[[Callable[..., T]], Callable[..., Union[T, int]]]:
    """Report errors escaping the wrapped command and turn them into an exit status

    Args:
        exit_on_error: Call sys.exit with the status instead of returning it
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Union[T, int]]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Union[T, int]:
            logger = logging.getLogger(func.__module__)
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt as e:
                logger.info("Interrupted")
                print("\nOperation cancelled by user", file=sys.stderr)
                status = exit_code(e)
            except ParseError as e:
                # the message already names the offending line
                logger.error(f"Input rejected: {e.message}")
                print(format_error(e), file=sys.stderr)
                status = exit_code(e)
            except SeqAssignError as e:
                logger.error(str(e))
                print(format_error(e), file=sys.stderr)
                status = exit_code(e)
            except Exception as e:
                logger.error(f"Unexpected error: {e}", exc_info=True)
                print(format_error(e), file=sys.stderr)
                print("See log for details. Run with --verbose for more information.", file=sys.stderr)
                status = exit_code(e)
            if exit_on_error:
                sys.exit(status)
            return status
        return wrapper
    return decorator
