"""Logging helpers shared by the library and the ``picolink`` command."""

import functools
import logging
from typing import Callable


LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def log_exceptions(func: Callable) -> Callable:
    """
    Report an exception leaving ``func`` on its module's logger, then let it
    propagate.

    One ERROR record is written, carrying the traceback and naming ``func``
    by qualified name. Callers that wrap a step with this should not report
    the same failure again.

    >>> @log_exceptions
    ... def blink(link):
    ...     link.send(LedCommand(True))
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as exc:
            logging.getLogger(func.__module__).error(
                "Exception in %s: %s", func.__qualname__, exc, exc_info=True
            )
            raise

    return wrapper


def configure_logging(verbose: bool = False) -> None:
    """Root logging setup for the command-line tools (DEBUG with -v)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
