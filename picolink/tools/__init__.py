"""Small helpers shared by the library and its command-line tool."""

from .utilities import log_exceptions, configure_logging

__all__ = ["log_exceptions", "configure_logging"]
