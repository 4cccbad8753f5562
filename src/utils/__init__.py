"""Utility interfaces and implementations."""

from .array_utils import map_async, slice_from, slice_to
from .error_handler import ErrorHandler, LoggingErrorHandler
from .pipe_utils import pipe_log

__all__ = [
    "ErrorHandler",
    "LoggingErrorHandler",
    "map_async",
    "pipe_log",
    "slice_from",
    "slice_to",
]
