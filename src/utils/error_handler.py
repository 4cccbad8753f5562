"""Error reporting abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import logfire

from core.result import Failure


class ErrorHandler(ABC):
    """Interface for reporting errors.

    Implementations should avoid raising further exceptions and should emit
    concise diagnostics suitable for production logs.
    """

    @abstractmethod
    def handle(
        self,
        message: str,
        error: Failure | Exception | None = None,
        **context: Any,
    ) -> None:
        """Record ``message`` with optional ``error`` and identifying ``context``."""


class LoggingErrorHandler(ErrorHandler):
    """Error handler that logs via ``logfire``."""

    def handle(
        self,
        message: str,
        error: Failure | Exception | None = None,
        **context: Any,
    ) -> None:
        """Log an error message with optional failure details.

        Args:
            message: Description of the error to record.
            error: Failure or exception providing additional detail.
            **context: Identifiers such as study and analysis id.

        Returns:
            None.
        """
        if isinstance(error, Failure):
            logfire.error(message, errors=list(error.errors), **context)
        elif error is not None:
            logfire.error(message, error=str(error), **context)
        else:
            logfire.error(message, **context)
