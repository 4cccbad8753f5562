"""Telemetry and monitoring helpers for the migrator.

Exports:
    init_logfire: Configure Pydantic Logfire instrumentation.
    record_study: Record the outcome of one study.
    print_summary: Output a summary of collected metrics.
    reset: Clear stored metrics.
"""

from .monitoring import init_logfire
from .telemetry import print_summary, record_study, reset

__all__ = [
    "init_logfire",
    "print_summary",
    "record_study",
    "reset",
]
