# SPDX-License-Identifier: MIT
"""Aggregate per-study migration outcomes for end-of-run reporting."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class StudyMetrics:
    """Counts collected for a single study."""

    successful: int = 0
    error: int = 0
    skipped: int = 0
    processed: int = 0
    total: int = 0
    completed: bool = False


_metrics: dict[str, StudyMetrics] = {}


def record_study(
    study: str,
    *,
    successful: int,
    error: int,
    skipped: int,
    processed: int,
    total: int,
    completed: bool,
) -> None:
    """Record the outcome of migrating ``study``."""
    _metrics[study] = StudyMetrics(
        successful=successful,
        error=error,
        skipped=skipped,
        processed=processed,
        total=total,
        completed=completed,
    )


def reset() -> None:
    """Clear all recorded metrics."""
    _metrics.clear()


def print_summary() -> None:
    """Write a summary of collected metrics to ``stdout``."""
    if not _metrics:
        return
    for study, data in _metrics.items():
        status = "complete" if data.completed else "INCOMPLETE"
        print(
            f"{study}: {status} processed={data.processed}/{data.total} "
            f"successful={data.successful} error={data.error} skipped={data.skipped}"
        )
    print(
        f"Totals: studies={len(_metrics)} "
        f"successful={sum(d.successful for d in _metrics.values())} "
        f"error={sum(d.error for d in _metrics.values())} "
        f"skipped={sum(d.skipped for d in _metrics.values())}"
    )


__all__ = ["print_summary", "record_study", "reset"]
