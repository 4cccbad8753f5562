# SPDX-License-Identifier: MIT
from __future__ import annotations

import sys
from io import StringIO

from observability.telemetry import print_summary, record_study, reset


def test_summary_lists_each_study(monkeypatch) -> None:
    """Study outcomes aggregate into a printed summary."""

    reset()
    record_study(
        "S1", successful=3, error=1, skipped=2, processed=6, total=6, completed=True
    )
    record_study(
        "S2", successful=1, error=0, skipped=0, processed=1, total=9, completed=False
    )
    buf = StringIO()
    monkeypatch.setattr(sys, "stdout", buf)
    print_summary()
    output = buf.getvalue()
    assert "S1: complete processed=6/6" in output
    assert "S2: INCOMPLETE processed=1/9" in output
    assert "Totals: studies=2 successful=4 error=1 skipped=2" in output
    reset()


def test_empty_summary_prints_nothing(monkeypatch) -> None:
    buf = StringIO()
    monkeypatch.setattr(sys, "stdout", buf)
    print_summary()
    assert buf.getvalue() == ""
