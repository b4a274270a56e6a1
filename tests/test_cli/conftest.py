"""Shared fixtures for CLI tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from fluotitre.core.models import BatchSummary, Classification, SummaryRow
from fluotitre.io.writer import ResultWriter


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def summary_file(tmp_path: Path) -> Path:
    """Summary table with a control, an uninfected well and two samples."""
    writer = ResultWriter(tmp_path / "out")
    writer.prepare()
    return writer.write_summary(BatchSummary([
        SummaryRow("ctrl.tif", 12, 4000.0, 20.0, 240.0, Classification.NORMAL),
        SummaryRow("neg.tif", 0, 0.0, 0.1, 180.0, Classification.NORMAL),
        SummaryRow("s1.tif", 5, 1000.0, 5.0, 210.0, Classification.NORMAL),
        SummaryRow("s2.tif", 8, 2000.0, 10.0, 1200.0, Classification.HIGH_AUTOFLUORESCENCE),
    ]))
