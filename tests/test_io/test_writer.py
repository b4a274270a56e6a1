"""Tests for ResultWriter and read_summary."""

from pathlib import Path

import numpy as np
import pytest
import tifffile

from fluotitre.core.exceptions import ImageIOError
from fluotitre.core.models import BatchSummary, Classification, SummaryRow
from fluotitre.io.writer import (
    SUMMARY_COLUMNS,
    ResultWriter,
    mask_path_for,
    output_dir_for,
    read_summary,
)


@pytest.fixture
def summary() -> BatchSummary:
    return BatchSummary([
        SummaryRow("a.tif", 3, 1200.0, 6.25, 210.5, Classification.NORMAL),
        SummaryRow("b.tif", 0, 0.0, 0.0, 1500.0, Classification.HIGH_AUTOFLUORESCENCE),
    ])


class TestPaths:
    def test_output_dir_for(self, tmp_path: Path):
        d = tmp_path / "plate1"
        assert output_dir_for(d, "Intensity_") == d / "Intensity_plate1"

    def test_mask_path_for(self, tmp_path: Path):
        assert mask_path_for(tmp_path, "well A1.tif", "Mask_") == tmp_path / "Mask_well A1.tif"

    def test_mask_path_keeps_full_name(self, tmp_path: Path):
        assert mask_path_for(tmp_path, "a.tiff", "Mask_") == tmp_path / "Mask_a.tiff"
        assert mask_path_for(tmp_path, "a.TIF", "Mask_") == tmp_path / "Mask_a.TIF"
        assert mask_path_for(tmp_path, "a.png", "Mask_") == tmp_path / "Mask_a.png.tif"
        assert mask_path_for(tmp_path, "a.tif", "Mask_") != mask_path_for(tmp_path, "a.tiff", "Mask_")


class TestResultWriter:
    def test_prepare_creates_folder(self, tmp_path: Path):
        writer = ResultWriter(tmp_path / "out" / "nested")
        assert writer.prepare().is_dir()

    def test_write_mask_lossless(self, tmp_path: Path):
        writer = ResultWriter(tmp_path)
        mask = np.zeros((20, 20), dtype=np.uint8)
        mask[5:10, 5:10] = 255
        path = writer.write_mask("w1.tif", mask)
        assert path.name == "Mask_w1.tif"
        np.testing.assert_array_equal(tifffile.imread(str(path)), mask)

    def test_write_mask_missing_folder(self, tmp_path: Path):
        writer = ResultWriter(tmp_path / "never_created")
        with pytest.raises(ImageIOError) as exc_info:
            writer.write_mask("w1.tif", np.zeros((2, 2), dtype=np.uint8))
        assert exc_info.value.file_name == "w1.tif"

    def test_write_summary_tab_separated(self, tmp_path: Path, summary: BatchSummary):
        path = ResultWriter(tmp_path).write_summary(summary)
        assert path == tmp_path / "summary.xls"
        lines = path.read_text().splitlines()
        assert lines[0].split("\t") == SUMMARY_COLUMNS
        assert lines[1].startswith("a.tif\t3\t")
        assert len(lines) == 3

    def test_empty_summary_has_header(self, tmp_path: Path):
        path = ResultWriter(tmp_path).write_summary(BatchSummary())
        assert path.read_text().splitlines() == ["\t".join(SUMMARY_COLUMNS)]


class TestReadSummary:
    def test_roundtrip(self, tmp_path: Path, summary: BatchSummary):
        path = ResultWriter(tmp_path).write_summary(summary)
        loaded = read_summary(path)
        assert [r.label for r in loaded] == ["a.tif", "b.tif"]
        a = loaded.find("a.tif")
        assert a.count == 3
        assert a.percent_coverage == pytest.approx(6.25)
        assert a.mfi == pytest.approx(210.5)
        assert loaded.find("b.tif").classification is Classification.HIGH_AUTOFLUORESCENCE

    def test_roundtrip_keeps_precision(self, tmp_path: Path):
        summary = BatchSummary([SummaryRow("w.tif", 1, 120.0, 100 / 3, 55.123456789)])
        loaded = read_summary(ResultWriter(tmp_path).write_summary(summary))
        row = loaded.find("w.tif")
        assert row.percent_coverage == pytest.approx(100 / 3, rel=1e-12)
        assert row.mfi == pytest.approx(55.123456789, rel=1e-12)

    def test_minimal_columns(self, tmp_path: Path):
        path = tmp_path / "s.xls"
        path.write_text("Slice\tCount\tTotal Area\t%Area\nw1\t2\t300\t1.5\n")
        row = read_summary(path).find("w1")
        assert row.percent_coverage == 1.5
        assert row.mfi is None
        assert row.classification is None

    def test_missing_columns(self, tmp_path: Path):
        path = tmp_path / "s.xls"
        path.write_text("Slice\tCount\nw1\t2\n")
        with pytest.raises(ValueError, match="missing columns"):
            read_summary(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ImageIOError):
            read_summary(tmp_path / "none.xls")
