"""Tests for InputScanner."""

from pathlib import Path

import pytest

from fluotitre.io.scanner import InputScanner


def _touch(d: Path, *names: str) -> None:
    for name in names:
        (d / name).write_bytes(b"")


class TestInputScanner:
    def test_excludes_outputs(self, tmp_path: Path):
        _touch(tmp_path, "a.tif", "b.tif", "c.tif", "Intensity_x.tif", "summary.xls")
        found = InputScanner().scan(tmp_path)
        assert [p.name for p in found] == ["a.tif", "b.tif", "c.tif"]
        # five entries, two excluded
        assert len(found) == 5 - 2

    def test_sorted_by_name(self, tmp_path: Path):
        _touch(tmp_path, "w10.tif", "w02.tif", "w01.tif")
        assert [p.name for p in InputScanner().scan(tmp_path)] == [
            "w01.tif", "w02.tif", "w10.tif",
        ]

    def test_summary_suffix_case_insensitive(self, tmp_path: Path):
        _touch(tmp_path, "a.tif", "Results.XLS")
        assert [p.name for p in InputScanner().scan(tmp_path)] == ["a.tif"]

    def test_skips_directories_hidden_and_masks(self, tmp_path: Path):
        _touch(tmp_path, "a.tif", ".DS_Store", "Mask_a.tif")
        (tmp_path / "Intensity_plate").mkdir()
        (tmp_path / "subdir").mkdir()
        assert [p.name for p in InputScanner().scan(tmp_path)] == ["a.tif"]

    def test_custom_prefixes(self, tmp_path: Path):
        _touch(tmp_path, "a.tif", "Out_a.tif", "table.csv")
        scanner = InputScanner(output_prefix="Out_", summary_suffix=".csv", mask_prefix=None)
        assert [p.name for p in scanner.scan(tmp_path)] == ["a.tif"]

    def test_is_input(self, tmp_path: Path):
        scanner = InputScanner()
        assert scanner.is_input(tmp_path / "well.tif")
        assert not scanner.is_input(tmp_path / "Intensity_well.tif")
        assert not scanner.is_input(tmp_path / "summary.xls")

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            InputScanner().scan(tmp_path / "missing")

    def test_not_a_directory(self, tmp_path: Path):
        f = tmp_path / "a.tif"
        f.write_bytes(b"")
        with pytest.raises(NotADirectoryError):
            InputScanner().scan(f)

    def test_no_inputs(self, tmp_path: Path):
        _touch(tmp_path, "summary.xls")
        with pytest.raises(ValueError, match="No input files"):
            InputScanner().scan(tmp_path)
