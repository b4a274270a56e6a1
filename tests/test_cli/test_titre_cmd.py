"""Tests for the titre command."""

from pathlib import Path

import pandas as pd
import pytest
from click.testing import CliRunner

from fluotitre.cli.main import cli


class TestTitre:
    def test_control_label(self, runner: CliRunner, summary_file: Path):
        result = runner.invoke(
            cli, ["titre", str(summary_file), "--control-titre", "1e6", "--control-label", "ctrl.tif"],
        )
        assert result.exit_code == 0, result.output
        assert "s1.tif" in result.output
        assert "2.5e+05" in result.output
        assert "ctrl.tif" in result.output

    def test_writes_csv(self, runner: CliRunner, summary_file: Path, tmp_path: Path):
        out = tmp_path / "titres.csv"
        result = runner.invoke(cli, [
            "titre", str(summary_file),
            "--control-titre", "1e6", "--control-label", "ctrl.tif",
            "--baseline-label", "neg.tif", "-o", str(out),
        ])
        assert result.exit_code == 0, result.output
        df = pd.read_csv(out)
        assert list(df.columns) == ["Slice", "%Area", "Titre", "Baseline OK"]
        assert df["Slice"].tolist() == ["s1.tif", "s2.tif"]
        assert df["Titre"].tolist() == pytest.approx([2.5e5, 5.0e5])
        assert df["Baseline OK"].all()

    def test_control_coverage(self, runner: CliRunner, summary_file: Path, tmp_path: Path):
        out = tmp_path / "titres.csv"
        result = runner.invoke(cli, [
            "titre", str(summary_file),
            "--control-titre", "100", "--control-coverage", "50", "-o", str(out),
        ])
        assert result.exit_code == 0, result.output
        df = pd.read_csv(out)
        # nothing excluded when the control is not a summary row
        assert len(df) == 4
        assert df.loc[df["Slice"] == "s2.tif", "Titre"].item() == pytest.approx(20.0)

    def test_dirty_baseline_warns(self, runner: CliRunner, summary_file: Path):
        result = runner.invoke(cli, [
            "titre", str(summary_file),
            "--control-titre", "1e6", "--control-label", "ctrl.tif",
            "--baseline-coverage", "3", "--tolerance", "1",
        ])
        assert result.exit_code == 0, result.output
        assert "Warning" in result.output

    def test_zero_control(self, runner: CliRunner, summary_file: Path):
        result = runner.invoke(cli, [
            "titre", str(summary_file), "--control-titre", "1e6", "--control-coverage", "0",
        ])
        assert result.exit_code == 1
        assert "0% coverage" in result.output

    def test_unknown_label(self, runner: CliRunner, summary_file: Path):
        result = runner.invoke(cli, [
            "titre", str(summary_file), "--control-titre", "1e6", "--control-label", "x.tif",
        ])
        assert result.exit_code == 1
        assert "Available" in result.output

    def test_needs_one_control(self, runner: CliRunner, summary_file: Path):
        result = runner.invoke(cli, ["titre", str(summary_file), "--control-titre", "1e6"])
        assert result.exit_code == 2
        assert "exactly one" in result.output

    def test_coverage_out_of_range(self, runner: CliRunner, summary_file: Path):
        result = runner.invoke(cli, [
            "titre", str(summary_file), "--control-titre", "1", "--control-coverage", "150",
        ])
        assert result.exit_code == 2
