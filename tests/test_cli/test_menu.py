"""Tests for the interactive menu and top-level group."""

from pathlib import Path

from click.testing import CliRunner

from fluotitre.cli.main import cli


class TestStartup:
    def test_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("run", "titre", "config"):
            assert command in result.output

    def test_version(self, runner: CliRunner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0


class TestMenu:
    def test_no_args_launches_menu(self, runner: CliRunner):
        result = runner.invoke(cli, [], input="q\n")
        assert result.exit_code == 0
        assert "FluoTitre" in result.output
        assert "Quantify a folder of images" in result.output

    def test_eof_exits_cleanly(self, runner: CliRunner):
        result = runner.invoke(cli, [], input="")
        assert result.exit_code == 0

    def test_invalid_option(self, runner: CliRunner):
        result = runner.invoke(cli, [], input="9\nq\n")
        assert "Invalid option: 9" in result.output

    def test_show_config(self, runner: CliRunner):
        result = runner.invoke(cli, [], input="4\nq\n")
        assert result.exit_code == 0
        assert "min_particle_area" in result.output
        assert "defaults" in result.output

    def test_load_config(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "cfg.yaml"
        path.write_text("min_particle_area: 42\n")
        result = runner.invoke(cli, [], input=f"3\n{path}\n4\nq\n")
        assert result.exit_code == 0
        assert "Loaded configuration" in result.output
        assert "42" in result.output

    def test_back_cancels(self, runner: CliRunner):
        result = runner.invoke(cli, [], input="1\nb\nq\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output

    def test_run_analysis(self, runner: CliRunner, well_dir: Path, tmp_path: Path):
        cfg = tmp_path / "cfg.yaml"
        cfg.write_text(
            "default_roi:\n  center_x: 100\n  center_y: 100\n  width: 160\n  height: 160\n"
        )
        result = runner.invoke(
            cli, [], input=f"3\n{cfg}\n1\n{well_dir}\nauto\ny\nq\n",
        )
        assert result.exit_code == 0, result.output
        assert "Batch complete" in result.output
        assert (well_dir / "Intensity_plate" / "summary.xls").exists()

    def test_estimate_titre(self, runner: CliRunner, summary_file: Path):
        result = runner.invoke(
            cli, [], input=f"2\n{summary_file}\nctrl.tif\n1000000\n\nq\n",
        )
        assert result.exit_code == 0, result.output
        assert "s1.tif" in result.output
        assert "2.5e+05" in result.output
