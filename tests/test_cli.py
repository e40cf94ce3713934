"""
Test CLI functionality.
"""

import pytest
import sys
import os
from click.testing import CliRunner
from ptmscores.ptmscoresc import cli

# Add the parent directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

NO_EVIDENCE_PEAKS = ["--peak", "1500.0:10", "--peak", "1600.0:20"]


@pytest.mark.cli
def test_cli_help():
    """Test CLI help output."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "ptmscores: Post-translational modification site localization scores" in result.output
    assert "phosphors" in result.output
    assert "ascore" in result.output
    assert "mdscore" in result.output


@pytest.mark.cli
def test_cli_version():
    """Test CLI version output."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output


@pytest.mark.cli
@pytest.mark.parametrize("command", ["phosphors", "ascore"])
def test_cli_scoring_help(command):
    runner = CliRunner()
    result = runner.invoke(cli, [command, "--help"])

    assert result.exit_code == 0
    assert "--sequence" in result.output
    assert "--peak" in result.output
    assert "--fragment-mass-tolerance" in result.output
    assert "--fragment-mass-unit" in result.output
    assert "--debug" in result.output


@pytest.mark.cli
def test_cli_phosphors_run():
    runner = CliRunner()
    result = runner.invoke(
        cli, ["phosphors", "--sequence", "PEPS(Phospho)TIDEK"] + NO_EVIDENCE_PEAKS
    )

    assert result.exit_code == 0, result.output
    assert "S4\t50.00" in result.output
    assert "T5\t50.00" in result.output


@pytest.mark.cli
def test_cli_phosphors_trivial():
    runner = CliRunner()
    result = runner.invoke(
        cli, ["phosphors", "--sequence", "PEPS(Phospho)IDEK"] + NO_EVIDENCE_PEAKS
    )

    assert result.exit_code == 0, result.output
    assert "S4\t100.00" in result.output


@pytest.mark.cli
def test_cli_ascore_run():
    runner = CliRunner()
    result = runner.invoke(
        cli, ["ascore", "--sequence", "PEPS(Phospho)TIDEK"] + NO_EVIDENCE_PEAKS
    )

    assert result.exit_code == 0, result.output
    assert "S4\t0.00" in result.output
    assert "T5\t0.00" in result.output


@pytest.mark.cli
def test_cli_ascore_without_modification():
    runner = CliRunner()
    result = runner.invoke(cli, ["ascore", "--sequence", "PEPTIDEK"] + NO_EVIDENCE_PEAKS)

    assert result.exit_code == 1
    assert "Error: INVALID_INPUT" in result.output


@pytest.mark.cli
def test_cli_invalid_peak():
    runner = CliRunner()
    result = runner.invoke(
        cli, ["phosphors", "--sequence", "PEPS(Phospho)TIDEK", "--peak", "abc"]
    )

    assert result.exit_code == 2
    assert "mz:intensity" in result.output


@pytest.mark.cli
def test_cli_mdscore_run():
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "mdscore",
            "--sequence",
            "PEPS(Phospho)TIDEK",
            "--hit",
            "comet:PEPS(Phospho)TIDEK:1e-5",
            "--hit",
            "comet:PEPST(Phospho)IDEK:1e-3",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "20.00" in result.output


@pytest.mark.cli
def test_cli_mdscore_without_competitor():
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["mdscore", "--sequence", "PEPS(Phospho)TIDEK", "--hit", "comet:PEPS(Phospho)TIDEK:1e-5"],
    )

    assert result.exit_code == 0, result.output
    assert "No MD score" in result.output


@pytest.mark.cli
def test_cli_debug_log_file(tmp_path):
    log_file = tmp_path / "phosphors.log"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["phosphors", "--sequence", "PEPS(Phospho)TIDEK", "--debug", "--log-file", str(log_file)]
        + NO_EVIDENCE_PEAKS,
    )

    assert result.exit_code == 0, result.output
    assert log_file.exists()
