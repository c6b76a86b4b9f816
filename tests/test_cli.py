"""
CLI Test Suite
==============

Tests for the `exprc` command-line driver, run through click's CliRunner.
"""

import pytest
from click.testing import CliRunner

from exprc import __version__
from exprc.cli.errors import ExitCode
from exprc.cli.exprc import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("EXPRC_TARGETS", "EXPRC_POW_MODE", "EXPRC_CHECK_OVERFLOW", "EXPRC_ASSEMBLY_NAME"):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Basic Invocation Tests
# =============================================================================

class TestExprcCLI:
    """Tests for the exprc CLI tool."""

    def test_cli_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Compile an arithmetic expression" in result.output

    def test_cli_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_eval_target(self, runner):
        result = runner.invoke(main, ["-e", "2^3^2", "-t", "eval"])
        assert result.exit_code == 0
        assert result.output == "512\n"

    def test_sexpr_target(self, runner):
        result = runner.invoke(main, ["-e", "1+2*3", "-t", "sexpr"])
        assert result.exit_code == 0
        assert result.output == "(+ 1 (* 2 3))\n"

    def test_all_targets_by_default(self, runner):
        result = runner.invoke(main, ["-e", "(1+2)*3"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "9"
        assert lines[1] == ""
        assert lines[2] == "(* (+ 1 2) 3)"
        assert "#include <stdio.h>" in result.output
        assert ".entrypoint" in result.output

    def test_repeated_targets(self, runner):
        result = runner.invoke(main, ["-e", "1+1", "-t", "sexpr", "-t", "eval"])
        assert result.exit_code == 0
        assert result.output == "(+ 1 1)\n\n2\n"

    def test_targets_from_environment(self, runner):
        result = runner.invoke(main, ["-e", "1+2"], env={"EXPRC_TARGETS": "eval"})
        assert result.exit_code == 0
        assert result.output == "3\n"

    def test_target_option_overrides_environment(self, runner):
        result = runner.invoke(main, ["-e", "1+2", "-t", "sexpr"], env={"EXPRC_TARGETS": "eval,c"})
        assert result.exit_code == 0
        assert result.output == "(+ 1 2)\n"

    def test_all_overrides_environment(self, runner):
        result = runner.invoke(main, ["-e", "1", "-t", "all"], env={"EXPRC_TARGETS": "eval"})
        assert result.exit_code == 0
        assert ".entrypoint" in result.output

    def test_environment_target_with_output(self, runner, tmp_path):
        output = tmp_path / "output.il"
        result = runner.invoke(main, ["-e", "2^10", "-o", str(output)], env={"EXPRC_TARGETS": "cil"})
        assert result.exit_code == 0
        assert "conv.i4" in output.read_text()

    def test_long_expression(self, runner):
        result = runner.invoke(main, ["-e", "+".join(["1"] * 600), "-t", "eval"])
        assert result.exit_code == 0
        assert result.output == "600\n"


# =============================================================================
# Input Source Tests
# =============================================================================

class TestInputSources:
    """Expression from -e, a file, or stdin."""

    def test_reads_stdin(self, runner):
        result = runner.invoke(main, ["-t", "eval"], input="1+2+3\n")
        assert result.exit_code == 0
        assert result.output == "6\n"

    def test_reads_first_line_of_file(self, runner, tmp_path):
        source_file = tmp_path / "expr.txt"
        source_file.write_text("2*21\n1+\n")
        result = runner.invoke(main, [str(source_file), "-t", "eval"])
        assert result.exit_code == 0
        assert result.output == "42\n"

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path / "missing.txt")])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Output Tests
# =============================================================================

class TestOutputFile:
    """Writing a single artifact to a file."""

    def test_write_cil(self, runner, tmp_path):
        output = tmp_path / "output.il"
        result = runner.invoke(main, ["-e", "2^10", "-t", "cil", "-o", str(output)])
        assert result.exit_code == 0
        listing = output.read_text()
        assert listing.startswith(".assembly 'output' { }")
        assert listing.endswith("}\n")

    def test_write_c(self, runner, tmp_path):
        output = tmp_path / "expr.c"
        result = runner.invoke(main, ["-e", "1+2", "-t", "c", "-o", str(output)])
        assert result.exit_code == 0
        assert "(1+2)" in output.read_text()

    def test_write_eval_adds_newline(self, runner, tmp_path):
        output = tmp_path / "value.txt"
        result = runner.invoke(main, ["-e", "6*7", "-t", "eval", "-o", str(output)])
        assert result.exit_code == 0
        assert output.read_text() == "42\n"

    def test_output_needs_single_target(self, runner, tmp_path):
        output = tmp_path / "out.txt"
        result = runner.invoke(main, ["-e", "1", "-o", str(output)])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert not output.exists()


# =============================================================================
# Debug Output Tests
# =============================================================================

class TestDebugOutput:
    """--tokens and --ast."""

    def test_tokens(self, runner):
        result = runner.invoke(main, ["-e", "1+#", "--tokens"])
        assert result.exit_code == 0
        assert result.output.splitlines() == [
            '[INT, "1"]',
            '[PLUS, "+"]',
            '[ILLEGAL, "#"]',
            '[END, ""]',
        ]

    def test_ast(self, runner):
        result = runner.invoke(main, ["-e", "2^3", "--ast"])
        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "Program",
            '  Pow [POW, "^"]',
            '    Literal [INT, "2"]',
            '    Literal [INT, "3"]',
        ]


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Failures are reported on stderr with a non-zero exit code."""

    @pytest.mark.parametrize("source", ["1+", "(1+2", "*3", "1+#2"])
    def test_syntax_error(self, runner, source):
        result = runner.invoke(main, ["-e", source])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "syntax error" in result.output
        assert "(+" not in result.output

    def test_syntax_error_writes_no_file(self, runner, tmp_path):
        output = tmp_path / "output.il"
        result = runner.invoke(main, ["-e", "1+", "-t", "cil", "-o", str(output)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert not output.exists()

    def test_overflow(self, runner):
        result = runner.invoke(main, ["-e", "65536*65536", "-t", "eval"])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "does not fit in 32 bits" in result.output

    def test_no_overflow_check(self, runner):
        result = runner.invoke(main, ["-e", "65536*65536", "-t", "eval", "--no-overflow-check"])
        assert result.exit_code == 0
        assert result.output == "4294967296\n"

    def test_float_pow_mode(self, runner):
        result = runner.invoke(
            main, ["-e", "3^40", "-t", "eval", "--pow-mode", "float", "--no-overflow-check"]
        )
        assert result.exit_code == 0
        assert result.output == f"{int(3.0 ** 40)}\n"

    def test_nesting_limit(self, runner):
        result = runner.invoke(main, ["-e", "(" * 300 + "1" + ")" * 300])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "parentheses nest deeper than" in result.output

    def test_unchecked_power_tower(self, runner):
        result = runner.invoke(main, ["-e", "9^9^9", "-t", "eval", "--no-overflow-check"])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "bits" in result.output
