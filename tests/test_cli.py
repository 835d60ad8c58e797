"""
Tests for the kfront command-line tool.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from kaleidoscope import __version__
from kaleidoscope.cli.errors import ExitCode
from kaleidoscope.cli.kfront import main


@pytest.fixture
def runner():
    return CliRunner()


class TestOptions:
    """Tests for option handling."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "INPUT_FILE" in result.output
        assert "--prompt / --no-prompt" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "kfront" in result.output
        assert __version__ in result.output

    def test_missing_file(self, runner):
        """A nonexistent input file is an argument error."""
        result = runner.invoke(main, ["no_such_file.ks"])
        assert result.exit_code == ExitCode.INVALID_ARGS


class TestFileInput:
    """Tests for parsing a source file."""

    def test_dumps_each_construct(self, runner):
        """Should print every construct in source order."""
        with runner.isolated_filesystem():
            Path("prog.ks").write_text(
                "# square it\n"
                "def sq(x) x*x;\n"
                "extern sin(a);\n"
                "sq(3)+1;\n"
            )
            result = runner.invoke(main, ["prog.ks"])

            assert result.exit_code == 0, result.output
            assert "Read function definition:" in result.output
            assert "Function: sq(x)" in result.output
            assert "Read extern:" in result.output
            assert "Read top-level expression:" in result.output
            assert "Body: (sq(3) + 1)" in result.output
            order = [
                result.output.index("Function: sq"),
                result.output.index("Prototype: sin"),
                result.output.index("Body: (sq(3)"),
            ]
            assert order == sorted(order)

    def test_errors_set_exit_code(self, runner):
        """Errors are reported with file and position, and parsing goes on."""
        with runner.isolated_filesystem():
            Path("bad.ks").write_text("(1+2;\ndef foo(x) x\n")
            result = runner.invoke(main, ["bad.ks"])

            assert result.exit_code == ExitCode.SOURCE_ERROR
            assert "bad.ks:1:5: error: expected ')'" in result.output
            assert "Function: foo(x)" in result.output

    def test_quiet_prints_no_trees(self, runner):
        with runner.isolated_filesystem():
            Path("prog.ks").write_text("def f(x) x\n")
            result = runner.invoke(main, ["-q", "prog.ks"])

            assert result.exit_code == 0
            assert "Read function definition:" not in result.output

    def test_verbose_summary(self, runner):
        with runner.isolated_filesystem():
            Path("prog.ks").write_text("1; 2 $\n")
            result = runner.invoke(main, ["-v", "prog.ks"])

            assert result.exit_code == ExitCode.SOURCE_ERROR
            assert "Reading prog.ks..." in result.output
            assert "Parsed 1 constructs (0 syntax errors, 1 lexical faults" in result.output


class TestStdinInput:
    """Tests for reading standard input."""

    def test_reads_stdin(self, runner):
        result = runner.invoke(main, [], input="1+2\n")
        assert result.exit_code == 0
        assert "Body: (1 + 2)" in result.output
        assert not result.output.startswith(">")

    def test_dash_reads_stdin(self, runner):
        result = runner.invoke(main, ["-"], input="extern cos(x)\n")
        assert result.exit_code == 0
        assert "Prototype: cos(x)" in result.output

    def test_forced_prompt(self, runner):
        """--prompt shows the prompt even when stdin is not a terminal."""
        result = runner.invoke(main, ["--prompt"], input="4;\n")
        assert result.exit_code == 0
        assert result.output.startswith("> ")

    def test_invalid_character_on_stdin(self, runner):
        result = runner.invoke(main, [], input="1 @ 2\n")
        assert result.exit_code == ExitCode.SOURCE_ERROR
        assert "<stdin>:1:3: error: invalid character '@'" in result.output

    def test_undecodable_byte_on_stdin(self, runner):
        """A byte that is not UTF-8 is a lexical fault, not a crash."""
        result = runner.invoke(main, [], input=b"1 \xff 2\n")
        assert result.exit_code == ExitCode.SOURCE_ERROR
        assert "<stdin>:1:3: error: invalid character" in result.output
        assert "Body: 2" in result.output


class TestUndecodableInput:
    """Tests for source files containing bytes that are not UTF-8."""

    def test_bad_byte_is_skipped(self, runner):
        """Constructs on both sides of a bad byte are still dumped."""
        with runner.isolated_filesystem():
            Path("bad.ks").write_bytes(b"1;\n2 \xff 3;\n4;\n")
            result = runner.invoke(main, ["bad.ks"])

            assert result.exit_code == ExitCode.SOURCE_ERROR
            assert result.output.count("invalid character") == 1
            assert "bad.ks:2:3: error: invalid character" in result.output
            assert "Body: 1\n" in result.output
            assert "Body: 4\n" in result.output
            assert "Internal error" not in result.output
