"""
kfront - Kaleidoscope Front-End Command-Line Interface
======================================================

This module implements the command-line interface for the Kaleidoscope
front end. It reads source text, parses each top-level construct and
prints the resulting syntax tree.

Usage Examples
--------------
Parse a file:
    $ kfront program.ks

Interactive session (prompts when stdin is a terminal):
    $ kfront
    > def f(x) x*x;
    Read function definition:
    Function: f(x)
      Body: (x * x)

Check syntax only:
    $ kfront -q program.ks

Verbose mode:
    $ kfront -v program.ks
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from kaleidoscope import __version__
from kaleidoscope.frontend.lexer import Lexer
from kaleidoscope.frontend.parser import Parser
from kaleidoscope.frontend.backend import CollectingBackend, PrintingBackend
from kaleidoscope.frontend.driver import TopLevelDriver, DriverOptions
from kaleidoscope.frontend.errors import ErrorCollector
from kaleidoscope.cli.errors import ExitCode, handle_cli_exception


logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "> "

# Bytes that do not decode reach the lexer as U+FFFD and fault there
DECODE_ERRORS = "replace"

# Errors kept for the summary; every error is still echoed as it happens
MAX_RETAINED_ERRORS = 100


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, allow_dash=True, path_type=Path),
)
@click.option(
    "--prompt/--no-prompt",
    default=None,
    help="Show a prompt before each construct (default: only when stdin is a terminal)",
)
@click.option(
    "-q", "--quiet",
    is_flag=True,
    help="Parse only; do not print syntax trees",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="kfront")
def main(
    input_file: Optional[Path],
    prompt: Optional[bool],
    quiet: bool,
    verbose: bool,
) -> None:
    """
    Parse Kaleidoscope source and print its syntax trees.

    INPUT_FILE is the source file to read; standard input is read when it
    is omitted or '-'.

    Each definition, extern declaration and top-level expression is
    printed as soon as it has been parsed. Errors are reported on stderr
    and parsing continues with the next construct.

    \b
    Examples:
        kfront program.ks            # Dump every construct
        kfront -q program.ks         # Syntax check only
        echo "1+2*3" | kfront        # Read from stdin

    \b
    Language summary:
        def name(a b) expr           # Function definition
        extern name(a b)             # External declaration
        expr                         # Top-level expression
        + - * <                      # Binary operators
        # comment                    # Line comment
    """
    setup_logging(verbose)

    from_stdin = input_file is None or str(input_file) == "-"
    if prompt is None:
        prompt = from_stdin and sys.stdin.isatty()

    options = DriverOptions(prompt=DEFAULT_PROMPT if prompt else None)
    reporter = ErrorCollector(echo=sys.stderr, max_errors=MAX_RETAINED_ERRORS)
    backend = CollectingBackend() if quiet else PrintingBackend()

    try:
        if from_stdin:
            stdin = click.get_text_stream("stdin", errors=DECODE_ERRORS)
            summary = _run(stdin, "<stdin>", backend, options, reporter)
        else:
            if verbose:
                click.echo(f"Reading {input_file}...")
            with open(input_file, encoding="utf-8", errors=DECODE_ERRORS) as stream:
                summary = _run(stream, str(input_file), backend, options, reporter)
    except Exception as e:
        handle_cli_exception(e, verbose)

    if prompt:
        click.echo(err=True)

    if verbose:
        click.echo(
            f"Parsed {summary.constructs} constructs "
            f"({summary.syntax_errors} syntax errors, "
            f"{summary.lexical_faults} lexical faults, "
            f"{summary.backend_failures} backend failures)"
        )

    if summary.error_count:
        sys.exit(ExitCode.SOURCE_ERROR)


def _run(stream, filename, backend, options, reporter):
    logger.debug(f"Reading {filename}")
    driver = TopLevelDriver(Parser(Lexer(stream, filename)), backend, options, reporter)
    return driver.run()


if __name__ == "__main__":
    main()
