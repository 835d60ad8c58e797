"""
Kaleidoscope Top-Level Driver
=============================

This module provides the read loop that turns a whole input into a
sequence of top-level constructs:

    Characters → Lexer → Parser → TopLevelDriver → Backend

The driver repeatedly looks at the current token and parses a function
definition (``def``), an external declaration (``extern``) or a bare
expression. Each finished construct is handed to the backend in source
order.

State Machine
-------------
AWAITING_CONSTRUCT --EOF--------------------> DONE
AWAITING_CONSTRUCT --';'--------------------> AWAITING_CONSTRUCT
AWAITING_CONSTRUCT --construct parsed-------> AWAITING_CONSTRUCT
AWAITING_CONSTRUCT --syntax error/fault-----> ERROR
ERROR              --advance one token------> AWAITING_CONSTRUCT

Error Recovery
--------------
A failed construct is discarded, reported, and the driver advances exactly
one token before trying again. A lexical fault is handled the same way:
the bad character was already consumed by the lexer, so advancing resumes
right after it. Nothing short of the end of input stops the loop.

Usage
-----
Programmatic:
    >>> from kaleidoscope.frontend.driver import parse_source
    >>> nodes = parse_source("def id(x) x; id(4)")
    >>> len(nodes)
    2

Command line:
    $ kfront program.ks
"""

import logging
import sys
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, TextIO

from kaleidoscope.frontend.lexer import Lexer, TokenType
from kaleidoscope.frontend.parser import Parser, ParseResult
from kaleidoscope.frontend.ast import ASTNode
from kaleidoscope.frontend.backend import Backend, CollectingBackend
from kaleidoscope.frontend.errors import (
    ErrorCollector,
    KSyntaxError,
    LexicalFault,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration and Results
# =============================================================================

@dataclass
class DriverOptions:
    """
    Driver configuration options.

    Attributes:
        prompt: Text written before each construct is read, e.g. "ready> ".
                None disables prompting.
        prompt_stream: Where the prompt is written (stderr if None)
        report_backend_errors: Pass backend failures to the error reporter
    """
    prompt: Optional[str] = None
    prompt_stream: Optional[TextIO] = None
    report_backend_errors: bool = True


@dataclass
class DriverSummary:
    """
    Counts gathered over one driver run.

    Attributes:
        constructs: Constructs handed to the backend
        syntax_errors: Constructs discarded for a syntax error
        lexical_faults: Invalid characters skipped
        backend_failures: Constructs the backend rejected
    """
    constructs: int = 0
    syntax_errors: int = 0
    lexical_faults: int = 0
    backend_failures: int = 0

    @property
    def error_count(self) -> int:
        return self.syntax_errors + self.lexical_faults + self.backend_failures


class DriverState(Enum):
    """States of the top-level read loop."""
    AWAITING_CONSTRUCT = auto()
    ERROR = auto()
    DONE = auto()


# =============================================================================
# Driver
# =============================================================================

class TopLevelDriver:
    """
    Read loop over top-level constructs.

    Example:
        lexer = Lexer(sys.stdin, "<stdin>")
        driver = TopLevelDriver(Parser(lexer), PrintingBackend())
        summary = driver.run()

    Attributes:
        parser: The parser that owns the current token
        backend: Receives each finished construct
        options: Driver configuration
        reporter: Reporting channel for every error
        state: Current state of the read loop
        summary: Counts for the current run
    """

    def __init__(
        self,
        parser: Parser,
        backend: Backend,
        options: Optional[DriverOptions] = None,
        reporter: Optional[ErrorCollector] = None,
    ):
        self.parser = parser
        self.backend = backend
        self.options = options or DriverOptions()
        self.reporter = reporter if reporter is not None else ErrorCollector()
        self.state = DriverState.AWAITING_CONSTRUCT
        self.summary = DriverSummary()
        self._primed = False

    def run(self) -> DriverSummary:
        """
        Process the whole input.

        Returns:
            DriverSummary with the counts for this run
        """
        while self.step() != DriverState.DONE:
            pass
        logger.debug(f"Driver finished: {self.summary}")
        return self.summary

    def step(self) -> DriverState:
        """
        Perform one state transition and return the new state.

        The first call reads the first token.
        """
        if self.state == DriverState.DONE:
            return self.state

        if self.state == DriverState.AWAITING_CONSTRUCT:
            self._prompt()

        if not self._primed:
            self._advance_past_faults()
            self._primed = True

        if self.state == DriverState.ERROR:
            # Resynchronize by skipping exactly one token
            self._advance_past_faults()
            self._set_state(DriverState.AWAITING_CONSTRUCT)
            return self.state

        token = self.parser.current

        if token.type == TokenType.EOF:
            self._set_state(DriverState.DONE)
            return self.state

        try:
            if token.type == TokenType.SEMICOLON:
                self.parser.advance()
                return self.state

            if token.type == TokenType.DEF:
                result = self.parser.parse_definition()
            elif token.type == TokenType.EXTERN:
                result = self.parser.parse_extern()
            else:
                result = self.parser.parse_top_level_expression()
        except LexicalFault as fault:
            self._report_fault(fault)
            self._set_state(DriverState.ERROR)
            return self.state

        self._handle(result)
        return self.state

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _handle(self, result: ParseResult) -> None:
        """Hand a parsed construct to the backend, or record its failure."""
        if not result.ok:
            self._report_syntax_error(result.error)
            self._set_state(DriverState.ERROR)
            return

        self.summary.constructs += 1
        outcome = self.backend.accept(result.node)
        if not outcome.ok:
            self.summary.backend_failures += 1
            logger.info(f"Backend rejected construct: {outcome.error}")
            if self.options.report_backend_errors:
                self.reporter.add(outcome.error)

    def _advance_past_faults(self) -> None:
        """
        Advance one token, reporting and skipping any invalid characters.

        Each fault consumes its character, so this always terminates.
        """
        while True:
            try:
                self.parser.advance()
                return
            except LexicalFault as fault:
                self._report_fault(fault)

    def _report_syntax_error(self, error: KSyntaxError) -> None:
        self.summary.syntax_errors += 1
        logger.info(f"Discarding construct: {error.message}")
        self.reporter.add(error)

    def _report_fault(self, fault: LexicalFault) -> None:
        self.summary.lexical_faults += 1
        logger.info(f"Skipping invalid character {fault.char!r}")
        self.reporter.add(fault)

    def _set_state(self, state: DriverState) -> None:
        if state != self.state:
            logger.debug(f"Driver state {self.state.name} -> {state.name}")
        self.state = state

    def _prompt(self) -> None:
        if self.options.prompt is None:
            return
        stream = self.options.prompt_stream or sys.stderr
        stream.write(self.options.prompt)
        stream.flush()


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(
    source: str,
    filename: str = "<input>",
    reporter: Optional[ErrorCollector] = None,
) -> list[ASTNode]:
    """
    Parse every top-level construct in a string.

    Constructs that fail are reported to ``reporter`` (if given) and left
    out of the result.

    Args:
        source: Kaleidoscope source text
        filename: Source name for error messages
        reporter: Collector to receive errors

    Returns:
        The parsed constructs in source order
    """
    backend = CollectingBackend()
    driver = TopLevelDriver(
        Parser(Lexer(source, filename)),
        backend,
        reporter=reporter,
    )
    driver.run()
    return backend.nodes
