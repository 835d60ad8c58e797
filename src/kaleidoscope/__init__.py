"""
Kaleidoscope Front End
======================

A reader for the Kaleidoscope toy language: source text goes in, abstract
syntax trees come out, one top-level construct at a time.

Main Components
---------------
- **frontend**: lexer, precedence table, AST, parser and top-level driver
- **cli**: the ``kfront`` command

Quick Start
-----------
Parse a program:
    >>> from kaleidoscope import parse_source
    >>> nodes = parse_source("extern sin(x); sin(1) + 2")

Or use the command-line tool:
    $ kfront program.ks
    $ echo "def f(x) x*x" | kfront

Code generation and execution are left to a backend that receives each
parsed construct; see ``kaleidoscope.frontend.backend``.
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from kaleidoscope.errors import KaleidoscopeError, SourceLocation
from kaleidoscope.frontend import (
    Lexer,
    Parser,
    TopLevelDriver,
    DriverOptions,
    parse_source,
    parse_expression_source,
    LexicalFault,
    KSyntaxError,
    BackendError,
)

__all__ = [
    "__version__",
    "KaleidoscopeError",
    "SourceLocation",
    "Lexer",
    "Parser",
    "TopLevelDriver",
    "DriverOptions",
    "parse_source",
    "parse_expression_source",
    "LexicalFault",
    "KSyntaxError",
    "BackendError",
]
