"""
Kaleidoscope Error Hierarchy
============================

This module defines the root of the exception hierarchy for the
Kaleidoscope front end. All exceptions inherit from KaleidoscopeError,
allowing callers to catch every front-end error with a single except
clause if desired.

Exception Hierarchy
-------------------
KaleidoscopeError (base)
├── FrontendError (kaleidoscope.frontend.errors)
│   ├── LexicalFault - unrecognized character in the input
│   └── KSyntaxError - syntax error in a top-level construct
│       ├── UnexpectedTokenError - token that cannot start/continue a rule
│       └── MissingTokenError - required token not found
└── BackendError (kaleidoscope.frontend.errors) - backend rejected a node

Design Philosophy
-----------------
Each exception captures source location information (filename, line, column)
when applicable. Error messages follow this format:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class KaleidoscopeError(Exception):
    """
    Base exception for all Kaleidoscope errors.

        try:
            driver.run()
        except KaleidoscopeError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Used by tokens, AST nodes and errors to record where they appear
    in the input.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
