"""
Front-End Error Hierarchy
=========================

This module defines the exceptions raised or returned by the Kaleidoscope
tokenizer and parser, and the collector the top-level driver reports them
through.

Exception Hierarchy
-------------------
FrontendError (base for all front-end errors)
├── LexicalFault - unrecognized character (raised by the lexer)
└── KSyntaxError - syntax error (returned by the parser)
    ├── UnexpectedTokenError - token cannot start an expression
    └── MissingTokenError - required token is missing
BackendError - backend collaborator rejected a node

Two Kinds of Failure
--------------------
A LexicalFault is exceptional: the lexer raises it and it unwinds through
the parser to the driver. A KSyntaxError is an ordinary outcome: parse
procedures return it inside a failed ParseResult instead of raising it.
Both are exception classes so that they format and compare the same way
and so a caller may still raise either one.

Error Message Format
--------------------
    kernel.ks:3:9: error: expected ')'
        def f(x) (x+1
                ^
    hint: parenthesized expressions must be closed
"""

from typing import Optional, TextIO

from kaleidoscope.errors import KaleidoscopeError, SourceLocation


# =============================================================================
# Base Front-End Exception
# =============================================================================

class FrontendError(KaleidoscopeError):
    """
    Base exception for errors detected while reading source text.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The source text of the line containing the error
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            <stdin>:1:3: error: invalid character '$' (0x24)
                1 $ 2
                  ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Lexical Faults
# =============================================================================

class LexicalFault(FrontendError):
    """
    Character that matches no token rule.

    Raised by the lexer. The offending character has already been
    consumed when this is raised, so the next call to the lexer resumes
    after it.

    Attributes:
        char: The offending character
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Syntax Errors
# =============================================================================

class KSyntaxError(FrontendError):
    """
    Syntax error in a top-level construct.

    Carries a short human-readable reason such as "expected ')'" or
    "expected function name in prototype". Always contained to the single
    construct being parsed.
    """
    pass


class UnexpectedTokenError(KSyntaxError):
    """
    Token that cannot appear where the parser is.

    Attributes:
        found: Text of the offending token
        expected: What the parser was looking for
    """

    def __init__(
        self,
        found: str,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected
        super().__init__(
            f"unexpected token, expected {expected}",
            location=location,
            hint=f"found {found}",
            source_line=source_line,
        )


class MissingTokenError(KSyntaxError):
    """
    Required token is missing.

    Attributes:
        expected: The token that was required, e.g. ")"
        context: Grammar rule being parsed, e.g. "prototype"
    """

    def __init__(
        self,
        expected: str,
        context: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.expected = expected
        self.context = context
        message = f"expected '{expected}'"
        if context:
            message = f"{message} in {context}"
        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Backend Errors
# =============================================================================

class BackendError(KaleidoscopeError):
    """
    Failure reported by a backend collaborator.

    The front end never interprets these; it only reports them.

    Attributes:
        message: The backend's description of the failure
        node_name: Name of the function or prototype involved, if any
    """

    def __init__(self, message: str, node_name: Optional[str] = None):
        self.message = message
        self.node_name = node_name
        if node_name:
            super().__init__(f"backend error in '{node_name}': {message}")
        else:
            super().__init__(f"backend error: {message}")


# =============================================================================
# Error Collection (reporting channel)
# =============================================================================

class ErrorCollector:
    """
    Collects errors reported by the top-level driver.

    Errors are recorded in arrival order. When an echo stream is given,
    each error is also written to it immediately, which is how an
    interactive session sees its errors as it types.

    With ``max_errors`` set, only that many errors are kept; later ones
    are still echoed and counted, but not stored. A long interactive
    session therefore does not hold on to every error it has seen.

    Example:
        collector = ErrorCollector(echo=sys.stderr, max_errors=100)
        driver = TopLevelDriver(parser, backend, reporter=collector)
        driver.run()
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(
        self,
        echo: Optional[TextIO] = None,
        max_errors: Optional[int] = None,
    ):
        """
        Initialize the error collector.

        Args:
            echo: Stream to write each error to as it is added
            max_errors: Maximum errors to keep (None keeps all)
        """
        self.errors: list[KaleidoscopeError] = []
        self.echo = echo
        self.max_errors = max_errors
        self.dropped = 0

    def add(self, error: KaleidoscopeError) -> None:
        """Record an error and echo it if an echo stream is set."""
        if self.max_errors is None or len(self.errors) < self.max_errors:
            self.errors.append(error)
        else:
            self.dropped += 1
        if self.echo is not None:
            self.echo.write(f"{error}\n")
            self.echo.flush()

    def has_errors(self) -> bool:
        """Return True if any errors have been reported."""
        return self.error_count() > 0

    def error_count(self) -> int:
        """Return the number of reported errors, kept or not."""
        return len(self.errors) + self.dropped

    def count(self, error_type: type) -> int:
        """Return the number of kept errors of the given type."""
        return sum(1 for error in self.errors if isinstance(error, error_type))

    def report(self) -> str:
        """Format the kept errors for display, followed by a summary line."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        if self.dropped:
            lines.append(f"({self.dropped} more not shown)")

        total = self.error_count()
        error_word = "error" if total == 1 else "errors"
        lines.append(f"{total} {error_word}")

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()
        self.dropped = 0
