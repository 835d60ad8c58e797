"""
Kaleidoscope Recursive Descent Parser
=====================================

This module implements the parser for the Kaleidoscope toy language. It
pulls tokens from a Lexer one at a time and builds AST nodes, using
precedence climbing for binary expressions.

Grammar (EBNF)
--------------
program      ::= { toplevel ";"? }
toplevel     ::= definition | extern_decl | expression
definition   ::= "def" prototype expression
extern_decl  ::= "extern" prototype
prototype    ::= identifier "(" { identifier } ")"
expression   ::= primary { binop primary }
primary      ::= number
               | identifier [ "(" [ expression { "," expression } ] ")" ]
               | "(" expression ")"
binop        ::= "<" | "+" | "-" | "*"

Prototype parameters are separated by whitespace only: ``def f(x y)``.

Outcomes
--------
Every parse procedure returns a ParseResult. Syntax errors are values in
a failed result and are never raised; a failed result means nothing was
built, although the tokens read before the failure stay consumed. A
LexicalFault from the lexer is the one exception that escapes, and it is
left to the caller (normally the top-level driver).

Example Usage
-------------
>>> from kaleidoscope.frontend.parser import parse_expression_source
>>> result = parse_expression_source("3+4*5")
>>> result.ok
True
>>> result.node
BinaryOp(operator='+', left=NumberLiteral(value=3.0), right=BinaryOp(...))
"""

import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from kaleidoscope.frontend.lexer import Lexer, Token, TokenType
from kaleidoscope.frontend.precedence import token_precedence
from kaleidoscope.frontend.ast import (
    ANONYMOUS_FUNCTION_NAME,
    Expression,
    NumberLiteral,
    VariableRef,
    BinaryOp,
    Call,
    Prototype,
    Function,
)
from kaleidoscope.frontend.errors import (
    KSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Parse Outcome
# =============================================================================

@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """
    Outcome of a parse procedure: either a completed node or an error.

    Exactly one of ``node`` and ``error`` is set.

    Attributes:
        node: The completed AST node on success
        error: The syntax error on failure
    """
    node: Optional[T] = None
    error: Optional[KSyntaxError] = None

    @property
    def ok(self) -> bool:
        """True if parsing succeeded."""
        return self.error is None

    @classmethod
    def success(cls, node: T) -> "ParseResult[T]":
        return cls(node=node)

    @classmethod
    def failure(cls, error: KSyntaxError) -> "ParseResult[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the node, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.node


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """
    Recursive descent parser for Kaleidoscope.

    The parser holds exactly one token of lookahead, ``current``. Each
    procedure expects ``current`` to be the first token of its rule and
    leaves ``current`` on the first token after it.

    The first token is not read on construction; call ``advance()`` once
    before parsing (the top-level driver does this).

    Attributes:
        lexer: Source of tokens
        current: The current (lookahead) token, None before the first advance
    """

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.current: Optional[Token] = None

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def advance(self) -> Token:
        """
        Read the next token into ``current`` and return it.

        Raises:
            LexicalFault: If the lexer meets an invalid character
        """
        self.current = self.lexer.next_token()
        return self.current

    def _check(self, token_type: TokenType) -> bool:
        return self.current is not None and self.current.type == token_type

    def _source_line(self, token: Token) -> Optional[str]:
        return self.lexer.source_line(token.line)

    def _syntax_error(self, message: str) -> ParseResult:
        token = self.current
        return ParseResult.failure(KSyntaxError(
            message,
            location=token.location,
            hint=f"found {token.describe()}",
            source_line=self._source_line(token),
        ))

    def _missing(
        self,
        expected: str,
        context: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> ParseResult:
        token = self.current
        return ParseResult.failure(MissingTokenError(
            expected,
            context,
            location=token.location,
            source_line=self._source_line(token),
            hint=hint or f"found {token.describe()}",
        ))

    # =========================================================================
    # Primary Expressions
    # =========================================================================

    def parse_primary(self) -> ParseResult[Expression]:
        """
        Parse a primary expression.

        primary ::= number | identifier_expr | paren_expr
        """
        token = self.current

        if token.type == TokenType.NUMBER:
            return self._parse_number()

        if token.type == TokenType.IDENTIFIER:
            return self._parse_identifier()

        if token.type == TokenType.LPAREN:
            return self._parse_parenthesized()

        return ParseResult.failure(UnexpectedTokenError(
            token.describe(),
            expected="an expression",
            location=token.location,
            source_line=self._source_line(token),
        ))

    def _parse_number(self) -> ParseResult[Expression]:
        token = self.current
        self.advance()
        return ParseResult.success(NumberLiteral(token.value, location=token.location))

    def _parse_parenthesized(self) -> ParseResult[Expression]:
        """paren_expr ::= '(' expression ')'"""
        self.advance()  # consume '('

        inner = self.parse_expression()
        if not inner.ok:
            return inner

        if not self._check(TokenType.RPAREN):
            return self._missing(")")

        self.advance()  # consume ')'
        return inner

    def _parse_identifier(self) -> ParseResult[Expression]:
        """
        identifier_expr ::= identifier
                          | identifier '(' [ expression { ',' expression } ] ')'
        """
        token = self.current
        self.advance()  # consume identifier

        if not self._check(TokenType.LPAREN):
            return ParseResult.success(VariableRef(token.value, location=token.location))

        self.advance()  # consume '('

        arguments: list[Expression] = []
        if not self._check(TokenType.RPAREN):
            while True:
                argument = self.parse_expression()
                if not argument.ok:
                    return argument
                arguments.append(argument.node)

                if self._check(TokenType.RPAREN):
                    break
                if not self._check(TokenType.COMMA):
                    return self._syntax_error("expected ')' or ',' in argument list")
                self.advance()  # consume ','

        self.advance()  # consume ')'
        return ParseResult.success(
            Call(token.value, arguments, location=token.location)
        )

    # =========================================================================
    # Binary Expressions (Precedence Climbing)
    # =========================================================================

    def parse_expression(self) -> ParseResult[Expression]:
        """expression ::= primary binop_rhs"""
        left = self.parse_primary()
        if not left.ok:
            return left
        return self.parse_bin_op_rhs(0, left.node)

    def parse_bin_op_rhs(
        self,
        min_precedence: int,
        left: Expression,
    ) -> ParseResult[Expression]:
        """
        Fold ``{ binop primary }`` onto ``left``.

        Consumes operators whose precedence is at least ``min_precedence``.
        After each right operand, if the following operator binds strictly
        tighter than the one just consumed, the right operand absorbs it
        first through a recursive call. Equal precedence is not recursed
        into, so ``a - b - c`` folds as ``(a - b) - c``.

        Args:
            min_precedence: Loosest operator this call may consume
            left: Expression parsed so far

        Returns:
            ParseResult with the combined expression
        """
        while True:
            precedence = token_precedence(self.current)

            if precedence is None or precedence < min_precedence:
                return ParseResult.success(left)

            operator_token = self.current
            self.advance()  # consume operator

            right = self.parse_primary()
            if not right.ok:
                return right
            right_node = right.node

            next_precedence = token_precedence(self.current)
            if next_precedence is not None and next_precedence > precedence:
                right = self.parse_bin_op_rhs(precedence + 1, right_node)
                if not right.ok:
                    return right
                right_node = right.node

            left = BinaryOp(
                operator_token.value,
                left,
                right_node,
                location=operator_token.location,
            )

    # =========================================================================
    # Prototypes and Top-Level Constructs
    # =========================================================================

    def parse_prototype(self) -> ParseResult[Prototype]:
        """prototype ::= identifier '(' { identifier } ')'"""
        name_token = self.current
        if name_token.type != TokenType.IDENTIFIER:
            return self._syntax_error("expected function name in prototype")
        self.advance()

        if not self._check(TokenType.LPAREN):
            return self._missing("(", "prototype")

        parameters: list[str] = []
        while self.advance().type == TokenType.IDENTIFIER:
            parameters.append(self.current.value)

        if not self._check(TokenType.RPAREN):
            return self._missing(
                ")",
                "prototype",
                hint="parameters are identifiers separated by spaces, not commas",
            )
        self.advance()  # consume ')'

        return ParseResult.success(
            Prototype(name_token.value, parameters, location=name_token.location)
        )

    def parse_definition(self) -> ParseResult[Function]:
        """definition ::= 'def' prototype expression"""
        def_token = self.current
        self.advance()  # consume 'def'

        prototype = self.parse_prototype()
        if not prototype.ok:
            return prototype

        body = self.parse_expression()
        if not body.ok:
            return body

        logger.debug(f"Parsed definition of '{prototype.node.name}'")
        return ParseResult.success(
            Function(prototype.node, body.node, location=def_token.location)
        )

    def parse_extern(self) -> ParseResult[Prototype]:
        """extern_decl ::= 'extern' prototype"""
        self.advance()  # consume 'extern'

        prototype = self.parse_prototype()
        if prototype.ok:
            logger.debug(f"Parsed extern '{prototype.node.name}'")
        return prototype

    def parse_top_level_expression(self) -> ParseResult[Function]:
        """
        Parse a bare expression and wrap it in an anonymous function.

        The wrapper has an empty name and no parameters; it tells the
        backend to evaluate the expression now.
        """
        start = self.current
        body = self.parse_expression()
        if not body.ok:
            return body

        prototype = Prototype(ANONYMOUS_FUNCTION_NAME, [], location=start.location)
        logger.debug("Parsed top-level expression")
        return ParseResult.success(
            Function(prototype, body.node, location=start.location)
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_expression_source(source: str, filename: str = "<input>") -> ParseResult[Expression]:
    """
    Parse a single expression from a string.

    Only the expression is parsed; anything after it is left unread.

    Args:
        source: Expression source text
        filename: Source name for error messages

    Returns:
        ParseResult with the expression or the syntax error

    Raises:
        LexicalFault: If the text contains an invalid character
    """
    parser = Parser(Lexer(source, filename))
    parser.advance()
    return parser.parse_expression()
