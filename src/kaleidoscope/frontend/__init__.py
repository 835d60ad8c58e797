"""
Kaleidoscope Front End
======================

This package turns Kaleidoscope source text into abstract syntax trees:

- A lexer (tokenizer) reading one character at a time
- A fixed binary operator precedence table
- A recursive descent parser using precedence climbing
- A top-level driver with error recovery that hands each construct to a
  backend

Pipeline
--------
    Characters → Lexer → Parser → TopLevelDriver → Backend

Usage
-----
>>> from kaleidoscope.frontend import parse_source, ASTPrinter
>>> for node in parse_source("def sq(x) x*x; sq(3)"):
...     print(ASTPrinter().print(node))
Function: sq(x)
  Body: (x * x)
Function: <anonymous>()
  Body: sq(3)

Language
--------
- One numeric type (double precision float)
- Binary operators < + - * (``/`` is lexed but not parsed)
- Function definitions, extern declarations, calls
- ``#`` line comments
"""

from kaleidoscope.frontend.lexer import Lexer, Token, TokenType
from kaleidoscope.frontend.precedence import (
    BINARY_PRECEDENCE,
    operator_precedence,
    token_precedence,
)
from kaleidoscope.frontend.ast import (
    ASTNode,
    Expression,
    NumberLiteral,
    VariableRef,
    BinaryOp,
    Call,
    Prototype,
    Function,
    ASTVisitor,
    ASTPrinter,
)
from kaleidoscope.frontend.parser import Parser, ParseResult, parse_expression_source
from kaleidoscope.frontend.backend import (
    Backend,
    BackendResult,
    CollectingBackend,
    PrintingBackend,
)
from kaleidoscope.frontend.driver import (
    TopLevelDriver,
    DriverOptions,
    DriverState,
    DriverSummary,
    parse_source,
)
from kaleidoscope.frontend.errors import (
    FrontendError,
    LexicalFault,
    KSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
    BackendError,
    ErrorCollector,
)

__all__ = [
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Precedence
    "BINARY_PRECEDENCE",
    "operator_precedence",
    "token_precedence",
    # AST
    "ASTNode",
    "Expression",
    "NumberLiteral",
    "VariableRef",
    "BinaryOp",
    "Call",
    "Prototype",
    "Function",
    "ASTVisitor",
    "ASTPrinter",
    # Parser
    "Parser",
    "ParseResult",
    "parse_expression_source",
    # Backend
    "Backend",
    "BackendResult",
    "CollectingBackend",
    "PrintingBackend",
    # Driver
    "TopLevelDriver",
    "DriverOptions",
    "DriverState",
    "DriverSummary",
    "parse_source",
    # Errors
    "FrontendError",
    "LexicalFault",
    "KSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "BackendError",
    "ErrorCollector",
]
