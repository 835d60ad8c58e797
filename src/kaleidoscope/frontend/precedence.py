"""
Binary Operator Precedence
==========================

Fixed binding strengths for the binary operators the parser understands.
A higher number binds tighter:

| Operator | Precedence |
|----------|------------|
| <        | 10         |
| + -      | 20         |
| *        | 40         |

The ``/`` operator is recognized by the lexer but has no entry here, so
the parser treats it as "not a binary operator".
"""

from types import MappingProxyType
from typing import Optional

from kaleidoscope.frontend.lexer import Token, TokenType


BINARY_PRECEDENCE = MappingProxyType({
    "<": 10,
    "+": 20,
    "-": 20,
    "*": 40,
})


def operator_precedence(operator: str) -> Optional[int]:
    """Return the precedence of an operator symbol, or None if it is not binary."""
    return BINARY_PRECEDENCE.get(operator)


def token_precedence(token: Token) -> Optional[int]:
    """
    Return the precedence of a token used as a binary operator.

    Returns None, never 0, for tokens that are not binary operators.
    """
    if token.type != TokenType.OPERATOR:
        return None
    return operator_precedence(token.value)
