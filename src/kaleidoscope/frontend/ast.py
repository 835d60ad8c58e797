"""
Kaleidoscope Abstract Syntax Tree (AST) Definitions
===================================================

This module defines the AST node types built by the Kaleidoscope parser
and handed, one top-level construct at a time, to a backend.

Node Hierarchy
--------------
ASTNode (base)
├── Expressions
│   ├── NumberLiteral - numeric constant
│   ├── VariableRef - variable reference
│   ├── BinaryOp - binary operator application
│   └── Call - function call
├── Prototype - function name and parameter names
└── Function - prototype plus body expression

Design Notes
------------
- All nodes are dataclasses; every child is owned by exactly one parent
- Each node may store its source location for error reporting; the
  location is keyword-only and is ignored by equality, so two trees parsed
  from differently laid out text compare equal when their shape matches
- A Prototype with an empty name and no parameters wraps a bare top-level
  expression that the backend should evaluate immediately
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from kaleidoscope.errors import SourceLocation


ANONYMOUS_FUNCTION_NAME = ""


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node starts (keyword-only)
    """
    location: Optional[SourceLocation] = field(
        default=None, compare=False, repr=False, kw_only=True
    )


@dataclass
class Expression(ASTNode):
    """Base class for all expression nodes."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class NumberLiteral(Expression):
    """
    Numeric literal. Kaleidoscope has a single numeric type.

    Attributes:
        value: The literal value
    """
    value: float


@dataclass
class VariableRef(Expression):
    """
    Reference to a variable (a function parameter).

    Attributes:
        name: The variable name
    """
    name: str


@dataclass
class BinaryOp(Expression):
    """
    Binary operation expression (left op right).

    Attributes:
        operator: The operator symbol, one of < + - *
        left: Left operand expression
        right: Right operand expression
    """
    operator: str
    left: Expression
    right: Expression


@dataclass
class Call(Expression):
    """
    Function call expression.

    The callee is only a name; whether it refers to a known function is
    for the backend to decide.

    Attributes:
        callee: Name of the function to call
        arguments: Argument expressions in source order
    """
    callee: str
    arguments: list[Expression] = field(default_factory=list)


# =============================================================================
# Function Nodes
# =============================================================================

@dataclass
class Prototype(ASTNode):
    """
    Function signature: name and parameter names, without a body.

    Parameter names are not checked for uniqueness here.

    Attributes:
        name: Function name (empty for the anonymous wrapper)
        parameters: Parameter names in declaration order
    """
    name: str
    parameters: list[str] = field(default_factory=list)

    @property
    def is_anonymous(self) -> bool:
        """True for the synthetic wrapper around a top-level expression."""
        return self.name == ANONYMOUS_FUNCTION_NAME and not self.parameters


@dataclass
class Function(ASTNode):
    """
    Function definition.

    Attributes:
        prototype: The function signature
        body: The expression the function evaluates
    """
    prototype: Prototype
    body: Expression

    @property
    def is_anonymous(self) -> bool:
        """True if this wraps a bare top-level expression."""
        return self.prototype.is_anonymous


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches to visit_<ClassName> methods. Subclasses override the ones
    they care about; everything else walks the children.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_Call(self, node):
                self.calls += 1
                self.generic_visit(node)
    """

    def visit(self, node: ASTNode) -> Any:
        """Visit a node by dispatching to the appropriate method."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes of the node."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST dumps.

    Functions and prototypes print as headed blocks; expressions print in
    fully parenthesized infix form.

    Usage:
        printer = ASTPrinter()
        print(printer.print(node))

    Example output for ``def f(x) x*2+1``:
        Function: f(x)
          Body: ((x * 2) + 1)
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return it as a string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def visit_Function(self, node: Function):
        if node.is_anonymous:
            self._emit("Function: <anonymous>()")
        else:
            self._emit(f"Function: {self._signature(node.prototype)}")
        self.indent_level += 1
        self._emit(f"Body: {self.expr_str(node.body)}")
        self.indent_level -= 1

    def visit_Prototype(self, node: Prototype):
        self._emit(f"Prototype: {self._signature(node)}")

    def generic_visit(self, node: ASTNode) -> None:
        if isinstance(node, Expression):
            self._emit(f"Expr: {self.expr_str(node)}")
        else:
            super().generic_visit(node)

    @staticmethod
    def _signature(prototype: Prototype) -> str:
        return f"{prototype.name}({' '.join(prototype.parameters)})"

    def expr_str(self, expr: Expression) -> str:
        """Convert an expression to its parenthesized infix form."""
        if isinstance(expr, NumberLiteral):
            return f"{expr.value:g}"
        if isinstance(expr, VariableRef):
            return expr.name
        if isinstance(expr, BinaryOp):
            return f"({self.expr_str(expr.left)} {expr.operator} {self.expr_str(expr.right)})"
        if isinstance(expr, Call):
            args = ", ".join(self.expr_str(a) for a in expr.arguments)
            return f"{expr.callee}({args})"
        return f"<{type(expr).__name__}>"
