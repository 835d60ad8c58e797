"""
Backend Collaborator Contract
=============================

The top-level driver hands every successfully parsed construct to a
backend. What the backend does with it (IR generation, optimization,
JIT execution) is outside the front end; the driver only looks at
whether ``accept`` succeeded.

    accept(node) -> BackendResult(artifact=..., error=None)
                  | BackendResult(artifact=None, error=BackendError(...))

Two reference backends are provided:

- **CollectingBackend**: keeps the nodes it receives (tests, embedding)
- **PrintingBackend**: writes an AST dump of each node to a text stream,
  the front end's equivalent of dumping generated IR
"""

import sys
from dataclasses import dataclass
from typing import Any, Optional, Protocol, TextIO

from kaleidoscope.frontend.ast import ASTNode, ASTPrinter, Function, Prototype
from kaleidoscope.frontend.errors import BackendError


@dataclass(frozen=True)
class BackendResult:
    """
    Outcome of handing a node to a backend.

    Attributes:
        artifact: Backend-specific handle for what was produced
        error: Set if the backend rejected the node
    """
    artifact: Any = None
    error: Optional[BackendError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Backend(Protocol):
    """Anything that can consume a finished top-level AST node."""

    def accept(self, node: ASTNode) -> BackendResult:
        ...


def check_unique_parameters(prototype: Prototype) -> Optional[BackendError]:
    """Return an error if a prototype names the same parameter twice."""
    seen: set[str] = set()
    for name in prototype.parameters:
        if name in seen:
            return BackendError(
                f"duplicate parameter name '{name}'",
                node_name=prototype.name or None,
            )
        seen.add(name)
    return None


class CollectingBackend:
    """
    Backend that records every node it is given.

    The artifact returned for each node is the node itself.

    Attributes:
        nodes: Accepted nodes in arrival order
    """

    def __init__(self):
        self.nodes: list[ASTNode] = []

    def accept(self, node: ASTNode) -> BackendResult:
        self.nodes.append(node)
        return BackendResult(artifact=node)


class PrintingBackend:
    """
    Backend that dumps each node as text.

    Each dump is headed by the kind of construct that was read. Prototypes
    with repeated parameter names are rejected, since the parser leaves
    that check to the backend.

    Attributes:
        stream: Where dumps are written (defaults to stdout)
        printer: The AST printer used to render nodes
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self.printer = ASTPrinter()

    def accept(self, node: ASTNode) -> BackendResult:
        prototype = node.prototype if isinstance(node, Function) else node
        if isinstance(prototype, Prototype):
            error = check_unique_parameters(prototype)
            if error is not None:
                return BackendResult(error=error)

        text = f"{self._heading(node)}\n{self.printer.print(node)}"
        self.stream.write(f"{text}\n")
        return BackendResult(artifact=text)

    @staticmethod
    def _heading(node: ASTNode) -> str:
        if isinstance(node, Function):
            if node.is_anonymous:
                return "Read top-level expression:"
            return "Read function definition:"
        if isinstance(node, Prototype):
            return "Read extern:"
        return f"Read {type(node).__name__}:"
