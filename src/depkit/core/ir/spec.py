"""
Spec expression AST.

A parsed spec is a tree of two node kinds:

- Literal: a terminal string argument, e.g. ``*``, ``org.example``,
  ``${groupId}``; placeholders are kept verbatim.
- Op: a named call with ordered positional children, e.g.
  ``matching(any(), null())``.

Nodes are frozen. Walkers use ``accept`` with a ``SpecVisitor``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Visitor protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class SpecVisitor(Protocol):
    """Double-dispatch contract for walking a spec tree."""

    def visit_enter(self, node: Node) -> bool:
        """Called before children; returning False skips them."""
        ...

    def visit_leave(self, node: Node) -> bool:
        """Called after children; returning False stops sibling traversal."""
        ...


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class Literal(BaseModel):
    """A terminal argument."""

    value: str = Field(description="Literal text, trimmed")
    quoted: bool = Field(default=False, description="Written with quotes in the source")

    model_config = ConfigDict(frozen=True)

    def accept(self, visitor: SpecVisitor) -> bool:
        if visitor.visit_enter(self):
            return visitor.visit_leave(self)
        return True

    def __str__(self) -> str:
        if self.quoted:
            escaped = self.value.replace("\\", "\\\\").replace("'", "\\'")
            return f"'{escaped}'"
        return self.value


class Op(BaseModel):
    """
    A named call.

    Examples:
        - Op(value="any") → any()
        - Op(value="not", children=[Op(value="snapshot")]) → not(snapshot())
    """

    value: str = Field(description="Op name")
    children: tuple[Node, ...] = Field(default=(), description="Positional arguments")

    model_config = ConfigDict(frozen=True)

    def accept(self, visitor: SpecVisitor) -> bool:
        if visitor.visit_enter(self):
            for child in self.children:
                if not child.accept(visitor):
                    break
        return visitor.visit_leave(self)

    def __str__(self) -> str:
        args = ", ".join(str(c) for c in self.children)
        return f"{self.value}({args})"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Node = Literal | Op

Op.model_rebuild()
