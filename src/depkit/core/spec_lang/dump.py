"""
Debug dump of a parsed spec tree.

    >>> print(dump(parse_spec("a(b(x), y)")))
    a (op)
      b (op)
        x (lit)
      y (lit)
"""

from __future__ import annotations

from collections.abc import Callable

from depkit.core.ir.spec import Literal, Node


class DumpVisitor:
    """Collects one indented line per node; optionally echoes each line."""

    def __init__(self, out: Callable[[str], None] | None = None, indent: str = "  ") -> None:
        self.out = out
        self.indent = indent
        self.lines: list[str] = []
        self._depth = 0

    def visit_enter(self, node: Node) -> bool:
        kind = "lit" if isinstance(node, Literal) else "op"
        line = f"{self.indent * self._depth}{node.value} ({kind})"
        self.lines.append(line)
        if self.out is not None:
            self.out(line)
        self._depth += 1
        return True

    def visit_leave(self, node: Node) -> bool:
        self._depth -= 1
        return True


def dump(node: Node) -> str:
    """Render a spec tree as indented text."""
    visitor = DumpVisitor()
    node.accept(visitor)
    return "\n".join(visitor.lines)
