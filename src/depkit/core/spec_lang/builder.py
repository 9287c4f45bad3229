"""
Generic stack-based spec compiler.

A ``SpecBuilder`` walks a parsed spec post-order. Literals push their
(property-substituted) text; every Op, once its children have been
visited, runs ``process_op`` which pops its arguments and pushes exactly
one value. After the walk ``build()`` returns the single remaining value.

Each Op gets its own frame on the stack: pops inside ``process_op`` only
see values pushed by that op's own children, so a variadic op can never
consume an enclosing op's earlier arguments.

Combinator ops (listed in ``combinators``) are not walked automatically.
Their ``process_op`` compiles selected children explicitly, usually under
a different builder::

    case "matching":
        self.require_children(node, 2)
        matcher = self.compile_child(node, 0, ArtifactMatcherBuilder)
        sink = self.compile_child(node, 1, type(self), context=self.context)

Builders are single use: one instance compiles one spec.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

from depkit.core.errors import SpecConfigError, make_config_error
from depkit.core.ir.spec import Literal, Node, Op
from depkit.core.spec_lang.parser import parse_spec

logger = logging.getLogger(__name__)

V = TypeVar("V")

# ${name}
_PLACEHOLDER_RE = re.compile(r"\$\{([^}]*)\}")

_TRUE = "true"
_FALSE = "false"


def substitute(text: str, properties: Mapping[str, Any] | None) -> str:
    """
    Replace every ``${name}`` in text with ``str(properties[name])``.

    Raises:
        SpecConfigError: when a placeholder cannot be resolved
    """

    def replace(m: re.Match[str]) -> str:
        key = m.group(1)
        if properties is None:
            raise SpecConfigError(f"No properties supplied to resolve ${{{key}}}")
        if key not in properties:
            raise SpecConfigError(f"Unknown property ${{{key}}}")
        return str(properties[key])

    return _PLACEHOLDER_RE.sub(replace, text)


class SpecBuilder(Generic[V]):
    """Abstract tree-walking interpreter producing one value of ``produces``."""

    domain: ClassVar[str] = "spec"
    produces: ClassVar[type] = object
    combinators: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, properties: Mapping[str, Any] | None = None) -> None:
        self.properties = properties
        self.params: list[Any] = []
        self._frames: list[tuple[int, Op]] = []
        self._built = False

    # -- Compilation entry points --

    @classmethod
    def compile(
        cls,
        spec: str | Node,
        properties: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> V:
        """Parse (if needed) and compile a spec with a fresh builder."""
        node = parse_spec(spec) if isinstance(spec, str) else spec
        builder = cls(properties=properties, **kwargs)
        node.accept(builder)
        value = builder.build()
        logger.debug(f"Compiled {cls.domain} spec {node}: {value!r}")
        return value

    def build(self) -> V:
        """Return the single compiled value."""
        if self._built:
            raise SpecConfigError(f"{type(self).__name__} already built; builders are single use")
        self._built = True
        if self._frames:
            raise SpecConfigError(f"Incomplete traversal, {len(self._frames)} ops still open")
        if len(self.params) != 1:
            raise SpecConfigError(
                f"Expected exactly one {self.domain} value, found {len(self.params)}"
            )
        value = self.params[0]
        if not isinstance(value, self.produces):
            raise SpecConfigError(
                f"Spec does not produce a {self.domain}: got {_describe(value)}"
            )
        return value

    # -- Visitor --

    def visit_enter(self, node: Node) -> bool:
        if isinstance(node, Op):
            self._frames.append((len(self.params), node))
            return node.value not in self.combinators
        return True

    def visit_leave(self, node: Node) -> bool:
        if isinstance(node, Literal):
            self.params.append(self.resolve_literal(node))
            return True

        self.process_op(node)

        mark, _ = self._frames.pop()
        produced = len(self.params) - mark
        if produced > 1:
            raise make_config_error(f"Too many arguments for op {node.value}", node.value)
        if produced < 1:
            raise make_config_error(f"Op {node.value} produced no value", node.value)
        return True

    def process_op(self, node: Op) -> None:
        """Pop this op's arguments and push its value."""
        raise NotImplementedError

    # -- Errors --

    def error(self, message: str, node: Op | None = None) -> SpecConfigError:
        op = node.value if node is not None else self._current_op()
        return make_config_error(message, op)

    def unknown_op(self, node: Op) -> SpecConfigError:
        return make_config_error(f"Unknown {self.domain} op {node.value}", node.value)

    def _current_op(self) -> str | None:
        return self._frames[-1][1].value if self._frames else None

    # -- Stack helpers --

    def frame_size(self) -> int:
        """Number of argument values available to the current op."""
        mark = self._frames[-1][0] if self._frames else 0
        return len(self.params) - mark

    def _pop(self) -> Any:
        if self.frame_size() < 1:
            raise self.error(f"Bad parameter count for op {self._current_op()}")
        return self.params.pop()

    def string_param(self) -> str:
        value = self._pop()
        if not isinstance(value, str):
            raise self.error(f"Expected a string argument, got {_describe(value)}")
        return value

    def string_params(self) -> list[str]:
        """Variadic: every remaining argument, in declaration order."""
        values = [self.string_param() for _ in range(self.frame_size())]
        values.reverse()
        return values

    def boolean_param(self) -> bool:
        text = self.string_param().strip().lower()
        if text == _TRUE:
            return True
        if text == _FALSE:
            return False
        raise self.error(f"Expected true or false, got {text!r}")

    def int_param(self) -> int:
        text = self.string_param()
        try:
            return int(text)
        except ValueError:
            raise self.error(f"Expected an integer, got {text!r}") from None

    def typed_param(self, kind: type[Any]) -> Any:
        value = self._pop()
        if not isinstance(value, kind):
            raise self.error(f"Expected {_family(kind)}, got {_describe(value)}")
        return value

    def typed_params(self, kind: type[Any]) -> list[Any]:
        """Variadic: every remaining argument, each of ``kind``, in declaration order."""
        values = [self.typed_param(kind) for _ in range(self.frame_size())]
        values.reverse()
        return values

    # -- Combinator helpers --

    def require_children(self, node: Op, minimum: int, maximum: int | None = None) -> None:
        if maximum is None:
            maximum = minimum
        count = len(node.children)
        if count < minimum:
            raise self.error(f"Bad parameter count for op {node.value}", node)
        if count > maximum:
            raise self.error(f"Too many arguments for op {node.value}", node)

    def compile_child(
        self,
        node: Op,
        index: int,
        builder_cls: type[SpecBuilder[Any]],
        **kwargs: Any,
    ) -> Any:
        """Compile ``node.children[index]`` with a fresh ``builder_cls``."""
        if index >= len(node.children):
            raise self.error(f"Bad parameter count for op {node.value}", node)
        return self.compile_node(node.children[index], builder_cls, **kwargs)

    def compile_node(
        self,
        node: Node,
        builder_cls: type[SpecBuilder[Any]],
        **kwargs: Any,
    ) -> Any:
        """Compile a whole subtree with a fresh ``builder_cls`` sharing our properties."""
        if isinstance(node, Literal):
            raise self.error(
                f"Expected a {builder_cls.domain} spec, got literal {node.value!r}"
            )
        builder = builder_cls(properties=self.properties, **kwargs)
        node.accept(builder)
        return builder.build()

    def literal_child(self, node: Op, index: int) -> str:
        if index >= len(node.children):
            raise self.error(f"Bad parameter count for op {node.value}", node)
        child = node.children[index]
        if not isinstance(child, Literal):
            raise self.error(f"Expected a literal argument, got {child}", node)
        return self.resolve_literal(child)

    def resolve_literal(self, node: Literal) -> str:
        if node.quoted:
            return node.value
        try:
            return substitute(node.value, self.properties)
        except SpecConfigError as e:
            raise self.error(e.message) from None


def _family(kind: type[Any]) -> str:
    return getattr(kind, "family", kind.__name__)


def _describe(value: Any) -> str:
    if isinstance(value, str):
        return f"string {value!r}"
    return repr(value)
