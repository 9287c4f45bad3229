"""
Executable value families produced by spec compilation.

- Matcher: predicate over an item
- Mapper: item to item transform
- NameMapper: item to string
- Sink: accepts items and performs an effect (accept/cleanup/close)

Each domain subclasses these so that a builder's typed pops can tell an
artifact matcher from a version matcher.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Matcher
# =============================================================================


class Matcher(Generic[T]):
    """A named predicate."""

    def __init__(self, predicate: Callable[[T], bool], description: str) -> None:
        self._predicate = predicate
        self.description = description

    def test(self, item: T) -> bool:
        return bool(self._predicate(item))

    def __call__(self, item: T) -> bool:
        return self.test(item)

    @classmethod
    def always(cls) -> Any:
        return cls(lambda item: True, "any()")

    @classmethod
    def negate(cls, matcher: Matcher[T]) -> Any:
        return cls(lambda item: not matcher.test(item), f"not({matcher.description})")

    @classmethod
    def all_of(cls, matchers: Sequence[Matcher[T]]) -> Any:
        matchers = list(matchers)
        desc = ", ".join(m.description for m in matchers)
        return cls(lambda item: all(m.test(item) for m in matchers), f"and({desc})")

    @classmethod
    def any_of(cls, matchers: Sequence[Matcher[T]]) -> Any:
        matchers = list(matchers)
        desc = ", ".join(m.description for m in matchers)
        return cls(lambda item: any(m.test(item) for m in matchers), f"or({desc})")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description})"


class UniqueMatcher:
    """
    First-occurrence-wins predicate.

    Stateful: remembers every key it has accepted, so an item whose key was
    seen before is rejected. Build one per pipeline run; sharing an
    instance between pipelines shares its deduplication. Safe to call from
    several threads.
    """

    def __init__(self, key_fn: Callable[[Any], Hashable]) -> None:
        self._key_fn = key_fn
        self._seen: set[Hashable] = set()
        self._lock = threading.Lock()

    def __call__(self, item: Any) -> bool:
        key = self._key_fn(item)
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True


# =============================================================================
# Mapper
# =============================================================================


class Mapper(Generic[T]):
    """A named transform."""

    def __init__(self, fn: Callable[[T], T], description: str) -> None:
        self._fn = fn
        self.description = description

    def apply(self, item: T) -> T:
        return self._fn(item)

    def __call__(self, item: T) -> T:
        return self.apply(item)

    @classmethod
    def identity(cls) -> Any:
        return cls(lambda item: item, "identity()")

    @classmethod
    def compose(cls, mappers: Sequence[Mapper[T]]) -> Any:
        """Chain mappers left to right."""
        mappers = list(mappers)

        def fn(item: T) -> T:
            for mapper in mappers:
                item = mapper.apply(item)
            return item

        desc = ", ".join(m.description for m in mappers)
        return cls(fn, f"compose({desc})")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description})"


class NameMapper(Generic[T]):
    """A named item to string function."""

    def __init__(self, fn: Callable[[T], str], description: str) -> None:
        self._fn = fn
        self.description = description

    def apply(self, item: T) -> str:
        return self._fn(item)

    def __call__(self, item: T) -> str:
        return self.apply(item)

    @classmethod
    def compose(cls, mappers: Sequence[NameMapper[T]]) -> Any:
        """Concatenate the results of mappers left to right."""
        mappers = list(mappers)
        desc = ", ".join(m.description for m in mappers)
        return cls(lambda item: "".join(m.apply(item) for m in mappers), f"compose({desc})")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description})"


# =============================================================================
# Sink
# =============================================================================


class Sink(Generic[T]):
    """
    Accepts items and performs an effect.

    ``accept_all`` is built on ``accept``; if an item fails mid-batch the
    sink gets ``cleanup(exc)`` to roll back partial effects and the error
    is re-raised. ``close`` flushes buffered effects. Sinks are context
    managers that close on exit.
    """

    description = "sink"

    def accept(self, item: T) -> None:
        raise NotImplementedError

    def accept_all(self, items: Iterable[T]) -> None:
        try:
            for item in items:
                self.accept(item)
        except Exception as e:
            self.cleanup(e)
            raise

    def cleanup(self, exc: BaseException) -> None:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> Sink[T]:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description})"


class NullSink(Sink[T]):
    """Swallows everything."""

    description = "null()"

    def accept(self, item: T) -> None:
        pass


class DelegatingSink(Sink[T]):
    """Forwards to a single delegate and owns it."""

    def __init__(self, delegate: Sink[T]) -> None:
        self.delegate = delegate

    def accept(self, item: T) -> None:
        self.delegate.accept(item)

    def cleanup(self, exc: BaseException) -> None:
        self.delegate.cleanup(exc)

    def close(self) -> None:
        self.delegate.close()


class NonClosingSink(DelegatingSink[T]):
    """Forwards everything except ``close``."""

    def __init__(self, delegate: Sink[T]) -> None:
        super().__init__(delegate)
        self.description = f"nonClosing({delegate.description})"

    def close(self) -> None:
        pass


class MatchingSink(DelegatingSink[T]):
    """Drops items the matcher rejects."""

    def __init__(self, matcher: Matcher[T], delegate: Sink[T]) -> None:
        super().__init__(delegate)
        self.matcher = matcher
        self.description = f"matching({matcher.description}, {delegate.description})"

    def accept(self, item: T) -> None:
        if self.matcher.test(item):
            self.delegate.accept(item)


class MappingSink(DelegatingSink[T]):
    """Transforms items before forwarding."""

    def __init__(self, mapper: Mapper[T], delegate: Sink[T]) -> None:
        super().__init__(delegate)
        self.mapper = mapper
        self.description = f"mapping({mapper.description}, {delegate.description})"

    def accept(self, item: T) -> None:
        self.delegate.accept(self.mapper.apply(item))


class TeeSink(Sink[T]):
    """Broadcasts to several sinks; closes them only when it owns them."""

    def __init__(self, sinks: Sequence[Sink[T]], close_children: bool = True) -> None:
        self.sinks = list(sinks)
        self.close_children = close_children
        self.description = "tee({})".format(", ".join(s.description for s in self.sinks))

    def accept(self, item: T) -> None:
        for sink in self.sinks:
            sink.accept(item)

    def cleanup(self, exc: BaseException) -> None:
        for sink in self.sinks:
            sink.cleanup(exc)

    def close(self) -> None:
        if not self.close_children:
            return
        errors: list[Exception] = []
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                logger.warning(f"Failed to close {sink!r}: {e}")
                errors.append(e)
        if errors:
            raise errors[0]


class CountingSink(Sink[T]):
    """Counts accepted items; reports the total on close."""

    description = "counting()"

    def __init__(self, label: str = "items") -> None:
        self.label = label
        self.count = 0
        self._lock = threading.Lock()

    def accept(self, item: T) -> None:
        with self._lock:
            self.count += 1

    def close(self) -> None:
        logger.info(f"Accepted {self.count} {self.label}")
