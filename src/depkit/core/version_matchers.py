"""
Version matchers: predicates over versions.

Spec ops:
    any() noPreviews() noSnapshots() noSnapshotsAndPreviews()
    not(m) and(m...) or(m...)
    eq(v) gt(v) gte(v) lt(v) lte(v)
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Mapping
from typing import Any

from depkit.core.ir.spec import Op
from depkit.core.pipeline import Matcher
from depkit.core.spec_lang.builder import SpecBuilder
from depkit.core.versions import (
    Version,
    is_preview_version,
    is_snapshot_version,
    parse_version,
)


class VersionMatcher(Matcher[Version]):
    """Predicate over versions."""

    family = "version matcher"


def any_version() -> VersionMatcher:
    return VersionMatcher.always()


def no_previews() -> VersionMatcher:
    return VersionMatcher(lambda v: not is_preview_version(str(v)), "noPreviews()")


def no_snapshots() -> VersionMatcher:
    return VersionMatcher(lambda v: not is_snapshot_version(str(v)), "noSnapshots()")


def no_snapshots_and_previews() -> VersionMatcher:
    return VersionMatcher(
        lambda v: not is_snapshot_version(str(v)) and not is_preview_version(str(v)),
        "noSnapshotsAndPreviews()",
    )


_COMPARISONS: dict[str, Callable[[Version, Version], bool]] = {
    "eq": operator.eq,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}


def compare(op: str, version: str) -> VersionMatcher:
    """``compare("gte", "2.0")`` matches versions at or above 2.0."""
    fn = _COMPARISONS[op]
    bound = parse_version(version)
    return VersionMatcher(lambda v: fn(v, bound), f"{op}({version})")


class VersionMatcherBuilder(SpecBuilder[VersionMatcher]):
    """Compiles version matcher specs."""

    domain = "version matcher"
    produces = VersionMatcher

    def process_op(self, node: Op) -> None:
        match node.value:
            case "any":
                self.params.append(any_version())
            case "noPreviews":
                self.params.append(no_previews())
            case "noSnapshots":
                self.params.append(no_snapshots())
            case "noSnapshotsAndPreviews":
                self.params.append(no_snapshots_and_previews())
            case "not":
                self.params.append(VersionMatcher.negate(self.typed_param(VersionMatcher)))
            case "and":
                self.params.append(VersionMatcher.all_of(self.typed_params(VersionMatcher)))
            case "or":
                self.params.append(VersionMatcher.any_of(self.typed_params(VersionMatcher)))
            case "eq" | "gt" | "gte" | "lt" | "lte":
                try:
                    self.params.append(compare(node.value, self.string_param()))
                except ValueError as e:
                    raise self.error(str(e)) from None
            case _:
                raise self.unknown_op(node)


def build_version_matcher(spec: str, properties: Mapping[str, Any] | None = None) -> VersionMatcher:
    """Compile a version matcher spec."""
    return VersionMatcherBuilder.compile(spec, properties)
