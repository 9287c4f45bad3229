"""
Version selectors: (artifact, ascending versions) to a chosen version.

Spec ops:
    identity()                  the artifact's own version
    first() last()              list extremes
    prev() next()               neighbours of the current version
    major() minor()             newest version in the same major / minor line
    filtered(versionMatcher, selector)
    noPreviews([s]) noSnapshots([s]) noSnapshotsAndPreviews([s])
    contextualSnapshotsAndPreviews([s])

Every selector falls back to the current version when it has nothing
to choose from. Shorthand filters without an argument apply to ``last()``;
``contextualSnapshotsAndPreviews()`` applies to ``major()``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from depkit.core.ir.artifacts import Artifact
from depkit.core.ir.spec import Op
from depkit.core.spec_lang.builder import SpecBuilder
from depkit.core.version_matchers import (
    VersionMatcher,
    VersionMatcherBuilder,
    no_previews,
    no_snapshots,
    no_snapshots_and_previews,
)
from depkit.core.versions import Version, is_preview_version, is_snapshot_version, parse_version


class VersionSelector:
    """Chooses a version string for an artifact from ascending candidate versions."""

    family = "version selector"

    def __init__(
        self, fn: Callable[[Artifact, list[Version]], str], description: str
    ) -> None:
        self._fn = fn
        self.description = description

    def select(self, artifact: Artifact, versions: Sequence[Version | str]) -> str:
        return self._fn(artifact, [_as_version(v) for v in versions])

    def __call__(self, artifact: Artifact, versions: Sequence[Version | str]) -> str:
        return self.select(artifact, versions)

    def __repr__(self) -> str:
        return f"VersionSelector({self.description})"


def _as_version(value: Version | str) -> Version:
    return value if isinstance(value, Version) else parse_version(value)


# =============================================================================
# Primitives
# =============================================================================


def identity() -> VersionSelector:
    return VersionSelector(lambda a, vs: a.version, "identity()")


def first() -> VersionSelector:
    return VersionSelector(lambda a, vs: str(vs[0]) if vs else a.version, "first()")


def last() -> VersionSelector:
    return VersionSelector(lambda a, vs: str(vs[-1]) if vs else a.version, "last()")


def _index_of(artifact: Artifact, versions: list[Version]) -> int | None:
    current = parse_version(artifact.version)
    for i, v in enumerate(versions):
        if v == current:
            return i
    return None


def prev() -> VersionSelector:
    def fn(a: Artifact, vs: list[Version]) -> str:
        idx = _index_of(a, vs)
        if idx is None or idx == 0:
            return a.version
        return str(vs[idx - 1])

    return VersionSelector(fn, "prev()")


def next_() -> VersionSelector:
    def fn(a: Artifact, vs: list[Version]) -> str:
        idx = _index_of(a, vs)
        if idx is None or idx == len(vs) - 1:
            return a.version
        return str(vs[idx + 1])

    return VersionSelector(fn, "next()")


def _newest_with_prefix(a: Artifact, vs: list[Version], prefix: str) -> str:
    candidates = [v for v in vs if str(v).startswith(prefix)]
    return str(candidates[-1]) if candidates else a.version


def major() -> VersionSelector:
    """Newest ``X.*`` for current version ``X.y.z``; ``last()`` when the version has no dot."""
    fallback = last()

    def fn(a: Artifact, vs: list[Version]) -> str:
        if "." not in a.version:
            return fallback.select(a, vs)
        prefix = a.version[: a.version.index(".") + 1]
        return _newest_with_prefix(a, vs, prefix)

    return VersionSelector(fn, "major()")


def minor() -> VersionSelector:
    """Newest ``X.Y.*`` for current version ``X.Y.z``; ``major()`` for shorter versions."""
    fallback = major()

    def fn(a: Artifact, vs: list[Version]) -> str:
        parts = a.version.split(".")
        if len(parts) < 3:
            return fallback.select(a, vs)
        return _newest_with_prefix(a, vs, f"{parts[0]}.{parts[1]}.")

    return VersionSelector(fn, "minor()")


def filtered(matcher: VersionMatcher, selector: VersionSelector) -> VersionSelector:
    """Apply selector to the versions the matcher accepts."""
    return VersionSelector(
        lambda a, vs: selector.select(a, [v for v in vs if matcher.test(v)]),
        f"filtered({matcher.description}, {selector.description})",
    )


def no_previews_of(selector: VersionSelector) -> VersionSelector:
    return filtered(no_previews(), selector)


def no_snapshots_of(selector: VersionSelector) -> VersionSelector:
    return filtered(no_snapshots(), selector)


def no_snapshots_and_previews_of(selector: VersionSelector) -> VersionSelector:
    return filtered(no_snapshots_and_previews(), selector)


def contextual_snapshots_and_previews(selector: VersionSelector | None = None) -> VersionSelector:
    """
    Filter as strictly as the current version allows.

    A snapshot current version sees every candidate; a preview sees
    everything but snapshots; a release sees releases only.
    """
    selector = selector or major()
    when_snapshot = selector
    when_preview = no_snapshots_of(selector)
    when_release = no_snapshots_and_previews_of(selector)

    def fn(a: Artifact, vs: list[Version]) -> str:
        if is_snapshot_version(a.version):
            return when_snapshot.select(a, vs)
        if is_preview_version(a.version):
            return when_preview.select(a, vs)
        return when_release.select(a, vs)

    return VersionSelector(fn, f"contextualSnapshotsAndPreviews({selector.description})")


# =============================================================================
# Builder
# =============================================================================

_FILTERS: dict[str, Callable[[VersionSelector], VersionSelector]] = {
    "noPreviews": no_previews_of,
    "noSnapshots": no_snapshots_of,
    "noSnapshotsAndPreviews": no_snapshots_and_previews_of,
}


class VersionSelectorBuilder(SpecBuilder[VersionSelector]):
    """Compiles version selector specs."""

    domain = "version selector"
    produces = VersionSelector
    combinators = frozenset({"filtered"})

    def process_op(self, node: Op) -> None:
        match node.value:
            case "identity":
                self.params.append(identity())
            case "first":
                self.params.append(first())
            case "last":
                self.params.append(last())
            case "prev":
                self.params.append(prev())
            case "next":
                self.params.append(next_())
            case "major":
                self.params.append(major())
            case "minor":
                self.params.append(minor())
            case "filtered":
                self.require_children(node, 2)
                matcher = self.compile_child(node, 0, VersionMatcherBuilder)
                selector = self.compile_child(node, 1, VersionSelectorBuilder)
                self.params.append(filtered(matcher, selector))
            case "noPreviews" | "noSnapshots" | "noSnapshotsAndPreviews":
                selector = self.typed_param(VersionSelector) if self.frame_size() else last()
                self.params.append(_FILTERS[node.value](selector))
            case "contextualSnapshotsAndPreviews":
                selector = self.typed_param(VersionSelector) if self.frame_size() else None
                self.params.append(contextual_snapshots_and_previews(selector))
            case _:
                raise self.unknown_op(node)


def build_version_selector(
    spec: str, properties: Mapping[str, Any] | None = None
) -> VersionSelector:
    """Compile a version selector spec."""
    return VersionSelectorBuilder.compile(spec, properties)
