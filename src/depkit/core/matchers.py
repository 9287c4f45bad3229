"""
Artifact matchers: predicates over artifacts.

Spec ops:
    any()                       matches everything
    artifact(pattern)           coordinate glob, see ``artifact``
    withoutClassifier()         classifier is blank
    snapshot()                  snapshot version
    unique()                    first occurrence per full coordinate
    uniqueBy(nameMapper)        first occurrence per computed key
    not(m) and(m...) or(m...)

Inside ``and``/``or``/``not`` a bare literal is shorthand for
``artifact(literal)``: ``or(org.foo:*, *:bar)``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from depkit.core.ir.artifacts import Artifact
from depkit.core.ir.spec import Op
from depkit.core.name_mappers import ArtifactNameMapper, ArtifactNameMapperBuilder, key
from depkit.core.pipeline import Matcher, UniqueMatcher
from depkit.core.spec_lang.builder import SpecBuilder

ANY = "*"


class ArtifactMatcher(Matcher[Artifact]):
    """Predicate over artifacts."""

    family = "artifact matcher"


# =============================================================================
# Primitives
# =============================================================================


def _matches(pattern: str, value: str) -> bool:
    if pattern == ANY:
        return True
    if pattern.endswith(ANY):
        return value.startswith(pattern[:-1])
    if pattern.startswith(ANY):
        return value.endswith(pattern[1:])
    return pattern == value


def _prototype(coordinate: str) -> tuple[str, str, str, str, str]:
    """Split a pattern into (group, artifact, classifier, extension, version)."""
    parts = coordinate.split(":")
    match len(parts):
        case 1:
            return parts[0], ANY, ANY, ANY, ANY
        case 2:
            return parts[0], parts[1], ANY, ANY, ANY
        case 3:
            return parts[0], parts[1], ANY, ANY, parts[2]
        case 4:
            return parts[0], parts[1], ANY, parts[2], parts[3]
        case 5:
            return parts[0], parts[1], parts[2], parts[3], parts[4]
        case _:
            raise ValueError(
                f"Bad artifact coordinates {coordinate}, expected format is "
                "<groupId>:<artifactId>[:<extension>[:<classifier>]]:<version>"
            )


def artifact(coordinate: str) -> ArtifactMatcher:
    """
    Glob match on coordinates.

    ``g``, ``g:a``, ``g:a:v``, ``g:a:ext:v`` or ``g:a:classifier:ext:v``;
    omitted segments match anything. Each segment is ``*``, a prefix
    (``org.*``), a suffix (``*-api``) or an exact value.
    """
    g, a, c, e, v = _prototype(coordinate)

    def test(art: Artifact) -> bool:
        return (
            _matches(g, art.group_id)
            and _matches(a, art.artifact_id)
            and _matches(v, art.version)
            and _matches(e, art.extension)
            and _matches(c, art.classifier)
        )

    return ArtifactMatcher(test, f"artifact({coordinate})")


def any_artifact() -> ArtifactMatcher:
    return ArtifactMatcher.always()


def without_classifier() -> ArtifactMatcher:
    return ArtifactMatcher(lambda a: not a.classifier.strip(), "withoutClassifier()")


def snapshot() -> ArtifactMatcher:
    return ArtifactMatcher(lambda a: a.is_snapshot, "snapshot()")


def unique_by(mapper: ArtifactNameMapper) -> ArtifactMatcher:
    """First occurrence of each key wins. Each call returns a fresh, stateful matcher."""
    return ArtifactMatcher(UniqueMatcher(mapper.apply), f"uniqueBy({mapper.description})")


def unique() -> ArtifactMatcher:
    matcher = unique_by(key("GACEVKey"))
    matcher.description = "unique()"
    return matcher


# =============================================================================
# Builder
# =============================================================================


class ArtifactMatcherBuilder(SpecBuilder[ArtifactMatcher]):
    """Compiles artifact matcher specs."""

    domain = "artifact matcher"
    produces = ArtifactMatcher
    combinators = frozenset({"uniqueBy"})

    def process_op(self, node: Op) -> None:
        match node.value:
            case "any":
                self.params.append(any_artifact())
            case "artifact":
                coordinate = self.string_param()
                try:
                    self.params.append(artifact(coordinate))
                except ValueError as e:
                    raise self.error(str(e)) from None
            case "withoutClassifier":
                self.params.append(without_classifier())
            case "snapshot":
                self.params.append(snapshot())
            case "unique":
                self.params.append(unique())
            case "uniqueBy":
                self.require_children(node, 1)
                mapper = self.compile_child(node, 0, ArtifactNameMapperBuilder)
                self.params.append(unique_by(mapper))
            case "not":
                self.params.append(ArtifactMatcher.negate(self._matcher_param()))
            case "and":
                self.params.append(ArtifactMatcher.all_of(self._matcher_params()))
            case "or":
                self.params.append(ArtifactMatcher.any_of(self._matcher_params()))
            case _:
                raise self.unknown_op(node)

    def _matcher_param(self) -> ArtifactMatcher:
        if self.frame_size() and isinstance(self.params[-1], str):
            pattern = self.string_param()
            try:
                return artifact(pattern)
            except ValueError as e:
                raise self.error(str(e)) from None
        return self.typed_param(ArtifactMatcher)

    def _matcher_params(self) -> list[ArtifactMatcher]:
        values = [self._matcher_param() for _ in range(self.frame_size())]
        values.reverse()
        return values


def build_artifact_matcher(
    spec: str, properties: Mapping[str, Any] | None = None
) -> ArtifactMatcher:
    """Compile an artifact matcher spec."""
    return ArtifactMatcherBuilder.compile(spec, properties)
