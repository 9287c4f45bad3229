"""
Dependency domains: matchers, mappers and sinks over dependencies.

Matcher ops:
    any() scopeIncluded(scope...) scopeExcluded(scope...) optional(bool)
    artifact(pattern) artifact(artifactMatcher)
    not(m) and(m...) or(m...)

Mapper ops:
    identity() artifact(artifactMapper) scope(s) optional(bool) compose(m...)

Sink ops:
    null() counting() tee(s...) nonClosing(s)
    matching(dependencyMatcher, sink) mapping(dependencyMapper, sink)
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

from depkit.core.ir.artifacts import Dependency
from depkit.core.ir.spec import Op
from depkit.core.mappers import ArtifactMapper, ArtifactMapperBuilder
from depkit.core.matchers import ArtifactMatcher, ArtifactMatcherBuilder
from depkit.core.pipeline import (
    CountingSink,
    Mapper,
    MappingSink,
    MatchingSink,
    Matcher,
    NonClosingSink,
    NullSink,
    Sink,
    TeeSink,
)
from depkit.core.spec_lang.builder import SpecBuilder

# =============================================================================
# Matchers
# =============================================================================


class DependencyMatcher(Matcher[Dependency]):
    """Predicate over dependencies."""

    family = "dependency matcher"


def scope(
    included: Collection[str] | None = None, excluded: Collection[str] | None = None
) -> DependencyMatcher:
    def test(d: Dependency) -> bool:
        if included is not None and d.scope not in included:
            return False
        return excluded is None or d.scope not in excluded

    if included is not None:
        desc = "scopeIncluded({})".format(", ".join(included))
    else:
        desc = "scopeExcluded({})".format(", ".join(excluded or ()))
    return DependencyMatcher(test, desc)


def optional(value: bool) -> DependencyMatcher:
    return DependencyMatcher(lambda d: d.optional == value, f"optional({str(value).lower()})")


def artifact(matcher: ArtifactMatcher) -> DependencyMatcher:
    return DependencyMatcher(lambda d: matcher.test(d.artifact), f"artifact({matcher.description})")


class DependencyMatcherBuilder(SpecBuilder[DependencyMatcher]):
    """Compiles dependency matcher specs."""

    domain = "dependency matcher"
    produces = DependencyMatcher
    combinators = frozenset({"artifact"})

    def process_op(self, node: Op) -> None:
        match node.value:
            case "any":
                self.params.append(DependencyMatcher.always())
            case "scopeIncluded":
                self.params.append(scope(included=self.string_params()))
            case "scopeExcluded":
                self.params.append(scope(excluded=self.string_params()))
            case "optional":
                self.params.append(optional(self.boolean_param()))
            case "artifact":
                self.require_children(node, 1)
                if isinstance(node.children[0], Op):
                    matcher = self.compile_child(node, 0, ArtifactMatcherBuilder)
                else:
                    matcher = self.compile_node(node, ArtifactMatcherBuilder)
                self.params.append(artifact(matcher))
            case "not":
                self.params.append(DependencyMatcher.negate(self.typed_param(DependencyMatcher)))
            case "and":
                self.params.append(DependencyMatcher.all_of(self.typed_params(DependencyMatcher)))
            case "or":
                self.params.append(DependencyMatcher.any_of(self.typed_params(DependencyMatcher)))
            case _:
                raise self.unknown_op(node)


# =============================================================================
# Mappers
# =============================================================================


class DependencyMapper(Mapper[Dependency]):
    """Transform over dependencies."""

    family = "dependency mapper"


def artifact_mapper(mapper: ArtifactMapper) -> DependencyMapper:
    return DependencyMapper(
        lambda d: d.with_changes(artifact=mapper.apply(d.artifact)),
        f"artifact({mapper.description})",
    )


class DependencyMapperBuilder(SpecBuilder[DependencyMapper]):
    """Compiles dependency mapper specs."""

    domain = "dependency mapper"
    produces = DependencyMapper
    combinators = frozenset({"artifact"})

    def process_op(self, node: Op) -> None:
        match node.value:
            case "identity":
                self.params.append(DependencyMapper.identity())
            case "artifact":
                self.require_children(node, 1)
                mapper = self.compile_child(node, 0, ArtifactMapperBuilder)
                self.params.append(artifact_mapper(mapper))
            case "scope":
                value = self.string_param()
                self.params.append(
                    DependencyMapper(lambda d: d.with_changes(scope=value), f"scope({value})")
                )
            case "optional":
                flag = self.boolean_param()
                self.params.append(
                    DependencyMapper(
                        lambda d: d.with_changes(optional=flag),
                        f"optional({str(flag).lower()})",
                    )
                )
            case "compose":
                self.params.append(DependencyMapper.compose(self.typed_params(DependencyMapper)))
            case _:
                raise self.unknown_op(node)


# =============================================================================
# Sinks
# =============================================================================


class DependencySink(Sink[Dependency]):
    """Sink accepting dependencies."""

    family = "dependency sink"


class NullDependencySink(NullSink[Dependency], DependencySink):
    pass


class CountingDependencySink(CountingSink[Dependency], DependencySink):
    def __init__(self) -> None:
        super().__init__(label="dependencies")


class TeeDependencySink(TeeSink[Dependency], DependencySink):
    pass


class NonClosingDependencySink(NonClosingSink[Dependency], DependencySink):
    pass


class MatchingDependencySink(MatchingSink[Dependency], DependencySink):
    pass


class MappingDependencySink(MappingSink[Dependency], DependencySink):
    pass


class DependencySinkBuilder(SpecBuilder[DependencySink]):
    """Compiles dependency sink specs."""

    domain = "dependency sink"
    produces = DependencySink
    combinators = frozenset({"matching", "mapping"})

    def process_op(self, node: Op) -> None:
        match node.value:
            case "null":
                self.params.append(NullDependencySink())
            case "counting":
                self.params.append(CountingDependencySink())
            case "tee":
                self.params.append(TeeDependencySink(self.typed_params(DependencySink)))
            case "nonClosing":
                self.params.append(NonClosingDependencySink(self.typed_param(DependencySink)))
            case "matching":
                self.require_children(node, 2)
                matcher = self.compile_child(node, 0, DependencyMatcherBuilder)
                delegate = self.compile_child(node, 1, DependencySinkBuilder)
                self.params.append(MatchingDependencySink(matcher, delegate))
            case "mapping":
                self.require_children(node, 2)
                mapper = self.compile_child(node, 0, DependencyMapperBuilder)
                delegate = self.compile_child(node, 1, DependencySinkBuilder)
                self.params.append(MappingDependencySink(mapper, delegate))
            case _:
                raise self.unknown_op(node)


# =============================================================================
# Entry points
# =============================================================================


def build_dependency_matcher(
    spec: str, properties: Mapping[str, Any] | None = None
) -> DependencyMatcher:
    return DependencyMatcherBuilder.compile(spec, properties)


def build_dependency_mapper(
    spec: str, properties: Mapping[str, Any] | None = None
) -> DependencyMapper:
    return DependencyMapperBuilder.compile(spec, properties)


def build_dependency_sink(
    spec: str, properties: Mapping[str, Any] | None = None
) -> DependencySink:
    return DependencySinkBuilder.compile(spec, properties)
