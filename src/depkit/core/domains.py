"""
Registry of spec domains by their user-facing name.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from depkit.core.dependencies import (
    DependencyMapperBuilder,
    DependencyMatcherBuilder,
    DependencySinkBuilder,
)
from depkit.core.keys import ArtifactDifferentiatorBuilder, ArtifactKeyFactoryBuilder
from depkit.core.mappers import ArtifactMapperBuilder
from depkit.core.matchers import ArtifactMatcherBuilder
from depkit.core.name_mappers import ArtifactNameMapperBuilder
from depkit.core.sinks import ArtifactSinkBuilder
from depkit.core.spec_lang.builder import SpecBuilder
from depkit.core.version_matchers import VersionMatcherBuilder
from depkit.core.version_selectors import VersionSelectorBuilder


class Domain(StrEnum):
    """Spec domains selectable from the command line."""

    MATCHER = "matcher"
    MAPPER = "mapper"
    NAME_MAPPER = "name-mapper"
    VERSION_MATCHER = "version-matcher"
    SELECTOR = "selector"
    SINK = "sink"
    DEPENDENCY_MATCHER = "dependency-matcher"
    DEPENDENCY_MAPPER = "dependency-mapper"
    DEPENDENCY_SINK = "dependency-sink"
    KEY_FACTORY = "key-factory"
    DIFFERENTIATOR = "differentiator"


BUILDERS: dict[Domain, type[SpecBuilder[Any]]] = {
    Domain.MATCHER: ArtifactMatcherBuilder,
    Domain.MAPPER: ArtifactMapperBuilder,
    Domain.NAME_MAPPER: ArtifactNameMapperBuilder,
    Domain.VERSION_MATCHER: VersionMatcherBuilder,
    Domain.SELECTOR: VersionSelectorBuilder,
    Domain.SINK: ArtifactSinkBuilder,
    Domain.DEPENDENCY_MATCHER: DependencyMatcherBuilder,
    Domain.DEPENDENCY_MAPPER: DependencyMapperBuilder,
    Domain.DEPENDENCY_SINK: DependencySinkBuilder,
    Domain.KEY_FACTORY: ArtifactKeyFactoryBuilder,
    Domain.DIFFERENTIATOR: ArtifactDifferentiatorBuilder,
}


def builder_for(domain: Domain | str) -> type[SpecBuilder[Any]]:
    return BUILDERS[Domain(domain)]
