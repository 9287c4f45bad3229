"""
Artifact sinks.

Spec ops:
    null()                              swallow everything
    counting() sizing()                 totals, logged on close
    tee(sink...)                        broadcast; closes its children
    nonClosing(sink)                    shields the delegate from close
    matching(artifactMatcher, sink)     filter, then delegate
    mapping(artifactMapper, sink)       transform, then delegate
    flat(dir[, nameMapper])             copy files into one directory
    repository(dir)                     copy files into a repository layout
    install() deploy(repoId) purge(repoId...)

``matching``, ``mapping`` and ``flat`` are combinators: their matcher,
mapper and name mapper arguments are written in those domains' own
vocabularies, e.g. ``matching(not(snapshot()), flat(libs, AE()))``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from depkit.core.ir.artifacts import Artifact
from depkit.core.ir.spec import Op
from depkit.core.mappers import ArtifactMapper, ArtifactMapperBuilder
from depkit.core.matchers import ArtifactMatcher, ArtifactMatcherBuilder
from depkit.core.name_mappers import ArtifactNameMapperBuilder, layout
from depkit.core.pipeline import (
    CountingSink,
    MappingSink,
    MatchingSink,
    NonClosingSink,
    NullSink,
    Sink,
    TeeSink,
)
from depkit.core.spec_lang.builder import SpecBuilder

if TYPE_CHECKING:
    from depkit.core.repository_sinks import RepositoryHandle

logger = logging.getLogger(__name__)


@dataclass
class SinkContext:
    """Runtime collaborators handed to sink specs at build time."""

    basedir: Path = Path(".")
    repository: RepositoryHandle | None = None
    dry_run: bool = False

    def resolve(self, path: str) -> Path:
        return (self.basedir / path).resolve()


# =============================================================================
# Sink family
# =============================================================================


class ArtifactSink(Sink[Artifact]):
    """Sink accepting artifacts."""

    family = "artifact sink"


class NullArtifactSink(NullSink[Artifact], ArtifactSink):
    pass


class CountingArtifactSink(CountingSink[Artifact], ArtifactSink):
    def __init__(self) -> None:
        super().__init__(label="artifacts")


class SizingArtifactSink(ArtifactSink):
    """Sums the size of backing files; artifacts without one count as zero."""

    description = "sizing()"

    def __init__(self) -> None:
        self.count = 0
        self.size = 0
        self._lock = threading.Lock()

    def accept(self, item: Artifact) -> None:
        size = 0
        if item.file is not None and item.file.is_file():
            size = item.file.stat().st_size
        with self._lock:
            self.count += 1
            self.size += size

    def close(self) -> None:
        logger.info(f"Accepted {self.count} artifacts totaling {self.size} bytes")


class TeeArtifactSink(TeeSink[Artifact], ArtifactSink):
    pass


class NonClosingArtifactSink(NonClosingSink[Artifact], ArtifactSink):
    pass


class MatchingArtifactSink(MatchingSink[Artifact], ArtifactSink):
    pass


class MappingArtifactSink(MappingSink[Artifact], ArtifactSink):
    pass


# =============================================================================
# Builder
# =============================================================================


class ArtifactSinkBuilder(SpecBuilder[ArtifactSink]):
    """Compiles artifact sink specs against a ``SinkContext``."""

    domain = "artifact sink"
    produces = ArtifactSink
    combinators = frozenset({"matching", "mapping", "flat"})

    def __init__(
        self,
        properties: Mapping[str, Any] | None = None,
        context: SinkContext | None = None,
    ) -> None:
        super().__init__(properties)
        self.context = context or SinkContext()

    def process_op(self, node: Op) -> None:
        from depkit.core import directory_sink, repository_sinks

        match node.value:
            case "null":
                self.params.append(NullArtifactSink())
            case "counting":
                self.params.append(CountingArtifactSink())
            case "sizing":
                self.params.append(SizingArtifactSink())
            case "tee":
                self.params.append(TeeArtifactSink(self.typed_params(ArtifactSink)))
            case "nonClosing":
                self.params.append(NonClosingArtifactSink(self.typed_param(ArtifactSink)))
            case "matching":
                self.require_children(node, 2)
                matcher: ArtifactMatcher = self.compile_child(node, 0, ArtifactMatcherBuilder)
                self.params.append(MatchingArtifactSink(matcher, self._delegate(node)))
            case "mapping":
                self.require_children(node, 2)
                mapper: ArtifactMapper = self.compile_child(node, 0, ArtifactMapperBuilder)
                self.params.append(MappingArtifactSink(mapper, self._delegate(node)))
            case "flat":
                self.require_children(node, 1, 2)
                directory = self.context.resolve(self.literal_child(node, 0))
                if len(node.children) == 2:
                    name_mapper = self.compile_child(node, 1, ArtifactNameMapperBuilder)
                else:
                    name_mapper = layout("AbVCE")
                self.params.append(
                    directory_sink.flat(directory, name_mapper, dry_run=self.context.dry_run)
                )
            case "repository":
                directory = self.context.resolve(self.string_param())
                self.params.append(
                    directory_sink.repository(directory, dry_run=self.context.dry_run)
                )
            case "install":
                self.params.append(repository_sinks.InstallingSink(self._repository()))
            case "deploy":
                repository_id = self.string_param()
                self.params.append(
                    repository_sinks.DeployingSink(self._repository(), repository_id)
                )
            case "purge":
                repository_ids = self.string_params()
                if not repository_ids:
                    raise self.error("purge needs at least one repository id")
                self.params.append(repository_sinks.PurgingSink(self._repository(), repository_ids))
            case _:
                raise self.unknown_op(node)

    def _delegate(self, node: Op) -> ArtifactSink:
        return self.compile_child(node, 1, ArtifactSinkBuilder, context=self.context)

    def _repository(self) -> RepositoryHandle:
        if self.context.repository is None:
            raise self.error("No repository handle available for this sink")
        return self.context.repository


def build_artifact_sink(
    spec: str,
    properties: Mapping[str, Any] | None = None,
    context: SinkContext | None = None,
) -> ArtifactSink:
    """Compile an artifact sink spec."""
    return ArtifactSinkBuilder.compile(spec, properties, context=context)
