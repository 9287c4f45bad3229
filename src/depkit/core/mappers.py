"""
Artifact mappers: artifact to artifact transforms.

Spec ops:
    identity()
    baseVersion()               timestamped snapshot → -SNAPSHOT
    omitClassifier()
    rename(g, a, v)             ``null`` or ``*`` keeps the field
    addSuffix(text)             appends to the artifact id
    compose(mapper...)          left to right
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from depkit.core.ir.artifacts import Artifact
from depkit.core.ir.spec import Op
from depkit.core.pipeline import Mapper
from depkit.core.spec_lang.builder import SpecBuilder

_KEEP = frozenset({"null", "*"})


class ArtifactMapper(Mapper[Artifact]):
    """Transform over artifacts."""

    family = "artifact mapper"


def identity() -> ArtifactMapper:
    return ArtifactMapper.identity()


def base_version() -> ArtifactMapper:
    return ArtifactMapper(lambda a: a.with_changes(version=a.base_version), "baseVersion()")


def omit_classifier() -> ArtifactMapper:
    return ArtifactMapper(lambda a: a.with_changes(classifier=""), "omitClassifier()")


def rename(group_id: str | None, artifact_id: str | None, version: str | None) -> ArtifactMapper:
    """Replace coordinates; ``None`` keeps the original value."""

    def fn(a: Artifact) -> Artifact:
        return a.with_changes(
            group_id=group_id if group_id is not None else a.group_id,
            artifact_id=artifact_id if artifact_id is not None else a.artifact_id,
            version=version if version is not None else a.version,
        )

    args = ", ".join("null" if v is None else v for v in (group_id, artifact_id, version))
    return ArtifactMapper(fn, f"rename({args})")


def add_suffix(suffix: str) -> ArtifactMapper:
    if not suffix.strip():
        raise ValueError("invalid suffix")
    return ArtifactMapper(
        lambda a: a.with_changes(artifact_id=a.artifact_id + suffix), f"addSuffix({suffix})"
    )


def compose(*mappers: ArtifactMapper) -> ArtifactMapper:
    return ArtifactMapper.compose(mappers)


class ArtifactMapperBuilder(SpecBuilder[ArtifactMapper]):
    """Compiles artifact mapper specs."""

    domain = "artifact mapper"
    produces = ArtifactMapper

    def process_op(self, node: Op) -> None:
        match node.value:
            case "identity":
                self.params.append(identity())
            case "baseVersion":
                self.params.append(base_version())
            case "omitClassifier":
                self.params.append(omit_classifier())
            case "rename":
                v = self._field_param()
                a = self._field_param()
                g = self._field_param()
                self.params.append(rename(g, a, v))
            case "addSuffix":
                try:
                    self.params.append(add_suffix(self.string_param()))
                except ValueError as e:
                    raise self.error(str(e)) from None
            case "compose":
                self.params.append(compose(*self.typed_params(ArtifactMapper)))
            case _:
                raise self.unknown_op(node)

    def _field_param(self) -> str | None:
        value = self.string_param()
        return None if value in _KEEP else value


def build_artifact_mapper(spec: str, properties: Mapping[str, Any] | None = None) -> ArtifactMapper:
    """Compile an artifact mapper spec."""
    return ArtifactMapperBuilder.compile(spec, properties)
