"""
Artifact key factories and differentiators.

Both map an artifact to a string. Key factories identify an artifact
(``id()``, ``baseId()``, ``versionlessId()``, ``ga()``); differentiators
tell versions of the same artifact apart (``majorVersion()``,
``minorVersion()``, ``baseVersion()``, ``version()``).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from depkit.core.ir.artifacts import Artifact
from depkit.core.ir.spec import Op
from depkit.core.pipeline import NameMapper
from depkit.core.spec_lang.builder import SpecBuilder


class ArtifactKeyFactory(NameMapper[Artifact]):
    family = "artifact key factory"


class ArtifactDifferentiator(NameMapper[Artifact]):
    family = "artifact differentiator"


def _versionless_id(a: Artifact) -> str:
    parts = [a.group_id, a.artifact_id, a.extension]
    if a.classifier:
        parts.append(a.classifier)
    return ":".join(parts)


def _major_version(a: Artifact) -> str:
    first_dot = a.version.find(".")
    return a.version[:first_dot] if first_dot > 0 else a.version


def _minor_version(a: Artifact) -> str:
    first_dot = a.version.find(".")
    if first_dot > 0:
        second_dot = a.version.find(".", first_dot + 1)
        if second_dot > first_dot:
            return a.version[:second_dot]
    return a.version


_KEY_FACTORIES: dict[str, Callable[[Artifact], str]] = {
    "id": str,
    "baseId": lambda a: f"{_versionless_id(a)}:{a.base_version}",
    "versionlessId": _versionless_id,
    "ga": lambda a: f"{a.group_id}:{a.artifact_id}",
}

_DIFFERENTIATORS: dict[str, Callable[[Artifact], str]] = {
    "majorVersion": _major_version,
    "minorVersion": _minor_version,
    "baseVersion": lambda a: a.base_version,
    "version": lambda a: a.version,
}


class ArtifactKeyFactoryBuilder(SpecBuilder[ArtifactKeyFactory]):
    domain = "artifact key factory"
    produces = ArtifactKeyFactory

    def process_op(self, node: Op) -> None:
        fn = _KEY_FACTORIES.get(node.value)
        if fn is None:
            raise self.unknown_op(node)
        self.params.append(ArtifactKeyFactory(fn, f"{node.value}()"))


class ArtifactDifferentiatorBuilder(SpecBuilder[ArtifactDifferentiator]):
    domain = "artifact differentiator"
    produces = ArtifactDifferentiator

    def process_op(self, node: Op) -> None:
        fn = _DIFFERENTIATORS.get(node.value)
        if fn is None:
            raise self.unknown_op(node)
        self.params.append(ArtifactDifferentiator(fn, f"{node.value}()"))


def build_key_factory(spec: str, properties: Mapping[str, Any] | None = None) -> ArtifactKeyFactory:
    return ArtifactKeyFactoryBuilder.compile(spec, properties)


def build_differentiator(
    spec: str, properties: Mapping[str, Any] | None = None
) -> ArtifactDifferentiator:
    return ArtifactDifferentiatorBuilder.compile(spec, properties)
