"""
Artifact name mappers: artifact to string.

Used for file names in flat directories, repository layout paths and
uniqueness keys.

Spec ops:
    GAKey() GAVKey() GAbVKey() GACEVKey()      coordinate keys
    G() A() V() bV() C() E() P(key, default)   single fields
    GACVE() ... AE()                            file name layouts
    empty() fixed(text)
    optionalPrefix(prefix, mapper) optionalSuffix(suffix, mapper)
    repositoryDefault() repository(separator)
    compose(mapper...)                          concatenation

Layout names read left to right: ``G`` is ``groupId.``, ``A`` the
artifact id, ``C`` ``-classifier`` (only when present), ``V`` ``-version``,
``bV`` ``-baseVersion`` and ``E`` ``.extension``.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping
from typing import Any

from depkit.core.ir.artifacts import Artifact
from depkit.core.ir.spec import Op
from depkit.core.pipeline import NameMapper
from depkit.core.spec_lang.builder import SpecBuilder


class ArtifactNameMapper(NameMapper[Artifact]):
    """Maps an artifact to a string."""

    family = "artifact name mapper"


# =============================================================================
# Primitives
# =============================================================================


def empty() -> ArtifactNameMapper:
    return ArtifactNameMapper(lambda a: "", "empty()")


def fixed(text: str) -> ArtifactNameMapper:
    if not text.strip():
        raise ValueError("invalid fixed text")
    return ArtifactNameMapper(lambda a: text, f"fixed({text})")


def optional_prefix(prefix: str, mapper: ArtifactNameMapper) -> ArtifactNameMapper:
    """Prepend prefix when the nested result is not blank; otherwise emit nothing."""
    if not prefix.strip():
        raise ValueError("invalid prefix")

    def fn(a: Artifact) -> str:
        val = mapper.apply(a)
        return prefix + val if val and val.strip() else ""

    return ArtifactNameMapper(fn, f"optionalPrefix({prefix}, {mapper.description})")


def optional_suffix(suffix: str, mapper: ArtifactNameMapper) -> ArtifactNameMapper:
    """Append suffix when the nested result is not blank; otherwise emit nothing."""
    if not suffix.strip():
        raise ValueError("invalid suffix")

    def fn(a: Artifact) -> str:
        val = mapper.apply(a)
        return val + suffix if val and val.strip() else ""

    return ArtifactNameMapper(fn, f"optionalSuffix({suffix}, {mapper.description})")


def repository(separator: str) -> ArtifactNameMapper:
    """Repository layout: ``g/r/o/u/p/artifact/baseVersion/artifact-version[-classifier].ext``."""

    def fn(a: Artifact) -> str:
        path = separator.join(
            [a.group_id.replace(".", separator), a.artifact_id, a.base_version, ""]
        )
        path += f"{a.artifact_id}-{a.version}"
        if a.classifier:
            path += f"-{a.classifier}"
        return f"{path}.{a.extension}"

    return ArtifactNameMapper(fn, f"repository({separator})")


def repository_default() -> ArtifactNameMapper:
    return repository(os.sep)


def property_value(key: str, default: str) -> ArtifactNameMapper:
    return ArtifactNameMapper(
        lambda a: a.get_property(key, default) or "", f"P({key}, {default})"
    )


_KEYS: dict[str, Callable[[Artifact], str]] = {
    "GAKey": lambda a: f"{a.group_id}:{a.artifact_id}",
    "GAVKey": lambda a: f"{a.group_id}:{a.artifact_id}:{a.version}",
    "GAbVKey": lambda a: f"{a.group_id}:{a.artifact_id}:{a.base_version}",
    "GACEVKey": str,
}

_FIELDS: dict[str, Callable[[Artifact], str]] = {
    "G": lambda a: a.group_id,
    "A": lambda a: a.artifact_id,
    "V": lambda a: a.version,
    "bV": lambda a: a.base_version,
    "C": lambda a: a.classifier,
    "E": lambda a: a.extension,
}

# Layout segments, as rendered inside a file name
_SEGMENTS: dict[str, Callable[[Artifact], str]] = {
    "G": lambda a: f"{a.group_id}.",
    "A": lambda a: a.artifact_id,
    "C": lambda a: f"-{a.classifier}" if a.classifier else "",
    "V": lambda a: f"-{a.version}",
    "bV": lambda a: f"-{a.base_version}",
    "E": lambda a: f".{a.extension}",
}

_LAYOUTS = (
    "GACVE",
    "GACbVE",
    "GACE",
    "GAVE",
    "GAbVE",
    "GAE",
    "ACVE",
    "AVCE",
    "ACbVE",
    "AbVCE",
    "ACE",
    "AVE",
    "AbVE",
    "AE",
)

_SEGMENT_RE = re.compile(r"bV|[GACVE]")


def key(name: str) -> ArtifactNameMapper:
    return ArtifactNameMapper(_KEYS[name], f"{name}()")


def field(name: str) -> ArtifactNameMapper:
    return ArtifactNameMapper(_FIELDS[name], f"{name}()")


def layout(name: str) -> ArtifactNameMapper:
    """A file name layout such as ``ACVE`` (``artifact-classifier-1.0.jar``)."""
    if name not in _LAYOUTS:
        raise ValueError(f"unknown layout {name}")
    segments = [_SEGMENTS[s] for s in _SEGMENT_RE.findall(name)]
    return ArtifactNameMapper(
        lambda a: "".join(segment(a) for segment in segments), f"{name}()"
    )


def compose(*mappers: ArtifactNameMapper) -> ArtifactNameMapper:
    return ArtifactNameMapper.compose(mappers)


# =============================================================================
# Builder
# =============================================================================


class ArtifactNameMapperBuilder(SpecBuilder[ArtifactNameMapper]):
    """Compiles name mapper specs such as ``compose(G(), fixed(:), A())``."""

    domain = "artifact name mapper"
    produces = ArtifactNameMapper

    def process_op(self, node: Op) -> None:
        name = node.value
        match name:
            case "GAKey" | "GAVKey" | "GAbVKey" | "GACEVKey":
                self.params.append(key(name))
            case "G" | "A" | "V" | "bV" | "C" | "E":
                self.params.append(field(name))
            case "P":
                default = self.string_param()
                self.params.append(property_value(self.string_param(), default))
            case _ if name in _LAYOUTS:
                self.params.append(layout(name))
            case "empty":
                self.params.append(empty())
            case "fixed":
                self.params.append(self._checked(fixed, self.string_param()))
            case "optionalPrefix":
                mapper = self.typed_param(ArtifactNameMapper)
                self.params.append(self._checked(optional_prefix, self.string_param(), mapper))
            case "optionalSuffix":
                mapper = self.typed_param(ArtifactNameMapper)
                self.params.append(self._checked(optional_suffix, self.string_param(), mapper))
            case "repositoryDefault":
                self.params.append(repository_default())
            case "repository":
                self.params.append(repository(self.string_param()))
            case "compose":
                self.params.append(compose(*self.typed_params(ArtifactNameMapper)))
            case _:
                raise self.unknown_op(node)

    def _checked(self, factory: Callable[..., ArtifactNameMapper], *args: Any) -> ArtifactNameMapper:
        try:
            return factory(*args)
        except ValueError as e:
            raise self.error(str(e)) from None


def build_name_mapper(spec: str, properties: Mapping[str, Any] | None = None) -> ArtifactNameMapper:
    """Compile an artifact name mapper spec."""
    return ArtifactNameMapperBuilder.compile(spec, properties)
