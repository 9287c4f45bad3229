"""
Artifact and dependency shapes consumed by compiled pipeline values.

Coordinates follow the resolver convention:

    groupId:artifactId[:extension[:classifier]]:version

and print as ``groupId:artifactId:extension[:classifier]:version``.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

SNAPSHOT = "SNAPSHOT"

# 1.0-20240322.090900-12
_TIMESTAMP_RE = re.compile(r"^(.*)-(\d{8}\.\d{6})-(\d+)$")


def is_snapshot_version(version: str) -> bool:
    """True for ``-SNAPSHOT`` versions and timestamped snapshot versions."""
    return version.endswith(SNAPSHOT) or _TIMESTAMP_RE.match(version) is not None


def to_base_version(version: str) -> str:
    """Collapse a timestamped snapshot version to its ``-SNAPSHOT`` base."""
    if m := _TIMESTAMP_RE.match(version):
        return f"{m.group(1)}-{SNAPSHOT}"
    return version


class Artifact(BaseModel):
    """A uniquely identified package unit, optionally backed by a file."""

    group_id: str = Field(description="Group id, e.g. org.example")
    artifact_id: str = Field(description="Artifact id")
    version: str = Field(description="Version string")
    classifier: str = Field(default="", description="Classifier, blank if none")
    extension: str = Field(default="jar", description="File extension")
    file: Path | None = Field(default=None, description="Backing file, if resolved")
    properties: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(cls, coords: str, **kwargs: Any) -> Artifact:
        """Parse ``g:a[:ext[:classifier]]:v``."""
        parts = coords.strip().split(":")
        if len(parts) == 3:
            g, a, v = parts
            ext, classifier = "jar", ""
        elif len(parts) == 4:
            g, a, ext, v = parts
            classifier = ""
        elif len(parts) == 5:
            g, a, ext, classifier, v = parts
        else:
            raise ValueError(
                f"Bad artifact coordinates {coords!r}, expected "
                "<groupId>:<artifactId>[:<extension>[:<classifier>]]:<version>"
            )
        if not g or not a or not v or not ext:
            raise ValueError(f"Bad artifact coordinates {coords!r}, empty segment")
        return cls(
            group_id=g,
            artifact_id=a,
            extension=ext,
            classifier=classifier,
            version=v,
            **kwargs,
        )

    @property
    def is_snapshot(self) -> bool:
        return is_snapshot_version(self.version)

    @property
    def base_version(self) -> str:
        return to_base_version(self.version)

    def get_property(self, key: str, default: str | None = None) -> str | None:
        return self.properties.get(key, default)

    def with_changes(self, **changes: Any) -> Artifact:
        """Return a copy with the given fields replaced."""
        return self.model_copy(update=changes)

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.extension]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)


class Dependency(BaseModel):
    """An artifact together with its scope, optionality and exclusions."""

    artifact: Artifact
    scope: str = Field(default="compile", description="Dependency scope")
    optional: bool = Field(default=False)
    exclusions: tuple[str, ...] = Field(default=(), description="Excluded g:a patterns")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(cls, coords: str, scope: str = "compile", optional: bool = False) -> Dependency:
        return cls(artifact=Artifact.parse(coords), scope=scope, optional=optional)

    def with_changes(self, **changes: Any) -> Dependency:
        return self.model_copy(update=changes)

    def __str__(self) -> str:
        text = f"{self.artifact} ({self.scope}"
        if self.optional:
            text += ", optional"
        return text + ")"
