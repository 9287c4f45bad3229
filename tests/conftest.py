"""Shared pytest fixtures for depkit tests."""

from pathlib import Path

import pytest

from depkit.core.ir import Artifact
from depkit.core.versions import Version, parse_version

VERSION_LINE = [
    "2.0.0",
    "3.0.1",
    "3.0.2-alpha",
    "3.1.0M1",
    "3.1.0",
    "3.1.1M1",
    "3.100.0",
    "3.101.0RC",
    "3.200.0-SNAPSHOT",
    "4.0.0RC",
    "4.0.0",
    "400.0.0",
    "401.0.0RC",
    "410.0.0-SNAPSHOT",
]


@pytest.fixture
def artifact() -> Artifact:
    """A plain release artifact g:a:1.0."""
    return Artifact.parse("g:a:1.0")


@pytest.fixture
def snapshot_artifact() -> Artifact:
    """A timestamped snapshot with a classifier."""
    return Artifact.parse("g:a:jar:classifier:1.0-20240322.113300-2")


@pytest.fixture
def versions() -> list[Version]:
    """An ascending version line mixing releases, previews and snapshots."""
    return [parse_version(v) for v in VERSION_LINE]


@pytest.fixture
def artifact_file(tmp_path: Path):
    """Factory writing a backing file of a given size and returning the artifact."""

    def make(coords: str, size: int = 10) -> Artifact:
        path = tmp_path / "files" / coords.replace(":", "_")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        return Artifact.parse(coords, file=path)

    return make
