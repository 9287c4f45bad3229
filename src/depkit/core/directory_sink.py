"""
Sinks that write artifact files into a local directory.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path

from depkit.core.errors import SinkError
from depkit.core.ir.artifacts import Artifact
from depkit.core.matchers import ArtifactMatcher, snapshot, unique
from depkit.core.name_mappers import ArtifactNameMapper, repository_default
from depkit.core.sinks import ArtifactSink

logger = logging.getLogger(__name__)


class DirectorySink(ArtifactSink):
    """
    Writes accepted artifacts under ``directory`` at the path computed by a
    name mapper.

    Artifacts rejected by ``matcher`` are skipped. Artifacts rejected by
    ``required`` are a SinkError.

    Guards:
        - a target outside the directory is a SinkError ("Path escape prevented")
        - writing a target twice, or over a file already on disk, is a
          SinkError ("Overwrite prevented")

    The directory is created on the first written artifact. On ``cleanup``
    the written files are removed, and the directory too when this sink
    created it.
    """

    def __init__(
        self,
        directory: Path,
        name_mapper: Callable[[Artifact], str],
        matcher: ArtifactMatcher,
        required: ArtifactMatcher | None = None,
        dry_run: bool = False,
        description: str = "directory()",
    ) -> None:
        self.directory = Path(os.path.normpath(directory.absolute()))
        self.name_mapper = name_mapper
        self.matcher = matcher
        self.required = required
        self.dry_run = dry_run
        self.description = description
        self.directory_created = False
        self.written: list[Path] = []
        self._targets: set[Path] = set()

    def _ensure_directory(self) -> None:
        if self.directory.is_dir():
            return
        if self.directory.exists():
            raise SinkError(f"{self.directory} exists and is not a directory")
        self.directory.mkdir(parents=True)
        self.directory_created = True

    def accept(self, item: Artifact) -> None:
        if self.required is not None and not self.required.test(item):
            raise SinkError(f"Artifact {item} not accepted by {self.required.description}")
        if not self.matcher.test(item):
            return

        name = self.name_mapper(item)
        target = Path(os.path.normpath(self.directory / name))
        if not target.is_relative_to(self.directory):
            raise SinkError(f"Path escape prevented for {item} -> {name}; check mappings")
        if target in self._targets or target.exists():
            raise SinkError(f"Overwrite prevented for {item} -> {name}; check mappings")
        if item.file is None:
            raise SinkError(f"Artifact {item} has no backing file")

        logger.debug(f"Accepting artifact {item} -> {target}")
        self._targets.add(target)
        if self.dry_run:
            self.written.append(target)
            return
        self._ensure_directory()
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(item.file, target)
        self.written.append(target)

    def cleanup(self, exc: BaseException) -> None:
        if self.dry_run:
            return
        logger.warning(f"Rolling back {len(self.written)} files in {self.directory}: {exc}")
        for path in self.written:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove {path}: {e}")
        if self.directory_created:
            shutil.rmtree(self.directory, ignore_errors=True)


def flat(directory: Path, name_mapper: ArtifactNameMapper, dry_run: bool = False) -> DirectorySink:
    """One directory, file names from ``name_mapper``, first occurrence wins."""
    return DirectorySink(
        directory,
        name_mapper,
        unique(),
        dry_run=dry_run,
        description=f"flat({directory}, {name_mapper.description})",
    )


def repository(directory: Path, dry_run: bool = False) -> DirectorySink:
    """Repository layout; refuses snapshots and skips duplicates."""
    return DirectorySink(
        directory,
        repository_default(),
        unique(),
        required=ArtifactMatcher.negate(snapshot()),
        dry_run=dry_run,
        description=f"repository({directory})",
    )
