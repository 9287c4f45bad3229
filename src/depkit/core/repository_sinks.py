"""
Sinks that hand artifacts to a package repository.

The repository itself is an external collaborator reached through the
``RepositoryHandle`` protocol; these sinks only buffer artifacts and pass
them on when closed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from depkit.core.ir.artifacts import Artifact
from depkit.core.sinks import ArtifactSink

logger = logging.getLogger(__name__)


@runtime_checkable
class RepositoryHandle(Protocol):
    """Opaque access to local and remote repositories."""

    def install(self, artifacts: Sequence[Artifact]) -> None:
        """Install into the local repository."""
        ...

    def deploy(self, repository_id: str, artifacts: Sequence[Artifact]) -> None:
        """Deploy to the remote repository with this id."""
        ...

    def purge(self, repository_ids: Sequence[str], artifacts: Sequence[Artifact]) -> None:
        """Remove the artifacts from the given repositories."""
        ...


class _BufferingSink(ArtifactSink):
    """Collects artifacts and flushes them once, on close."""

    def __init__(self, repository: RepositoryHandle) -> None:
        self.repository = repository
        self.artifacts: list[Artifact] = []
        self._lock = threading.Lock()
        self._closed = False

    def accept(self, item: Artifact) -> None:
        with self._lock:
            self.artifacts.append(item)

    def cleanup(self, exc: BaseException) -> None:
        logger.warning(f"Discarding {len(self.artifacts)} buffered artifacts: {exc}")
        with self._lock:
            self.artifacts.clear()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            artifacts = list(self.artifacts)
        if artifacts:
            self.flush(artifacts)

    def flush(self, artifacts: list[Artifact]) -> None:
        raise NotImplementedError


class InstallingSink(_BufferingSink):
    description = "install()"

    def flush(self, artifacts: list[Artifact]) -> None:
        logger.info(f"Installing {len(artifacts)} artifacts")
        self.repository.install(artifacts)


class DeployingSink(_BufferingSink):
    def __init__(self, repository: RepositoryHandle, repository_id: str) -> None:
        super().__init__(repository)
        self.repository_id = repository_id
        self.description = f"deploy({repository_id})"

    def flush(self, artifacts: list[Artifact]) -> None:
        logger.info(f"Deploying {len(artifacts)} artifacts to {self.repository_id}")
        self.repository.deploy(self.repository_id, artifacts)


class PurgingSink(_BufferingSink):
    def __init__(self, repository: RepositoryHandle, repository_ids: Sequence[str]) -> None:
        super().__init__(repository)
        self.repository_ids = list(repository_ids)
        self.description = "purge({})".format(", ".join(self.repository_ids))

    def flush(self, artifacts: list[Artifact]) -> None:
        logger.info(f"Purging {len(artifacts)} artifacts from {', '.join(self.repository_ids)}")
        self.repository.purge(self.repository_ids, artifacts)
