# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""The storage collaborator used for listing, reading and deleting artifacts.

The engine only talks to the StorageBackend interface. FsspecStorage implements it on top of any fsspec
filesystem, so the artifacts can live on local disk, in an object store bucket or behind an HTTP endpoint. Each
context (usually a project) is a directory below the root of the filesystem.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import PurePosixPath

import logbook
from beartype.typing import Any, Optional
from fsspec import AbstractFileSystem
from pydantic import BaseModel, field_validator

from loadflow_results_engine.errors import ArtifactNotFound, StorageUnavailable

logger = logbook.Logger(__name__)


class ArtifactDescriptor(BaseModel):
    """A stored file as reported by the storage listing"""

    path: str
    """The path of the artifact relative to the context directory"""

    filename: str
    """The file name without folders"""

    uploaded_at: datetime
    """When the artifact was created in the storage, always timezone aware"""

    @field_validator("uploaded_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class StorageBackend(ABC):
    """Abstract access to the artifact store.

    Implementations do not retry, retry policies belong to the transport.
    """

    @abstractmethod
    def list(self, context_id: str, path_prefix: Optional[str] = None) -> list[ArtifactDescriptor]:
        """List all artifacts of a context, recursively

        Parameters
        ----------
        context_id : str
            The context (project) to list
        path_prefix : Optional[str]
            Only list artifacts below this folder of the context

        Returns
        -------
        list[ArtifactDescriptor]
            The artifacts, in no particular order. Empty if there are none.

        Raises
        ------
        StorageUnavailable
            If the storage could not be reached
        """

    @abstractmethod
    def read(self, context_id: str, artifact_path: str) -> bytes:
        """Read the content of an artifact

        Raises
        ------
        ArtifactNotFound
            If the artifact does not exist
        StorageUnavailable
            If the storage could not be reached
        """

    @abstractmethod
    def delete(self, context_id: str, artifact_path: str) -> None:
        """Delete an artifact. Deleting a missing artifact is not an error.

        Raises
        ------
        StorageUnavailable
            If the storage could not be reached
        """


def _as_utc_datetime(value: Any) -> datetime:
    """Convert the timestamps returned by the different fsspec implementations to an aware datetime"""
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(float(value or 0), tz=timezone.utc)


class FsspecStorage(StorageBackend):
    """Artifact storage on top of an fsspec filesystem.

    The artifacts of a context live in the directory <root>/<context_id>.
    """

    def __init__(self, filesystem: AbstractFileSystem, root: str = "") -> None:
        self.filesystem = filesystem
        self.root = root

    def _context_dir(self, context_id: str) -> str:
        if self.root:
            return (PurePosixPath(self.root) / context_id).as_posix()
        return context_id

    def _full_path(self, context_id: str, artifact_path: str) -> str:
        return (PurePosixPath(self._context_dir(context_id)) / artifact_path).as_posix()

    def _uploaded_at(self, path: str, info: dict) -> datetime:
        for getter in (self.filesystem.created, self.filesystem.modified):
            try:
                return _as_utc_datetime(getter(path))
            except NotImplementedError:
                continue
        return _as_utc_datetime(info.get("created") or info.get("mtime"))

    def list(self, context_id: str, path_prefix: Optional[str] = None) -> list[ArtifactDescriptor]:
        """List all files below the context directory, see StorageBackend.list"""
        context_dir = self._context_dir(context_id)
        search_dir = self._full_path(context_id, path_prefix) if path_prefix else context_dir
        try:
            if not self.filesystem.exists(search_dir):
                return []
            found = self.filesystem.find(search_dir, detail=True)
            context_prefix = context_dir.strip("/")
            artifacts = []
            for path, info in found.items():
                if info.get("type", "file") != "file":
                    continue
                relative = path.strip("/")
                if relative.startswith(context_prefix + "/"):
                    relative = relative[len(context_prefix) + 1 :]
                artifacts.append(
                    ArtifactDescriptor(
                        path=relative,
                        filename=PurePosixPath(relative).name,
                        uploaded_at=self._uploaded_at(path, info),
                    )
                )
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageUnavailable(f"Could not list {search_dir}: {e}") from e
        return artifacts

    def read(self, context_id: str, artifact_path: str) -> bytes:
        """Read an artifact, see StorageBackend.read"""
        full_path = self._full_path(context_id, artifact_path)
        try:
            with self.filesystem.open(full_path, "rb") as f:
                return f.read()
        except (FileNotFoundError, IsADirectoryError) as e:
            raise ArtifactNotFound(f"{artifact_path} does not exist in {context_id}") from e
        except OSError as e:
            raise StorageUnavailable(f"Could not read {full_path}: {e}") from e

    def delete(self, context_id: str, artifact_path: str) -> None:
        """Delete an artifact, see StorageBackend.delete"""
        full_path = self._full_path(context_id, artifact_path)
        try:
            self.filesystem.rm_file(full_path)
        except FileNotFoundError:
            logger.debug(f"{full_path} was already deleted")
        except OSError as e:
            raise StorageUnavailable(f"Could not delete {full_path}: {e}") from e
