# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Exceptions raised by the results engine.

Discovery never raises when no valid artifact exists, it returns None instead. The exceptions here are for
named loads, transport failures and the bookkeeping of failed retention deletes.
"""

from beartype.typing import Optional


class ResultsEngineError(Exception):
    """Base class for all errors of the results engine"""


class ArtifactNotFound(ResultsEngineError):
    """The requested artifact does not exist in the storage"""


class StorageUnavailable(ResultsEngineError):
    """The storage could not be reached. Retrying is up to the caller."""


class ArtifactUnreadable(ResultsEngineError):
    """An artifact exists but does not parse into a structurally valid result container."""

    def __init__(self, message: str, artifact_path: Optional[str] = None) -> None:
        super().__init__(message)
        self.artifact_path = artifact_path
        """The storage path of the artifact, if known"""


class RetentionDeleteFailed(ResultsEngineError):
    """Deleting a single artifact during retention failed.

    These are collected in the retention report and logged as a warning, they are never raised out of
    enforce_retention.
    """

    def __init__(self, artifact_path: str, reason: str) -> None:
        super().__init__(f"Could not delete {artifact_path}: {reason}")
        self.artifact_path = artifact_path
        self.reason = reason
