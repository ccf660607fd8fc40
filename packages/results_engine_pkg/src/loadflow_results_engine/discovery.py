# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Find and load result containers in the artifact store.

The storage folders of a context mix result artifacts with configuration files, diagrams and raw engine inputs,
all of them JSON. Nothing tags an artifact as a result, so discovery probes the candidates newest first and
returns the first one that parses into a structurally valid container.
"""

from datetime import datetime
from pathlib import PurePosixPath

import logbook
from beartype.typing import Optional
from pydantic import BaseModel

from loadflow_results_engine.config import EngineSettings
from loadflow_results_engine.errors import ArtifactNotFound, ArtifactUnreadable
from loadflow_results_engine.results_model import ResultContainer, parse_result_container
from loadflow_results_engine.run_naming import TIMESTAMPED_RUN, strip_run_timestamp
from loadflow_results_engine.storage import ArtifactDescriptor, StorageBackend

logger = logbook.Logger(__name__)


class RunHistoryEntry(BaseModel):
    """A saved run as shown in the results archive"""

    name: str
    """The artifact filename"""

    display_name: str
    """The filename without timestamp and extension"""

    path: str
    """The artifact path relative to the context"""

    uploaded_at: datetime
    """When the run was saved"""


def is_probe_candidate(artifact: ArtifactDescriptor, config_artifact_name: str) -> bool:
    """Whether an artifact could be a result container: a .json file that is not the configuration artifact"""
    filename = artifact.filename
    return filename.endswith(".json") and filename.lower() != config_artifact_name.lower()


def order_candidates(artifacts: list[ArtifactDescriptor], config_artifact_name: str) -> list[ArtifactDescriptor]:
    """Filter the probe candidates and sort them newest first.

    Artifacts with the same upload time are ordered by path, descending, so the probe order does not depend on
    the order of the storage listing.
    """
    candidates = [artifact for artifact in artifacts if is_probe_candidate(artifact, config_artifact_name)]
    return sorted(candidates, key=lambda artifact: (artifact.uploaded_at, artifact.path), reverse=True)


def _with_origin(container: ResultContainer, artifact_path: str) -> ResultContainer:
    """Fill in filename and folder from the artifact path if the engine did not write them"""
    path = PurePosixPath(artifact_path)
    update = {}
    if container.filename is None:
        update["filename"] = path.name
    if container.folder is None and path.parent.as_posix() != ".":
        update["folder"] = path.parent.as_posix()
    if not update:
        return container
    return container.model_copy(update=update)


def discover_latest(
    storage: StorageBackend, context_id: str, settings: Optional[EngineSettings] = None
) -> Optional[ResultContainer]:
    """Find the most recent valid result container of a context.

    Candidates are read one at a time, newest first. The first one that validates is returned and no older
    candidate is read. Candidates that are missing or fail to parse are logged and skipped.

    Parameters
    ----------
    storage : StorageBackend
        The artifact store
    context_id : str
        The context (project) to search
    settings : Optional[EngineSettings]
        Naming conventions and the probe limit, defaults to EngineSettings()

    Returns
    -------
    Optional[ResultContainer]
        The newest valid container, or None if no candidate validates. None is a normal outcome, e.g. for a
        context without any runs yet.

    Raises
    ------
    StorageUnavailable
        If the storage could not be reached
    """
    settings = settings or EngineSettings()
    candidates = order_candidates(storage.list(context_id), settings.config_artifact_name)
    logger.debug(f"Probing {len(candidates)} candidates in {context_id}")

    for n_probed, candidate in enumerate(candidates):
        if settings.max_probes is not None and n_probed >= settings.max_probes:
            logger.warning(
                f"Stopped discovery in {context_id} after {n_probed} candidates, "
                f"{len(candidates) - n_probed} were not probed"
            )
            break
        try:
            container = parse_result_container(storage.read(context_id, candidate.path), candidate.path)
        except (ArtifactNotFound, ArtifactUnreadable) as e:
            logger.warning(f"Skipping {candidate.path}: {e}")
            continue
        logger.info(f"Latest result of {context_id} is {candidate.path}")
        return _with_origin(container, candidate.path)

    logger.info(f"No result artifact found in {context_id}")
    return None


def resolve_artifact_path(name: str, settings: EngineSettings) -> str:
    """Resolve a run name to its artifact path.

    The .json extension is appended if missing. Names without a folder are looked up in the results folder.
    """
    if not name.endswith(".json"):
        name = f"{name}.json"
    if "/" in name or not settings.results_folder:
        return name
    return f"{settings.results_folder}/{name}"


def load_named(
    storage: StorageBackend, context_id: str, name: str, settings: Optional[EngineSettings] = None
) -> ResultContainer:
    """Load a specific result artifact, without falling back to any other artifact.

    Parameters
    ----------
    storage : StorageBackend
        The artifact store
    context_id : str
        The context (project) the artifact belongs to
    name : str
        The artifact name or path, with or without .json
    settings : Optional[EngineSettings]
        Naming conventions, defaults to EngineSettings()

    Returns
    -------
    ResultContainer
        The validated container

    Raises
    ------
    ArtifactUnreadable
        If the artifact does not parse or is not a result container
    ArtifactNotFound
        If the artifact does not exist
    StorageUnavailable
        If the storage could not be reached
    """
    settings = settings or EngineSettings()
    artifact_path = resolve_artifact_path(name, settings)
    container = parse_result_container(storage.read(context_id, artifact_path), artifact_path)
    logger.info(f"Loaded {artifact_path} with {len(container.results)} results")
    return _with_origin(container, artifact_path)


def list_run_history(
    storage: StorageBackend, context_id: str, settings: Optional[EngineSettings] = None
) -> list[RunHistoryEntry]:
    """List the saved runs of a context for the results archive.

    A saved run is a .json artifact in the results folder or one following the timestamped naming scheme.
    The list is sorted by name, descending, which puts the newest run of each family first.

    Parameters
    ----------
    storage : StorageBackend
        The artifact store
    context_id : str
        The context (project) to list
    settings : Optional[EngineSettings]
        Naming conventions, defaults to EngineSettings()

    Returns
    -------
    list[RunHistoryEntry]
        The archived runs
    """
    settings = settings or EngineSettings()
    entries = [
        RunHistoryEntry(
            name=artifact.filename,
            display_name=strip_run_timestamp(artifact.filename),
            path=artifact.path,
            uploaded_at=artifact.uploaded_at,
        )
        for artifact in storage.list(context_id)
        if artifact.filename.endswith(".json")
        and (settings.history_marker in artifact.path or TIMESTAMPED_RUN.search(artifact.filename))
    ]
    return sorted(entries, key=lambda entry: entry.name, reverse=True)
