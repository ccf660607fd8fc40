# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Bounded retention of saved runs.

Every run of a project is saved under a new timestamped name, so without cleanup the results folder grows without
limit. After a run was saved, enforce_retention keeps the newest runs of its run family and deletes the rest.

There is no lock around this. Two clients saving runs of the same family at the same time can leave more than
max_history runs behind until the next retention pass.
"""

from dataclasses import dataclass, field

import logbook
from beartype.typing import Optional

from loadflow_results_engine.config import DEFAULT_MAX_HISTORY
from loadflow_results_engine.errors import ResultsEngineError, RetentionDeleteFailed
from loadflow_results_engine.storage import ArtifactDescriptor, StorageBackend

logger = logbook.Logger(__name__)


@dataclass
class RetentionReport:
    """What a retention pass did"""

    kept: list[ArtifactDescriptor] = field(default_factory=list)
    """The run family members that were kept, newest first"""

    deleted: list[ArtifactDescriptor] = field(default_factory=list)
    """The members that were deleted"""

    failures: list[RetentionDeleteFailed] = field(default_factory=list)
    """The members that could not be deleted"""


def is_run_family_member(artifact: ArtifactDescriptor, base_name: str) -> bool:
    """Whether an artifact belongs to the run family of base_name.

    Note that this is a plain prefix match, the family "run" also contains the runs of "run_v2".
    """
    return artifact.filename.startswith(f"{base_name}_") and artifact.filename.endswith(".json")


def run_family(artifacts: list[ArtifactDescriptor], base_name: str) -> list[ArtifactDescriptor]:
    """The members of a run family, newest first"""
    members = [artifact for artifact in artifacts if is_run_family_member(artifact, base_name)]
    return sorted(members, key=lambda artifact: (artifact.uploaded_at, artifact.path), reverse=True)


def enforce_retention(
    storage: StorageBackend,
    context_id: str,
    base_name: str,
    max_history: int = DEFAULT_MAX_HISTORY,
    path_prefix: Optional[str] = None,
) -> RetentionReport:
    """Delete all but the newest max_history runs of a run family.

    Deletes are issued one at a time. A failing delete is recorded in the report and the pass continues, the
    failures are logged as a single warning.

    Parameters
    ----------
    storage : StorageBackend
        The artifact store
    context_id : str
        The context (project) the runs belong to
    base_name : str
        The base name of the run family
    max_history : int
        How many of the newest runs to keep
    path_prefix : Optional[str]
        Only consider artifacts below this folder of the context

    Returns
    -------
    RetentionReport
        The kept, deleted and failed members

    Raises
    ------
    ValueError
        If max_history is negative
    StorageUnavailable
        If the listing failed. Failures of single deletes are not raised.
    """
    if max_history < 0:
        raise ValueError(f"max_history must not be negative, got {max_history}")

    members = run_family(storage.list(context_id, path_prefix), base_name)
    report = RetentionReport(kept=members[:max_history])

    for artifact in members[max_history:]:
        try:
            storage.delete(context_id, artifact.path)
        except (ResultsEngineError, OSError) as e:
            report.failures.append(RetentionDeleteFailed(artifact.path, str(e)))
            continue
        report.deleted.append(artifact)

    if report.deleted:
        logger.info(f"Retention of {base_name} in {context_id} deleted {len(report.deleted)} runs")
    if report.failures:
        logger.warning(
            f"Retention of {base_name} in {context_id} could not delete {len(report.failures)} runs: "
            + ", ".join(failure.artifact_path for failure in report.failures)
        )
    return report
