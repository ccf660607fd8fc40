# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""The shape of the result artifacts written by the remote loadflow engine.

A run of the remote engine evaluates a set of study cases, each under a number of load revisions, and stores
everything as one JSON artifact (a ResultContainer). The same storage folder also holds configuration files,
diagrams and raw engine inputs with the same .json extension, so an artifact is only accepted as a result
container after a structural check, see is_structurally_valid.
"""

import json

from beartype.typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from loadflow_results_engine.errors import ArtifactUnreadable

LEGACY_STATUS = "loaded"
"""The status assigned to archives that were stored as a bare list of results without a wrapper"""


class TransformerResult(BaseModel):
    """The loadflow state of a single transformer in one scenario evaluation."""

    model_config = ConfigDict(populate_by_name=True)

    tap: int = Field(alias="Tap")
    """The tap position"""

    active_power_mw: float = Field(alias="LFMW")
    """Active power through the transformer in MW"""

    reactive_power_mvar: float = Field(alias="LFMvar")
    """Reactive power through the transformer in Mvar"""

    voltage_kv: float = Field(alias="kV")
    """Voltage at the transformer in kV"""


class StudyCase(BaseModel):
    """Identifies the scenario family a result belongs to."""

    id: str
    """The study case id, e.g. LF_198"""

    config: str
    """The network configuration, e.g. Normal or Normal_CAPA"""

    revision: Optional[str] = None
    """A free-text load revision label, e.g. LOAD_12. The ordering index is extracted from the digits."""

    @field_validator("revision", mode="before")
    @classmethod
    def _numeric_revision_as_label(cls, value: Any) -> Any:
        """Some engine versions write the revision as a bare number"""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class SwingBusInfo(BaseModel):
    """Where the engine found the swing bus"""

    script: str


class ScenarioResult(BaseModel):
    """One evaluation of one network configuration under one load condition.

    The validity and winner flags are produced by the remote engine and are never recomputed here.
    """

    filename: str
    """The storage relative name of the engine input file this result was extracted from"""

    is_valid: bool
    """Whether the engine considers the evaluation valid"""

    is_winner: bool
    """Whether this evaluation was selected as the best candidate of its study case"""

    mw_flow: float
    """Active power flow at the swing bus in MW"""

    mvar_flow: float
    """Reactive power flow at the swing bus in Mvar"""

    delta_target: float
    """Gap between the flow and the target in MW"""

    study_case: Optional[StudyCase] = None
    """The scenario identity. Results without a study case form a group of their own keyed by filename."""

    transformers: dict[str, TransformerResult] = Field(default_factory=dict)
    """Transformer states keyed by transformer name"""

    victory_reason: Optional[str] = None
    """Why the engine picked this result as the winner"""

    status_color: Optional[str] = None
    """Traffic light status computed by the engine (green, orange, red)"""

    swing_bus_found: Optional[SwingBusInfo] = None
    """The swing bus the engine identified, if any"""


class ResultContainer(BaseModel):
    """The top level shape of a stored result artifact"""

    status: str
    """Status string reported by the engine for the whole run"""

    results: list[ScenarioResult]
    """All scenario evaluations of the run, in engine order"""

    filename: Optional[str] = None
    """The artifact name the run was saved under"""

    folder: Optional[str] = None
    """The folder the run was saved to"""


def normalize_payload(payload: Any) -> Any:
    """Wrap the legacy archive layouts into the container layout.

    Older archives were stored either as a bare list of results or as an object with the results under a
    "data" key. Anything else is returned unchanged.

    Parameters
    ----------
    payload : Any
        The deserialized JSON document

    Returns
    -------
    Any
        The container-shaped payload, or the input if it is not one of the legacy layouts
    """
    if isinstance(payload, list):
        return {"status": LEGACY_STATUS, "results": payload}
    if isinstance(payload, dict) and "results" not in payload and isinstance(payload.get("data"), list):
        wrapped = {key: value for key, value in payload.items() if key != "data"}
        wrapped.setdefault("status", LEGACY_STATUS)
        wrapped["results"] = payload["data"]
        return wrapped
    return payload


def is_structurally_valid(payload: Any) -> bool:
    """Check whether a deserialized JSON document looks like a result container.

    The results must be a non-empty list and the first result must carry the mw_flow and transformers
    fields. This is what tells result artifacts apart from configuration and diagram files that share the
    .json extension.

    Parameters
    ----------
    payload : Any
        The deserialized JSON document, legacy layouts are accepted

    Returns
    -------
    bool
        True if the document has the shape of a result container
    """
    payload = normalize_payload(payload)
    if not isinstance(payload, dict):
        return False
    results = payload.get("results")
    if not isinstance(results, list) or len(results) == 0:
        return False
    first = results[0]
    return isinstance(first, dict) and "mw_flow" in first and "transformers" in first


def parse_result_container(raw: Union[bytes, str], artifact_path: Optional[str] = None) -> ResultContainer:
    """Parse the raw content of an artifact into a result container

    Parameters
    ----------
    raw : Union[bytes, str]
        The artifact content as read from the storage
    artifact_path : Optional[str]
        The path of the artifact, only used for error messages

    Returns
    -------
    ResultContainer
        The validated container

    Raises
    ------
    ArtifactUnreadable
        If the content is not JSON, fails the structural check or does not validate against the model
    """
    name = artifact_path or "<artifact>"
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ArtifactUnreadable(f"{name} is not valid JSON: {e}", artifact_path) from e
    except RecursionError as e:
        raise ArtifactUnreadable(f"{name} is nested too deeply to decode", artifact_path) from e

    if not is_structurally_valid(payload):
        raise ArtifactUnreadable(f"{name} is not a loadflow result container", artifact_path)

    try:
        return ResultContainer.model_validate(normalize_payload(payload))
    except ValidationError as e:
        raise ArtifactUnreadable(f"{name} does not match the result schema: {e}", artifact_path) from e
