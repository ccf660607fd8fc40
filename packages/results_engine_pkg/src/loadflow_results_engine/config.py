# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Settings shared by discovery, loading, retention and charting"""

from beartype.typing import Optional
from pydantic import BaseModel, Field

from loadflow_results_engine.chart_projection import Viewport

DEFAULT_MAX_HISTORY = 5
"""How many runs of a run family are kept by default"""


class EngineSettings(BaseModel):
    """Holds the naming conventions of the artifact store and the retention defaults."""

    results_folder: str = "loadflow_results"
    """The folder of a context where runs are saved. Named loads without a folder are resolved in here."""

    config_artifact_name: str = "config.json"
    """The configuration artifact, never probed during discovery (matched case-insensitively)"""

    max_history: int = Field(default=DEFAULT_MAX_HISTORY, ge=0)
    """How many runs of a run family to keep"""

    max_probes: Optional[int] = Field(default=None, ge=1)
    """Stop discovery after reading this many candidates. None probes every candidate."""

    history_marker: str = "loadflow_results"
    """Artifacts whose path contains this marker are listed in the run history"""

    viewport: Viewport = Viewport()
    """The drawing area of each chart"""
