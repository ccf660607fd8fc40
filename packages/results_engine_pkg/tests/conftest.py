# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

import matplotlib
import pytest

matplotlib.use("Agg")

from loadflow_results_engine.results_model import ResultContainer  # noqa: E402
from tests.fake_storage import FakeStorage  # noqa: E402
from tests.result_payloads import make_container_payload, make_result  # noqa: E402


@pytest.fixture
def sweep_container() -> ResultContainer:
    """Two study cases, the first with a CAPA variant, revisions out of order, plus one result without study case"""
    results = [
        make_result("a.dgs", "LF_1", "Normal", "LOAD_10", mw_flow=-120.0),
        make_result("b.dgs", "LF_1", "Normal", "LOAD_2", mw_flow=-80.0, is_winner=True),
        make_result("c.dgs", "LF_1", "Normal_CAPA", "LOAD_2", mw_flow=-75.0),
        make_result("d.dgs", "LF_1", "Normal_CAPA", "LOAD_10", mw_flow=-110.0),
        make_result("e.dgs", "LF_2", "Degraded", "Normal", mw_flow=40.0, is_valid=False),
        make_result("f.dgs", None, mw_flow=15.0),
    ]
    return ResultContainer.model_validate(make_container_payload(*results))


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()
