# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Holds the currently displayed result container of a view.

Discovery and named loads can take a while, and a newer request may be issued before an older one returns.
Every request gets an epoch from begin_request and its result is only accepted if no newer request was started
in the meantime.
"""

import logbook
from beartype.typing import Optional

from loadflow_results_engine.results_model import ResultContainer, ScenarioResult
from loadflow_results_engine.scenario_grouping import group_by_scenario

logger = logbook.Logger(__name__)


class ResultViewState:
    """The current result of a view and the epoch of the latest request"""

    def __init__(self) -> None:
        self.epoch = 0
        self.current: Optional[ResultContainer] = None

    def begin_request(self) -> int:
        """Start a new request, superseding all requests in flight, and return its epoch"""
        self.epoch += 1
        return self.epoch

    def accept(self, epoch: int, container: Optional[ResultContainer]) -> bool:
        """Store the outcome of a request unless a newer request was started.

        Parameters
        ----------
        epoch : int
            The epoch returned by begin_request for this request
        container : Optional[ResultContainer]
            The loaded container, None if discovery found nothing

        Returns
        -------
        bool
            Whether the container became the current one
        """
        if epoch != self.epoch:
            logger.debug(f"Dropping stale result of request {epoch}, latest is {self.epoch}")
            return False
        self.current = container
        return True

    def groups(self) -> dict[str, list[ScenarioResult]]:
        """The scenario series of the current container, empty if there is none"""
        if self.current is None:
            return {}
        return group_by_scenario(self.current.results)
