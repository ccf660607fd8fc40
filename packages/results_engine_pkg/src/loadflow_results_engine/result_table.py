# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Tabular views of result containers for the results table and exports."""

from collections.abc import Iterable

import pandas as pd

from loadflow_results_engine.results_model import ScenarioResult
from loadflow_results_engine.scenario_grouping import revision_index, scenario_group_key, sort_results_flat

RESULT_COLUMNS = [
    "scenario",
    "study_case_id",
    "config",
    "revision",
    "revision_index",
    "mw_flow",
    "mvar_flow",
    "delta_target",
    "is_valid",
    "is_winner",
    "filename",
]

TRANSFORMER_COLUMNS = ["transformer", "tap", "active_power_mw", "reactive_power_mvar", "voltage_kv"]


def results_to_frame(results: Iterable[ScenarioResult]) -> pd.DataFrame:
    """Convert results to a DataFrame, one row per result in the flat table order

    Parameters
    ----------
    results : Iterable[ScenarioResult]
        The results to tabulate

    Returns
    -------
    pd.DataFrame
        A frame with the columns in RESULT_COLUMNS. Results without a study case have empty id, config and
        revision cells.
    """
    rows = []
    for result in sort_results_flat(results):
        study_case = result.study_case
        rows.append(
            {
                "scenario": scenario_group_key(result),
                "study_case_id": study_case.id if study_case is not None else None,
                "config": study_case.config if study_case is not None else None,
                "revision": study_case.revision if study_case is not None else None,
                "revision_index": revision_index(result),
                "mw_flow": result.mw_flow,
                "mvar_flow": result.mvar_flow,
                "delta_target": result.delta_target,
                "is_valid": result.is_valid,
                "is_winner": result.is_winner,
                "filename": result.filename,
            }
        )
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def transformers_to_frame(result: ScenarioResult) -> pd.DataFrame:
    """Convert the transformer states of a result to a DataFrame, sorted by transformer name"""
    rows = [
        {
            "transformer": name,
            "tap": transformer.tap,
            "active_power_mw": transformer.active_power_mw,
            "reactive_power_mvar": transformer.reactive_power_mvar,
            "voltage_kv": transformer.voltage_kv,
        }
        for name, transformer in sorted(result.transformers.items())
    ]
    return pd.DataFrame(rows, columns=TRANSFORMER_COLUMNS)
