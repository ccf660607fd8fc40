# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Group flat result lists into scenario series and order them by load revision.

A scenario series is identified by the study case id and configuration, each series then contains one result per
load revision. The revision labels are free text written by the engine or the user, the ordering index is the
first number found in them.
"""

import re
from collections.abc import Iterable

from beartype.typing import Optional

from loadflow_results_engine.results_model import ScenarioResult

CAPA_SUFFIX = "_CAPA"
"""Marks a configuration computed with capacity constraints, plotted next to its base series"""

_DIGITS = re.compile(r"[0-9]+")
_CAPA_PATTERN = re.compile(re.escape(CAPA_SUFFIX) + r"\s*$", re.IGNORECASE)
_SEARCH_SLASH = re.compile(r"\s*/\s*")


def extract_revision_index(label: Optional[str]) -> int:
    """Extract the ordering index from a revision label.

    The first run of decimal digits is parsed as integer, so LOAD_12b gives 12. Labels without any digits and
    missing labels give 0. This never raises.

    Parameters
    ----------
    label : Optional[str]
        The revision label

    Returns
    -------
    int
        The revision index
    """
    if not label:
        return 0
    match = _DIGITS.search(label)
    if match is None:
        return 0
    return int(match.group(0))


def revision_index(result: ScenarioResult) -> int:
    """The revision index of a result, 0 if it has no study case"""
    if result.study_case is None:
        return 0
    return extract_revision_index(result.study_case.revision)


def scenario_group_key(result: ScenarioResult) -> str:
    """The key of the scenario series a result belongs to.

    This is "<id>/<config>" of the study case, or the filename for results without a study case. Equal keys
    are expected, they mean the same scenario at different revisions.
    """
    if result.study_case is None:
        return result.filename
    return f"{result.study_case.id}/{result.study_case.config}"


def group_by_scenario(results: Iterable[ScenarioResult]) -> dict[str, list[ScenarioResult]]:
    """Partition results into scenario series.

    Every result ends up in exactly one group. Groups are keyed by scenario_group_key in order of first
    appearance and each group is sorted ascending by revision index. The sort is stable, so results with the
    same index keep their input order.

    Parameters
    ----------
    results : Iterable[ScenarioResult]
        The flat list of results, usually ResultContainer.results

    Returns
    -------
    dict[str, list[ScenarioResult]]
        The series, keyed by group key
    """
    groups: dict[str, list[ScenarioResult]] = {}
    for result in results:
        groups.setdefault(scenario_group_key(result), []).append(result)
    for key, group in groups.items():
        groups[key] = sorted(group, key=revision_index)
    return groups


def flat_sort_key(result: ScenarioResult) -> tuple[str, int, str]:
    """Sort key for the flat result table: group key, then revision index, then filename"""
    return (scenario_group_key(result), revision_index(result), result.filename)


def sort_results_flat(results: Iterable[ScenarioResult]) -> list[ScenarioResult]:
    """Sort results for a flat table so that identical data always renders in the same order

    Parameters
    ----------
    results : Iterable[ScenarioResult]
        The results to sort

    Returns
    -------
    list[ScenarioResult]
        The results ordered by group key, revision index and filename
    """
    return sorted(results, key=flat_sort_key)


def base_series_key(key: str) -> str:
    """Strip the capacity variant marker from a group key.

    LF_1/Normal_CAPA and LF_1/Normal both map to LF_1/Normal. The marker is matched case-insensitively and
    surrounding whitespace is removed.
    """
    return _CAPA_PATTERN.sub("", key.strip()).strip()


def is_capa_variant(key: str) -> bool:
    """Whether a group key carries the capacity variant marker"""
    return _CAPA_PATTERN.search(key.strip()) is not None


def filter_results(
    results: Iterable[ScenarioResult],
    search: str = "",
    only_winners: bool = False,
    only_valid: bool = False,
) -> list[ScenarioResult]:
    """Filter results the way the results table does.

    The search text is matched case-insensitively against the study case id, the configuration (or the
    filename for results without a study case), the revision and the filename. Spaces around slashes are
    ignored so that "LF_198 / Normal" finds the series LF_198/Normal.

    Parameters
    ----------
    results : Iterable[ScenarioResult]
        The results to filter
    search : str
        Free text search, empty to disable
    only_winners : bool
        Only keep results flagged as winner
    only_valid : bool
        Only keep results flagged as valid

    Returns
    -------
    list[ScenarioResult]
        The matching results in input order
    """
    needle = _SEARCH_SLASH.sub("/", search.lower())
    kept = []
    for result in results:
        if only_winners and not result.is_winner:
            continue
        if only_valid and not result.is_valid:
            continue
        if needle and not _matches_search(result, needle):
            continue
        kept.append(result)
    return kept


def _matches_search(result: ScenarioResult, needle: str) -> bool:
    study_case = result.study_case
    case_id = study_case.id if study_case is not None else ""
    config = study_case.config if study_case is not None else result.filename
    revision = study_case.revision if study_case is not None else ""
    haystacks = (case_id, config, revision, result.filename, f"{case_id}/{config}")
    return any(needle in haystack.lower() for haystack in haystacks)
