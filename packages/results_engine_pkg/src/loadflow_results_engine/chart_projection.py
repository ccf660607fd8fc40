# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Scale scenario series into plot coordinates.

The x axis is the revision index and the y axis the absolute MW flow at the swing bus. All series of a chart, and
in grid mode all panels, share one domain so that they stay visually comparable. Only the detail view of a
single base series computes its own domain.
"""

from collections.abc import Iterable, Mapping, Sequence

import numpy as np
from beartype.typing import Literal, Optional, TypeAlias, Union
from pydantic import BaseModel, ConfigDict

from loadflow_results_engine.results_model import ScenarioResult
from loadflow_results_engine.scenario_grouping import base_series_key, is_capa_variant, revision_index

Number: TypeAlias = Union[int, float]

RenderMode: TypeAlias = Literal["combined", "grid"]
"""combined draws every series into one chart, grid draws one chart per base series"""

LINE_COLORS: tuple[str, ...] = (
    "#3b82f6",
    "#ef4444",
    "#10b981",
    "#f59e0b",
    "#8b5cf6",
    "#ec4899",
    "#06b6d4",
    "#f97316",
    "#6366f1",
    "#84cc16",
)

BASE_OPACITY = 0.9
CAPA_OPACITY = 0.5
Y_PADDING_FRACTION = 0.1
Y_TICK_FRACTIONS = (0.0, 0.25, 0.5, 0.75, 1.0)


class ChartDomain(BaseModel):
    """The data range of a chart, with the y range already padded"""

    model_config = ConfigDict(frozen=True)

    min_x: float
    max_x: float
    min_y: float
    max_y: float


class Viewport(BaseModel):
    """The drawing area in pixels. The plot area is inset by margin on every side."""

    model_config = ConfigDict(frozen=True)

    width: float = 800.0
    height: float = 300.0
    margin: float = 20.0


class SeriesStyle(BaseModel):
    """How a series is stroked"""

    model_config = ConfigDict(frozen=True)

    color: str
    dashed: bool
    opacity: float


class ChartPoint(BaseModel):
    """A single result projected into the viewport"""

    x: float
    y: float
    revision_index: int
    abs_mw_flow: float
    revision: Optional[str]
    """The revision label, for tooltips"""
    is_winner: bool
    filename: str


class ChartSeries(BaseModel):
    """One scenario series of a chart"""

    key: str
    base_key: str
    style: SeriesStyle
    points: list[ChartPoint]


class ChartPanel(BaseModel):
    """One chart with its own coordinate system"""

    title: str
    domain: ChartDomain
    viewport: Viewport
    series: list[ChartSeries]
    y_ticks: list[tuple[float, float]]
    """Horizontal grid lines as (y in pixels, value in MW)"""


def _points(groups: Mapping[str, Sequence[ScenarioResult]]) -> tuple[np.ndarray, np.ndarray]:
    results = [result for group in groups.values() for result in group]
    x = np.array([revision_index(result) for result in results], dtype=float)
    y = np.abs(np.array([result.mw_flow for result in results], dtype=float))
    return x, y


def compute_domain(groups: Mapping[str, Sequence[ScenarioResult]]) -> ChartDomain:
    """Compute the common domain of all points in all groups.

    The y range is padded by 10 % of its span on both ends. A zero span is replaced by 1, so a single point
    still gets a usable range around it. The x range is not padded.

    Parameters
    ----------
    groups : Mapping[str, Sequence[ScenarioResult]]
        The scenario series, usually the output of group_by_scenario

    Returns
    -------
    ChartDomain
        The domain spanning every point

    Raises
    ------
    ValueError
        If the groups contain no results at all
    """
    x, y = _points(groups)
    if x.size == 0:
        raise ValueError("Cannot compute a chart domain without any results")
    min_y, max_y = float(y.min()), float(y.max())
    pad = ((max_y - min_y) or 1.0) * Y_PADDING_FRACTION
    return ChartDomain(min_x=float(x.min()), max_x=float(x.max()), min_y=min_y - pad, max_y=max_y + pad)


def project(point: tuple[Number, Number], domain: ChartDomain, viewport: Viewport) -> tuple[float, float]:
    """Map a (revision index, absolute MW flow) pair into viewport coordinates.

    The y axis is inverted, the domain maximum lands on the top margin.

    Parameters
    ----------
    point : tuple[Number, Number]
        The revision index and the absolute MW flow
    domain : ChartDomain
        The domain of the chart
    viewport : Viewport
        The drawing area

    Returns
    -------
    tuple[float, float]
        The x and y position in pixels
    """
    range_x = (domain.max_x - domain.min_x) or 1.0
    range_y = (domain.max_y - domain.min_y) or 1.0
    inner_width = viewport.width - 2 * viewport.margin
    inner_height = viewport.height - 2 * viewport.margin
    x = (point[0] - domain.min_x) / range_x * inner_width + viewport.margin
    y = viewport.height - (point[1] - domain.min_y) / range_y * inner_height - viewport.margin
    return float(x), float(y)


def y_axis_ticks(domain: ChartDomain, viewport: Viewport) -> list[tuple[float, float]]:
    """Positions and values of the horizontal grid lines, top to bottom"""
    inner_height = viewport.height - 2 * viewport.margin
    return [
        (
            float(viewport.margin + inner_height * fraction),
            float(domain.max_y - (domain.max_y - domain.min_y) * fraction),
        )
        for fraction in Y_TICK_FRACTIONS
    ]


def assign_base_colors(keys: Iterable[str]) -> dict[str, str]:
    """Give every base series a color.

    The unique base keys are sorted and colored from LINE_COLORS in that order, cycling through the palette.
    The result only depends on the set of base keys, not on the order of the input.
    """
    base_keys = sorted({base_series_key(key) for key in keys})
    return {base_key: LINE_COLORS[i % len(LINE_COLORS)] for i, base_key in enumerate(base_keys)}


def assign_series_styles(keys: Iterable[str]) -> dict[str, SeriesStyle]:
    """Style every series: CAPA variants share the color of their base series but are dashed and fainter"""
    keys = list(keys)
    colors = assign_base_colors(keys)
    styles = {}
    for key in keys:
        capa = is_capa_variant(key)
        styles[key] = SeriesStyle(
            color=colors[base_series_key(key)],
            dashed=capa,
            opacity=CAPA_OPACITY if capa else BASE_OPACITY,
        )
    return styles


def _build_panel(
    title: str,
    groups: Mapping[str, Sequence[ScenarioResult]],
    styles: Mapping[str, SeriesStyle],
    domain: ChartDomain,
    viewport: Viewport,
) -> ChartPanel:
    series = []
    for key in sorted(groups):
        points = []
        for result in groups[key]:
            index = revision_index(result)
            abs_flow = abs(result.mw_flow)
            x, y = project((index, abs_flow), domain, viewport)
            points.append(
                ChartPoint(
                    x=x,
                    y=y,
                    revision_index=index,
                    abs_mw_flow=abs_flow,
                    revision=result.study_case.revision if result.study_case is not None else None,
                    is_winner=result.is_winner,
                    filename=result.filename,
                )
            )
        series.append(ChartSeries(key=key, base_key=base_series_key(key), style=styles[key], points=points))
    return ChartPanel(
        title=title,
        domain=domain,
        viewport=viewport,
        series=series,
        y_ticks=y_axis_ticks(domain, viewport),
    )


def build_chart_layout(
    groups: Mapping[str, Sequence[ScenarioResult]],
    mode: RenderMode = "combined",
    detail_base_key: Optional[str] = None,
    viewport: Optional[Viewport] = None,
) -> list[ChartPanel]:
    """Lay out the scenario series for rendering.

    Parameters
    ----------
    groups : Mapping[str, Sequence[ScenarioResult]]
        The scenario series, usually the output of group_by_scenario
    mode : RenderMode
        combined for a single chart, grid for one chart per base series. Both use the domain of all series.
    detail_base_key : Optional[str]
        If given, only the series of this base key are laid out in a single chart whose domain is computed
        over these series only. The mode is ignored in that case.
    viewport : Optional[Viewport]
        The drawing area of each chart, defaults to Viewport()

    Returns
    -------
    list[ChartPanel]
        The charts to draw, empty if there are no results

    Raises
    ------
    ValueError
        If detail_base_key does not match any series
    """
    viewport = viewport or Viewport()
    groups = {key: group for key, group in groups.items() if len(group) > 0}
    if not groups:
        return []
    styles = assign_series_styles(groups.keys())

    if detail_base_key is not None:
        selected = {key: group for key, group in groups.items() if base_series_key(key) == detail_base_key}
        if not selected:
            raise ValueError(f"No series with base key {detail_base_key}")
        return [_build_panel(detail_base_key, selected, styles, compute_domain(selected), viewport)]

    domain = compute_domain(groups)
    if mode == "combined":
        return [_build_panel("All scenarios", groups, styles, domain, viewport)]

    panels = []
    for base_key in sorted({base_series_key(key) for key in groups}):
        members = {key: group for key, group in groups.items() if base_series_key(key) == base_key}
        panels.append(_build_panel(base_key, members, styles, domain, viewport))
    return panels
