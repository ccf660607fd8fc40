# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Draw laid out chart panels with matplotlib."""

import math
from pathlib import Path

import matplotlib.pyplot as plt
from beartype.typing import Union
from fsspec import AbstractFileSystem

from loadflow_results_engine.chart_projection import ChartPanel

WINNER_COLOR = "#22c55e"
GRID_COLOR = "#e2e8f0"
MAX_GRID_COLUMNS = 3


def plot_chart_panels(panels: list[ChartPanel], dpi: int = 100) -> plt.Figure:
    """Draw chart panels into one figure, one subplot per panel.

    The panels are already projected into pixel space, so every axis spans its viewport with the y axis
    pointing down. Winners are drawn as filled markers, CAPA variants dashed.

    Parameters
    ----------
    panels : list[ChartPanel]
        The panels from build_chart_layout
    dpi : int
        The resolution, the figure size follows from the viewport size

    Returns
    -------
    plt.Figure
        The figure
    """
    if len(panels) == 0:
        raise ValueError("Nothing to plot")
    n_cols = min(len(panels), MAX_GRID_COLUMNS)
    n_rows = math.ceil(len(panels) / n_cols)
    viewport = panels[0].viewport
    fig, axes = plt.subplots(
        n_rows,
        n_cols,
        figsize=(n_cols * viewport.width / dpi, n_rows * viewport.height / dpi),
        dpi=dpi,
        squeeze=False,
    )
    flat_axes = axes.flatten()
    for ax, panel in zip(flat_axes, panels, strict=False):
        _draw_panel(ax, panel)
    for ax in flat_axes[len(panels) :]:
        ax.set_axis_off()
    fig.tight_layout()
    return fig


def _draw_panel(ax: plt.Axes, panel: ChartPanel) -> None:
    viewport = panel.viewport
    ax.set_xlim(0, viewport.width)
    ax.set_ylim(viewport.height, 0)
    ax.set_title(panel.title)
    for y_pos, _ in panel.y_ticks:
        ax.axhline(y_pos, color=GRID_COLOR, linewidth=1, linestyle=(0, (4, 4)))
    ax.set_yticks([y_pos for y_pos, _ in panel.y_ticks])
    ax.set_yticklabels([f"{value:.0f}" for _, value in panel.y_ticks])
    ax.set_xticks([])
    ax.set_ylabel("|MW|")

    for series in panel.series:
        style = series.style
        xs = [point.x for point in series.points]
        ys = [point.y for point in series.points]
        ax.plot(
            xs,
            ys,
            color=style.color,
            alpha=style.opacity,
            linestyle="--" if style.dashed else "-",
            linewidth=2,
            label=series.key,
        )
        ax.scatter(
            xs,
            ys,
            facecolors=[WINNER_COLOR if point.is_winner else "white" for point in series.points],
            edgecolors=style.color,
            zorder=3,
        )
    if panel.series:
        ax.legend(fontsize="x-small")


def save_figure_fs(filesystem: AbstractFileSystem, file_path: Union[str, Path], figure: plt.Figure) -> None:
    """Save a figure as PNG through an fsspec filesystem, creating the parent folder"""
    parent = Path(file_path).parent.as_posix()
    if parent != ".":
        filesystem.makedirs(parent, exist_ok=True)
    with filesystem.open(str(file_path), "wb") as f:
        figure.savefig(f, format="png")
