# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

"""Command line entry point to inspect and maintain the stored results of a context.

Usage: python -m loadflow_results_engine.main --storage-root /data/projects --context-id my_project --command plot

Alternatively the arguments are read as JSON from the file named in RESULTS_ENGINE_CONFIG_FILE.
"""

import os
import sys

import logbook
import logbook.compat
import matplotlib.pyplot as plt
import tyro
from beartype.typing import Literal, Optional
from fsspec.core import url_to_fs
from pydantic import BaseModel

from loadflow_results_engine.chart_projection import RenderMode, build_chart_layout
from loadflow_results_engine.config import EngineSettings
from loadflow_results_engine.discovery import discover_latest, list_run_history, load_named
from loadflow_results_engine.plotting import plot_chart_panels, save_figure_fs
from loadflow_results_engine.results_model import ResultContainer
from loadflow_results_engine.retention import enforce_retention
from loadflow_results_engine.run_naming import safe_run_basename
from loadflow_results_engine.scenario_grouping import group_by_scenario
from loadflow_results_engine.storage import FsspecStorage

logger = logbook.Logger(__name__)


class Args(BaseModel):
    """Holds the arguments of a single invocation"""

    storage_root: str
    """The fsspec url of the directory that holds one folder per context, e.g. /data or s3://bucket/projects"""

    context_id: str
    """The context (project) to work on"""

    command: Literal["discover", "load", "retain", "history", "plot"] = "discover"
    """What to do. plot uses the named run if name is given and the latest run otherwise."""

    name: Optional[str] = None
    """The run to load, for load and plot"""

    base_name: Optional[str] = None
    """The run family to apply retention to"""

    project_name: Optional[str] = None
    """The project whose runs retention applies to, used to derive the base name if base_name is not given"""

    max_history: Optional[int] = None
    """How many runs of the family to keep, defaults to settings.max_history"""

    mode: RenderMode = "combined"
    """The render mode for plot"""

    detail: Optional[str] = None
    """Only plot the series of this base key"""

    output: str = "loadflow_chart.png"
    """Where plot writes the figure, any fsspec url"""

    settings: EngineSettings = EngineSettings()
    """Naming conventions of the artifact store"""


def _log_container(container: ResultContainer) -> None:
    groups = group_by_scenario(container.results)
    n_winners = sum(result.is_winner for result in container.results)
    logger.info(
        f"{container.filename}: status {container.status}, {len(container.results)} results "
        f"in {len(groups)} scenarios, {n_winners} winners"
    )


def main(args: Args) -> None:
    """Run the command given in args"""
    filesystem, root = url_to_fs(args.storage_root)
    storage = FsspecStorage(filesystem, root)

    if args.command == "retain":
        if args.base_name is None and args.project_name is None:
            raise ValueError("retain needs a base_name or a project_name")
        base_name = args.base_name if args.base_name is not None else safe_run_basename(args.project_name)
        max_history = args.max_history if args.max_history is not None else args.settings.max_history
        report = enforce_retention(storage, args.context_id, base_name, max_history)
        logger.info(f"Kept {len(report.kept)} runs, deleted {len(report.deleted)}, {len(report.failures)} failed")
        return

    if args.command == "history":
        for entry in list_run_history(storage, args.context_id, args.settings):
            logger.info(f"{entry.uploaded_at:%Y-%m-%d %H:%M}  {entry.display_name}  ({entry.path})")
        return

    if args.command == "load" and args.name is None:
        raise ValueError("load needs a name")

    if args.name is not None and args.command in ("load", "plot"):
        container = load_named(storage, args.context_id, args.name, args.settings)
    else:
        container = discover_latest(storage, args.context_id, args.settings)
    if container is None:
        logger.info(f"No results in {args.context_id} yet")
        return
    _log_container(container)

    if args.command == "plot":
        panels = build_chart_layout(
            group_by_scenario(container.results), args.mode, args.detail, args.settings.viewport
        )
        figure = plot_chart_panels(panels)
        output_fs, output_path = url_to_fs(args.output)
        save_figure_fs(output_fs, output_path, figure)
        plt.close(figure)
        logger.info(f"Wrote {len(panels)} charts to {args.output}")


if __name__ == "__main__":
    logbook.StreamHandler(sys.stdout, level=logbook.INFO).push_application()
    logbook.compat.redirect_logging()
    if "RESULTS_ENGINE_CONFIG_FILE" in os.environ:
        with open(os.environ["RESULTS_ENGINE_CONFIG_FILE"], "r") as f:
            args = Args.model_validate_json(f.read())
    else:
        args = tyro.cli(Args)
    main(args)
