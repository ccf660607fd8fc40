# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

import itertools

import pytest
from loadflow_results_engine.chart_projection import (
    BASE_OPACITY,
    CAPA_OPACITY,
    LINE_COLORS,
    ChartDomain,
    Viewport,
    assign_base_colors,
    assign_series_styles,
    build_chart_layout,
    compute_domain,
    project,
    y_axis_ticks,
)
from loadflow_results_engine.results_model import ScenarioResult
from loadflow_results_engine.scenario_grouping import group_by_scenario
from tests.result_payloads import make_result


def _result(revision: str, mw_flow: float, config: str = "Normal") -> ScenarioResult:
    return ScenarioResult.model_validate(make_result(revision=revision, mw_flow=mw_flow, config=config))


def test_compute_domain_single_point():
    domain = compute_domain({"LF_1/Normal": [_result("LOAD_5", 80.0)]})
    assert domain.min_x == domain.max_x == 5
    assert domain.min_y < 80.0 < domain.max_y
    assert domain.min_y + domain.max_y == pytest.approx(160.0)
    assert domain.max_y - domain.min_y == pytest.approx(0.2)


def test_compute_domain_is_global_and_uses_abs_flow():
    groups = {
        "LF_1/Normal": [_result("LOAD_1", -100.0), _result("LOAD_4", -50.0)],
        "LF_2/Normal": [_result("LOAD_2", 200.0), _result("LOAD_9", 150.0)],
    }
    domain = compute_domain(groups)
    assert domain.min_x == 1
    assert domain.max_x == 9
    assert domain.min_y == pytest.approx(50.0 - 15.0)
    assert domain.max_y == pytest.approx(200.0 + 15.0)


def test_compute_domain_empty():
    with pytest.raises(ValueError):
        compute_domain({})
    with pytest.raises(ValueError):
        compute_domain({"LF_1/Normal": []})


def test_project_corners():
    domain = ChartDomain(min_x=0, max_x=10, min_y=0, max_y=100)
    viewport = Viewport(width=800, height=300, margin=20)
    assert project((0, 0), domain, viewport) == pytest.approx((20.0, 280.0))
    assert project((10, 100), domain, viewport) == pytest.approx((780.0, 20.0))
    assert project((5, 50), domain, viewport) == pytest.approx((400.0, 150.0))


def test_project_degenerate_x_range():
    domain = ChartDomain(min_x=5, max_x=5, min_y=79.9, max_y=80.1)
    x, y = project((5, 80.0), domain, Viewport())
    assert x == pytest.approx(20.0)
    assert y == pytest.approx(150.0)


def test_y_axis_ticks():
    ticks = y_axis_ticks(ChartDomain(min_x=0, max_x=1, min_y=0, max_y=100), Viewport(height=300, margin=20))
    assert ticks == [(20.0, 100.0), (85.0, 75.0), (150.0, 50.0), (215.0, 25.0), (280.0, 0.0)]


def test_assign_base_colors_is_order_independent():
    keys = ["B", "A", "A_CAPA", "C"]
    expected = {"A": LINE_COLORS[0], "B": LINE_COLORS[1], "C": LINE_COLORS[2]}
    for permutation in itertools.permutations(keys):
        assert assign_base_colors(permutation) == expected


def test_assign_base_colors_cycles():
    keys = [f"K{i:02d}" for i in range(len(LINE_COLORS) + 2)]
    colors = assign_base_colors(keys)
    assert colors["K10"] == LINE_COLORS[0]
    assert colors["K11"] == LINE_COLORS[1]


def test_assign_series_styles_pairs_capa_variants():
    styles = assign_series_styles(["LF_1/Normal_CAPA", "LF_1/Normal", "LF_2/Normal"])
    base, capa = styles["LF_1/Normal"], styles["LF_1/Normal_CAPA"]
    assert base.color == capa.color
    assert not base.dashed
    assert capa.dashed
    assert capa.opacity == CAPA_OPACITY < BASE_OPACITY == base.opacity
    assert styles["LF_2/Normal"].color != base.color


def test_build_chart_layout_combined(sweep_container):
    groups = group_by_scenario(sweep_container.results)
    panels = build_chart_layout(groups, "combined")

    assert len(panels) == 1
    panel = panels[0]
    assert panel.domain == compute_domain(groups)
    assert [series.key for series in panel.series] == sorted(groups)
    normal = next(series for series in panel.series if series.key == "LF_1/Normal")
    assert [point.revision_index for point in normal.points] == [2, 10]
    assert [point.is_winner for point in normal.points] == [True, False]
    assert normal.points[0].abs_mw_flow == 80.0
    for series in panel.series:
        for point in series.points:
            assert 20.0 <= point.x <= 780.0
            assert 20.0 <= point.y <= 280.0


def test_build_chart_layout_grid_shares_the_domain(sweep_container):
    groups = group_by_scenario(sweep_container.results)
    panels = build_chart_layout(groups, "grid")

    assert [panel.title for panel in panels] == ["LF_1/Normal", "LF_2/Degraded", "f.dgs"]
    assert all(panel.domain == compute_domain(groups) for panel in panels)
    assert [series.key for series in panels[0].series] == ["LF_1/Normal", "LF_1/Normal_CAPA"]
    assert panels[0].series[1].style.dashed


def test_build_chart_layout_detail_recomputes_the_domain(sweep_container):
    groups = group_by_scenario(sweep_container.results)
    styles = assign_series_styles(groups)
    panels = build_chart_layout(groups, "grid", detail_base_key="LF_1/Normal")

    assert len(panels) == 1
    panel = panels[0]
    assert [series.key for series in panel.series] == ["LF_1/Normal", "LF_1/Normal_CAPA"]
    assert panel.domain == compute_domain({key: groups[key] for key in ("LF_1/Normal", "LF_1/Normal_CAPA")})
    assert panel.domain != compute_domain(groups)
    assert panel.series[0].style == styles["LF_1/Normal"]


def test_build_chart_layout_unknown_detail(sweep_container):
    with pytest.raises(ValueError):
        build_chart_layout(group_by_scenario(sweep_container.results), detail_base_key="LF_9/Nothing")


def test_build_chart_layout_empty():
    assert build_chart_layout({}) == []
    assert build_chart_layout({}, "grid") == []
