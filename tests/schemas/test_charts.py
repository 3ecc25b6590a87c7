import pytest
from pydantic import ValidationError

from drillscope.schemas.charts import (
    AreaChartConfig,
    BarChartConfig,
    ChartBaseConfig,
    LineChartConfig,
    PieChartConfig,
    ScatterChartConfig,
    build_render_payload,
    parse_chart_config,
)

pytestmark = pytest.mark.unit

RECORDS = [{"name": "A", "value": 1}, {"name": "B", "value": 2}, {"name": "C", "value": 3}]


def test_parse_dispatches_on_kind():
    assert isinstance(parse_chart_config({"kind": "area"}), AreaChartConfig)
    assert isinstance(parse_chart_config({"kind": "scatter"}), ScatterChartConfig)


def test_parse_rejects_unknown_kind_and_foreign_fields():
    with pytest.raises(ValidationError):
        parse_chart_config({"kind": "radar"})
    with pytest.raises(ValidationError):
        parse_chart_config({"kind": "line", "outer_radius": 10})


def test_line_payload():
    payload = build_render_payload(LineChartConfig(colors=["#123"]), RECORDS, 150)

    assert payload["kind"] == "line"
    assert payload["series"] == {"stroke": "#123", "stroke_width": 2.0, "dot_radius": 4.0}
    assert payload["animation_duration_ms"] == 150
    assert payload["data"] is RECORDS


def test_area_payload():
    series = build_render_payload(AreaChartConfig(), RECORDS)["series"]
    assert series["fill_opacity"] == 0.6
    assert series["fill"] == series["stroke"] == "#8884d8"


def test_bar_payload():
    series = build_render_payload(BarChartConfig(), RECORDS)["series"]
    assert series["corner_radius"] == [4, 4, 0, 0]


def test_pie_payload_cycles_colors_and_hides_grid():
    payload = build_render_payload(PieChartConfig(colors=["#a", "#b"], show_grid=True), RECORDS)

    assert payload["show_grid"] is False
    assert payload["series"]["slice_colors"] == ["#a", "#b", "#a"]
    assert payload["series"]["outer_radius"] == 80


def test_scatter_payload_uses_both_keys():
    payload = build_render_payload(ScatterChartConfig(), RECORDS)
    assert payload["x_key"] == "x"
    assert payload["series"]["y_key"] == "y"


def test_unknown_chart_type_raises():
    class GaugeChartConfig(ChartBaseConfig):
        kind: str = "gauge"

    with pytest.raises(TypeError):
        build_render_payload(GaugeChartConfig(), RECORDS)
