"""Chart-kind configuration variants and renderer payloads.

Each chart kind carries its own strongly-typed configuration. The variants
form a closed union discriminated on ``kind``; renderer payloads are built
by dispatching over that union rather than probing for optional fields.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from drillscope.schemas.base import DrillscopeBaseModel

__all__ = [
    'ChartBaseConfig',
    'LineChartConfig',
    'AreaChartConfig',
    'BarChartConfig',
    'PieChartConfig',
    'ScatterChartConfig',
    'ChartConfig',
    'CHART_KINDS',
    'parse_chart_config',
    'build_render_payload',
]

DEFAULT_COLOR = "#8884d8"


class ChartBaseConfig(DrillscopeBaseModel):
    """Fields shared by every chart kind."""
    title: Optional[str] = None
    height: int = Field(300, ge=1)
    data_key: str = "value"
    x_axis_key: str = "name"
    colors: list[str] = Field(default_factory=lambda: [DEFAULT_COLOR])
    show_grid: bool = False
    show_legend: bool = False
    interactive: bool = False
    drill_down_levels: list[str] = Field(default_factory=list)

    @property
    def primary_color(self) -> str:
        return self.colors[0] if self.colors else DEFAULT_COLOR


class LineChartConfig(ChartBaseConfig):
    """Line chart."""
    kind: Literal["line"] = "line"
    stroke_width: float = Field(2.0, gt=0)
    dot_radius: float = Field(4.0, ge=0)


class AreaChartConfig(ChartBaseConfig):
    """Area chart."""
    kind: Literal["area"] = "area"
    stroke_width: float = Field(2.0, gt=0)
    fill_opacity: float = Field(0.6, ge=0, le=1.0)


class BarChartConfig(ChartBaseConfig):
    """Bar chart."""
    kind: Literal["bar"] = "bar"
    corner_radius: tuple[int, int, int, int] = (4, 4, 0, 0)


class PieChartConfig(ChartBaseConfig):
    """Pie chart. Slices cycle through ``colors``."""
    kind: Literal["pie"] = "pie"
    outer_radius: int = Field(80, ge=1)
    show_labels: bool = True


class ScatterChartConfig(ChartBaseConfig):
    """Scatter chart, plotted on two data keys."""
    kind: Literal["scatter"] = "scatter"
    x_axis_key: str = "x"
    y_axis_key: str = "y"


ChartConfig = Annotated[
    Union[
        LineChartConfig,
        AreaChartConfig,
        BarChartConfig,
        PieChartConfig,
        ScatterChartConfig,
    ],
    Field(discriminator="kind"),
]

CHART_KINDS = {
    "line": LineChartConfig,
    "area": AreaChartConfig,
    "bar": BarChartConfig,
    "pie": PieChartConfig,
    "scatter": ScatterChartConfig,
}

_chart_adapter = TypeAdapter(ChartConfig)


def parse_chart_config(data) -> ChartBaseConfig:
    """Validate a dict (or chart model) into the matching chart variant.

    Parameters
    ----------
    data : dict or ChartBaseConfig
        Must carry a ``kind`` key naming one of :data:`CHART_KINDS`.

    Returns
    -------
    ChartBaseConfig
        One of the concrete chart variants.

    Raises
    ------
    pydantic.ValidationError
        If ``kind`` is unknown or a field does not belong to the variant.
    """
    if isinstance(data, ChartBaseConfig):
        return data
    return _chart_adapter.validate_python(data)


def build_render_payload(chart: ChartBaseConfig, records: list[dict],
                         animation_duration_ms: int = 300) -> dict:
    """Build the renderer-facing description of a chart.

    Parameters
    ----------
    chart : ChartBaseConfig
        A concrete chart variant.
    records : list of dict
        Displayed data, already filtered and downsampled.
    animation_duration_ms : int
        Passed through to the renderer.

    Returns
    -------
    dict
        ``kind``, ``data``, shared axis/style keys and a ``series`` entry
        whose shape depends on the chart kind.
    """
    payload = {
        "kind": chart.kind,
        "title": chart.title,
        "height": chart.height,
        "data": records,
        "x_key": chart.x_axis_key,
        "data_key": chart.data_key,
        "show_grid": chart.show_grid,
        "show_legend": chart.show_legend,
        "interactive": chart.interactive,
        "animation_duration_ms": animation_duration_ms,
    }

    if isinstance(chart, LineChartConfig):
        payload["series"] = {
            "stroke": chart.primary_color,
            "stroke_width": chart.stroke_width,
            "dot_radius": chart.dot_radius,
        }
    elif isinstance(chart, AreaChartConfig):
        payload["series"] = {
            "stroke": chart.primary_color,
            "stroke_width": chart.stroke_width,
            "fill": chart.primary_color,
            "fill_opacity": chart.fill_opacity,
        }
    elif isinstance(chart, BarChartConfig):
        payload["series"] = {
            "fill": chart.primary_color,
            "corner_radius": list(chart.corner_radius),
        }
    elif isinstance(chart, PieChartConfig):
        colors = chart.colors or [DEFAULT_COLOR]
        payload["series"] = {
            "name_key": chart.x_axis_key,
            "outer_radius": chart.outer_radius,
            "show_labels": chart.show_labels,
            "slice_colors": [colors[i % len(colors)] for i in range(len(records))],
        }
        # pie charts have no grid
        payload["show_grid"] = False
    elif isinstance(chart, ScatterChartConfig):
        payload["series"] = {
            "fill": chart.primary_color,
            "y_key": chart.y_axis_key,
        }
    else:
        raise TypeError(f"Unknown chart kind: {type(chart).__name__}")

    return payload
