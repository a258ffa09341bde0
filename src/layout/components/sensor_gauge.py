"""
src/layout/components/sensor_gauge.py
──────────────────────────────────────
Sensor reading gauge for the fault-processing page, banded by the static
sensor thresholds (normal / elevated / abnormal).
"""
from __future__ import annotations

import plotly.graph_objects as go
from dash import dcc, html

from src.analytics.thresholds import (
    STATUS_LABELS,
    ThresholdBand,
    evaluate_current_value,
    get_value_color,
)
from src.layout.components.status_badge import badge

CARD_BG = "#161b22"


def _steps(band: ThresholdBand) -> list[dict]:
    low, high = band.gauge_min, band.gauge_max
    steps = []
    if band.lower_abnormal is not None:
        steps.append({"range": [low, band.lower_abnormal], "color": "rgba(218,54,51,0.15)"})
    if band.lower_elevated is not None:
        steps.append({"range": [band.lower_abnormal or low, band.lower_elevated], "color": "rgba(232,160,32,0.12)"})
    if band.elevated is not None:
        steps.append({"range": [band.lower_elevated or low, band.elevated], "color": "rgba(46,164,79,0.10)"})
    if band.abnormal is not None:
        steps.append({"range": [band.elevated or low, band.abnormal], "color": "rgba(232,160,32,0.12)"})
        steps.append({"range": [band.abnormal, high], "color": "rgba(218,54,51,0.15)"})
    return steps


def sensor_gauge(label: str, value: float, band: ThresholdBand, height: int = 170) -> html.Div:
    """
    Plotly gauge indicator for one sensor reading.

    Args:
        label: Sensor name shown in the card header
        value: Current reading
        band: Threshold band from get_static_thresholds()
        height: Figure height in px
    """
    color = get_value_color(value, band)
    status = evaluate_current_value(value, band)

    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=value,
        number={"suffix": f" {band.unit}", "font": {"color": color, "size": 24}},
        gauge={
            "axis": {
                "range": [band.gauge_min, band.gauge_max],
                "tickwidth": 1,
                "tickcolor": "#30363d",
                "tickfont": {"color": "#8b949e", "size": 9},
            },
            "bar": {"color": color, "thickness": 0.25},
            "bgcolor": "rgba(0,0,0,0)",
            "borderwidth": 0,
            "steps": _steps(band),
        },
    ))

    fig.update_layout(
        paper_bgcolor=CARD_BG,
        plot_bgcolor=CARD_BG,
        margin=dict(l=20, r=20, t=20, b=10),
        height=height,
        font=dict(color="#c9d1d9"),
    )

    return html.Div(
        [
            html.Div(
                [html.Span(label, className="chart-title"), badge(STATUS_LABELS[status], color)],
                style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"},
            ),
            dcc.Graph(figure=fig, config={"displayModeBar": False}, style={"height": f"{height}px"}),
        ],
        className="chart-card",
    )
