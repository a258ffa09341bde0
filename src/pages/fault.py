"""
src/pages/fault.py
───────────────────
Fault-processing page for one equipment unit.

Static shell only: sensor gauges, the analysis timeline, the proposed
solution and its commands are rendered by src/callbacks/fault.py on every
workflow tick.
"""
import dash_bootstrap_components as dbc
from dash import dcc, html

from config.settings import settings


def layout(equipment_id: str, alert_id: str | None = None) -> html.Div:
    return html.Div(
        [
            dcc.Store(id="fault-context", data={"equipment_id": equipment_id, "alert_id": alert_id}),
            dcc.Store(id="fault-version", data=0),
            dcc.Interval(id="fault-interval", interval=settings.WORKFLOW_TICK_MS, n_intervals=0, disabled=True),
            dcc.Link("← Alerts", href="/alerts", style={"fontSize": ".8rem", "color": "#58a6ff"}),
            # ── Header + actions ──────────────────────────────────────────────
            html.Div(
                [
                    html.Div(id="fault-header"),
                    html.Div(
                        [
                            dbc.Button(
                                [html.I(className="fa-solid fa-play", style={"marginRight": "6px"}), "Start analysis"],
                                id="fault-start-btn",
                                color="primary",
                                size="sm",
                                n_clicks=0,
                                disabled=True,
                                className="me-2",
                            ),
                            dbc.Button(
                                [html.I(className="fa-solid fa-check", style={"marginRight": "6px"}), "Confirm fault cleared"],
                                id="fault-complete-btn",
                                color="success",
                                size="sm",
                                n_clicks=0,
                                disabled=True,
                            ),
                        ]
                    ),
                ],
                className="page-header",
                style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"},
            ),
            html.Div(id="fault-feedback"),
            # ── Sensor gauges ─────────────────────────────────────────────────
            html.Div(id="fault-sensors", className="mb-3"),
            dbc.Row(
                [
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Analysis", className="chart-title"),
                                html.Div(id="fault-steps"),
                            ],
                            className="chart-card",
                        ),
                        md=5,
                    ),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Proposed solution", className="chart-title"),
                                html.Div(id="fault-solution"),
                            ],
                            className="chart-card",
                        ),
                        md=7,
                    ),
                ],
                className="g-3",
            ),
        ],
        style={"padding": "1.5rem"},
    )
