"""
src/pages/reports.py
─────────────────────
Fleet reports: equipment status by type, maintenance activity and alert mix.
"""
import dash_bootstrap_components as dbc
from dash import dcc, html

MUTED = "#8b949e"

_WINDOW_OPTIONS = [
    {"label": "3 months", "value": 3},
    {"label": "6 months", "value": 6},
    {"label": "12 months", "value": 12},
]


def _chart(title: str, graph_id: str) -> html.Div:
    return html.Div(
        [
            html.Div(title, className="chart-title"),
            dcc.Graph(id=graph_id, config={"displayModeBar": False}),
        ],
        className="chart-card",
    )


def layout() -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.H2("Reports", className="page-title"),
                    html.P("Equipment health, maintenance activity and alert statistics", className="page-subtitle"),
                ],
                className="page-header",
            ),
            html.Div(id="reports-kpi-row", className="mb-3"),
            dbc.Row(
                [
                    dbc.Col(_chart("Status by equipment type", "reports-status-chart"), md=7),
                    dbc.Col(_chart("Alerts by level", "reports-alerts-chart"), md=5),
                ],
                className="g-3 mb-3",
            ),
            dbc.Row(
                [
                    dbc.Col(
                        html.Div(
                            [
                                html.Div(
                                    [
                                        html.Span("Maintenance per month", className="chart-title"),
                                        dcc.Dropdown(
                                            id="reports-window",
                                            options=_WINDOW_OPTIONS,
                                            value=6,
                                            clearable=False,
                                            className="dark-dropdown",
                                            style={"width": "140px", "fontSize": ".8rem"},
                                        ),
                                    ],
                                    style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"},
                                ),
                                dcc.Graph(id="reports-maintenance-trend", config={"displayModeBar": False}),
                            ],
                            className="chart-card",
                        ),
                        md=7,
                    ),
                    dbc.Col(_chart("Maintenance by type", "reports-maintenance-types"), md=5),
                ],
                className="g-3",
            ),
        ],
        style={"padding": "1.5rem"},
    )
