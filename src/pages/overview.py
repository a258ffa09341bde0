"""
src/pages/overview.py
──────────────────────
Grid overview page.

Static structure; dynamic KPI data injected via callbacks.
"""

import dash_bootstrap_components as dbc
from dash import dcc, html

MUTED = "#8b949e"


def layout() -> html.Div:
    return html.Div(
        [
            # ── Page header ───────────────────────────────────────────────────
            html.Div(
                [
                    html.Div(
                        [
                            html.H2("Grid Overview", className="page-title"),
                            html.P(
                                "Substations, equipment status and active alerts",
                                className="page-subtitle",
                            ),
                        ]
                    ),
                    dbc.Button(
                        [html.I(className="fa-solid fa-bolt", style={"marginRight": "6px"}), "Simulate alert"],
                        id="overview-simulate-btn",
                        color="danger",
                        outline=True,
                        size="sm",
                        n_clicks=0,
                    ),
                ],
                className="page-header",
                style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"},
            ),
            html.Div(id="overview-sim-feedback"),
            # ── KPI banner (dynamic) ──────────────────────────────────────────
            html.Div(id="overview-kpi-banner", className="mb-4"),
            # ── Status charts ─────────────────────────────────────────────────
            dbc.Row(
                [
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Equipment status", className="chart-title"),
                                dcc.Graph(id="overview-status-chart", config={"displayModeBar": False}),
                            ],
                            className="chart-card",
                        ),
                        md=5,
                    ),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Equipment by type", className="chart-title"),
                                dcc.Graph(id="overview-type-chart", config={"displayModeBar": False}),
                            ],
                            className="chart-card",
                        ),
                        md=7,
                    ),
                ],
                className="g-3 mb-3",
            ),
            # ── Substation cards (dynamic) ────────────────────────────────────
            html.Div(id="overview-substation-cards", className="mb-3"),
            # ── Active alerts ─────────────────────────────────────────────────
            html.Div(
                [
                    html.Div("Active alerts", className="chart-title"),
                    html.Div(id="overview-alerts-table"),
                ],
                className="chart-card",
            ),
        ],
        style={"padding": "1.5rem"},
    )
