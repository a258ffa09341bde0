"""
src/pages/alerts.py
────────────────────
Alert management page with filters and status actions.
"""

import dash_bootstrap_components as dbc
from dash import dcc, html

MUTED = "#8b949e"

_LABEL_STYLE = {"fontSize": ".72rem", "color": MUTED, "textTransform": "uppercase"}

_LEVEL_OPTIONS = [
    {"label": "All", "value": "all"},
    {"label": "Fault", "value": "error"},
    {"label": "Warning", "value": "warning"},
]

_SCOPE_OPTIONS = [
    {"label": "Active", "value": "active"},
    {"label": "All", "value": "all"},
]


def layout() -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.Div(
                        [
                            html.H2("Alert Management", className="page-title"),
                            html.P("Anomalies raised against monitored equipment", className="page-subtitle"),
                        ]
                    ),
                    dbc.Button(
                        [html.I(className="fa-solid fa-trash", style={"marginRight": "6px"}), "Clear all"],
                        id="alerts-clear-btn",
                        color="secondary",
                        outline=True,
                        size="sm",
                        n_clicks=0,
                    ),
                ],
                className="page-header",
                style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"},
            ),
            # ── Summary badges ─────────────────────────────────────────────────
            html.Div(id="alerts-summary-badges", className="mb-3"),
            # ── Filter row ─────────────────────────────────────────────────────
            dbc.Row(
                [
                    dbc.Col(
                        [
                            html.Label("Show", style=_LABEL_STYLE),
                            dbc.RadioItems(
                                id="alerts-filter-scope",
                                options=_SCOPE_OPTIONS,
                                value="active",
                                inline=True,
                                inputStyle={"marginRight": "6px"},
                            ),
                        ],
                        md=3,
                    ),
                    dbc.Col(
                        [
                            html.Label("Level", style=_LABEL_STYLE),
                            dcc.Dropdown(
                                id="alerts-filter-level",
                                options=_LEVEL_OPTIONS,
                                value="all",
                                clearable=False,
                                style={"fontSize": ".85rem"},
                                className="dark-dropdown",
                            ),
                        ],
                        md=3,
                    ),
                ],
                className="g-3 mb-3",
            ),
            html.Div(id="alerts-feedback"),
            # ── Alert table ────────────────────────────────────────────────────
            html.Div(
                html.Div(id="alerts-table"),
                className="chart-card",
            ),
        ],
        style={"padding": "1.5rem"},
    )
