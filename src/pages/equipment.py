"""
src/pages/equipment.py
───────────────────────
Equipment list and equipment detail pages.

List layout: filter sidebar + equipment table.
Detail layout: telemetry, specifications, alerts, maintenance log and the
add-maintenance form.
"""
import dash_bootstrap_components as dbc
from dash import dcc, html

from config.alerts import MAINTENANCE_TYPE_LABELS, MaintenanceType
from src.data.models import Substation
from src.layout.sidebar import create_sidebar

MUTED = "#8b949e"

_LABEL_STYLE = {"fontSize": ".72rem", "color": MUTED, "textTransform": "uppercase"}


def layout(substations: list[Substation]) -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.H2("Equipment", className="page-title"),
                    html.P("Inventory of monitored units across all substations", className="page-subtitle"),
                ],
                className="page-header",
            ),
            dbc.Row(
                [
                    dbc.Col(create_sidebar(substations), md=3),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div(id="eq-list-count", className="chart-title"),
                                html.Div(id="eq-list-table"),
                            ],
                            className="chart-card",
                        ),
                        md=9,
                    ),
                ],
                className="g-3",
            ),
        ],
        style={"padding": "1.5rem"},
    )


def _maintenance_form() -> html.Div:
    return html.Div(
        [
            html.Div("Log maintenance", className="chart-title"),
            dbc.Row(
                [
                    dbc.Col(
                        [
                            html.Label("Type", style=_LABEL_STYLE),
                            dcc.Dropdown(
                                id="eq-maint-type",
                                options=[{"label": MAINTENANCE_TYPE_LABELS[t], "value": t.value} for t in MaintenanceType],
                                value=MaintenanceType.PREVENTIVE.value,
                                clearable=False,
                                className="dark-dropdown",
                            ),
                        ],
                        md=4,
                    ),
                    dbc.Col(
                        [
                            html.Label("Date", style=_LABEL_STYLE),
                            html.Div(dcc.DatePickerSingle(id="eq-maint-date", display_format="YYYY-MM-DD")),
                        ],
                        md=4,
                    ),
                    dbc.Col(
                        [
                            html.Label("Duration", style=_LABEL_STYLE),
                            dbc.Input(id="eq-maint-duration", placeholder="e.g. 2h 30min", size="sm"),
                        ],
                        md=4,
                    ),
                ],
                className="g-2 mb-2",
            ),
            html.Label("Technician", style=_LABEL_STYLE),
            dbc.Input(id="eq-maint-technician", size="sm", className="mb-2"),
            html.Label("Work performed", style=_LABEL_STYLE),
            dbc.Textarea(id="eq-maint-content", size="sm", className="mb-2"),
            dbc.Button("Save record", id="eq-maint-submit", color="primary", size="sm", n_clicks=0),
            html.Div(id="eq-maint-feedback", className="mt-2"),
        ],
        className="chart-card",
    )


def detail_layout(equipment_id: str) -> html.Div:
    return html.Div(
        [
            dcc.Store(id="eq-detail-id", data=equipment_id),
            dcc.Link("← All equipment", href="/equipment", style={"fontSize": ".8rem", "color": "#58a6ff"}),
            html.Div(id="eq-detail-header", className="page-header"),
            dbc.Row(
                [
                    dbc.Col(
                        [
                            html.Div(
                                [
                                    html.Div("Live telemetry", className="chart-title"),
                                    html.Div(id="eq-detail-telemetry"),
                                ],
                                className="chart-card mb-3",
                            ),
                            html.Div(
                                [
                                    html.Div("Specifications", className="chart-title"),
                                    html.Div(id="eq-detail-specs"),
                                ],
                                className="chart-card mb-3",
                            ),
                            html.Div(
                                [
                                    html.Div("Alerts", className="chart-title"),
                                    html.Div(id="eq-detail-alerts"),
                                ],
                                className="chart-card",
                            ),
                        ],
                        md=7,
                    ),
                    dbc.Col(
                        [
                            html.Div(
                                [
                                    html.Div("Maintenance log", className="chart-title"),
                                    html.Div(id="eq-detail-maintenance"),
                                ],
                                className="chart-card mb-3",
                            ),
                            _maintenance_form(),
                        ],
                        md=5,
                    ),
                ],
                className="g-3",
            ),
        ],
        style={"padding": "1.5rem"},
    )
