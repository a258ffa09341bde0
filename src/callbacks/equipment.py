"""
src/callbacks/equipment.py
───────────────────────────
Equipment list and detail page callbacks.
Tables re-render whenever the change-bus revision moves.
"""
from __future__ import annotations

from datetime import date

import dash_bootstrap_components as dbc
import pandas as pd
from dash import Input, Output, State, dcc, html
from pydantic import ValidationError

from config.alerts import MAINTENANCE_TYPE_COLORS, MAINTENANCE_TYPE_LABELS, STATUS_ORDER
from config.equipment import EQUIPMENT_TYPE_LABELS
from src.analytics.metrics import equipment_frame
from src.callbacks.navigation import fault_href
from src.layout.components.kpi_card import mini_kpi, telemetry_strip
from src.layout.components.status_badge import alert_level_badge, alert_status_badge, badge, status_badge

BORDER = "#30363d"
MUTED = "#8b949e"
ACCENT = "#58a6ff"

_HEAD_STYLE = {"color": MUTED, "fontSize": ".68rem", "textTransform": "uppercase"}


def _table(headers: list[str], rows: list) -> html.Div:
    return html.Div(
        html.Table(
            [html.Thead(html.Tr([html.Th(h) for h in headers], style=_HEAD_STYLE)), html.Tbody(rows)],
            style={"width": "100%", "borderCollapse": "collapse", "fontSize": ".82rem"},
        ),
        style={"overflowX": "auto"},
    )


def _empty(text: str) -> html.Div:
    return html.Div(text, style={"color": MUTED, "padding": "16px", "textAlign": "center"})


def filter_equipment(
    df: pd.DataFrame,
    substation: str = "all",
    equipment_type: str = "all",
    status: str = "all",
    search: str = "",
) -> pd.DataFrame:
    """Apply the sidebar filters; search matches name or ID, case-insensitive."""
    if substation != "all":
        df = df[df["substation_id"] == substation]
    if equipment_type != "all":
        df = df[df["type"] == equipment_type]
    if status != "all":
        df = df[df["status"] == status]
    if search:
        needle = search.strip().lower()
        df = df[df["name"].str.lower().str.contains(needle, regex=False) | df["id"].str.lower().str.contains(needle, regex=False)]
    return df


def register(app, runtime) -> None:
    repository = runtime.repository

    # ── List page ─────────────────────────────────────────────────────────────
    @app.callback(
        [
            Output("eq-list-table", "children"),
            Output("eq-list-count", "children"),
        ],
        [
            Input("store-revision", "data"),
            Input("eq-filter-search", "value"),
            Input("eq-filter-substation", "value"),
            Input("eq-filter-type", "value"),
            Input("eq-filter-status", "value"),
        ],
    )
    def update_equipment_list(revision: int, search: str, substation: str, equipment_type: str, status: str):
        doc = runtime.store.load()
        df = equipment_frame(list(doc.equipment.values()))
        total = len(df)
        df = filter_equipment(df, substation, equipment_type, status, search or "")

        if df.empty:
            return _empty("No equipment matches the selected filters."), f"0 of {total} units"

        # Most severe first, then by name
        df = df.assign(_sev=df["status"].map(STATUS_ORDER).fillna(0)).sort_values(["_sev", "name"], ascending=[False, True])

        rows = []
        for _, row in df.iterrows():
            eq = doc.equipment[row["id"]]
            sub = doc.substations.get(eq.substation_id)
            rows.append(
                html.Tr(
                    [
                        html.Td([
                            dcc.Link(eq.name, href=f"/equipment/{eq.id}", style={"color": ACCENT, "fontWeight": "600"}),
                            html.Div(eq.id, style={"fontSize": ".68rem", "color": MUTED}),
                        ]),
                        html.Td(EQUIPMENT_TYPE_LABELS.get(eq.type, eq.type.value), style={"fontSize": ".78rem"}),
                        html.Td(sub.name if sub else eq.substation_id, style={"fontSize": ".78rem", "color": MUTED}),
                        html.Td(status_badge(eq.status)),
                        html.Td(f"{eq.temperature:g} °C", style={"fontSize": ".78rem"}),
                        html.Td(f"{eq.load:g} %", style={"fontSize": ".78rem"}),
                        html.Td(eq.next_maintenance.isoformat() if eq.next_maintenance else "-", style={"fontSize": ".78rem", "color": MUTED}),
                    ],
                    style={"borderBottom": f"1px solid {BORDER}"},
                )
            )
        headers = ["Equipment", "Type", "Substation", "Status", "Temp.", "Load", "Next maintenance"]
        return _table(headers, rows), f"{len(df)} of {total} units"

    # ── Detail page ───────────────────────────────────────────────────────────
    @app.callback(
        [
            Output("eq-detail-header", "children"),
            Output("eq-detail-telemetry", "children"),
            Output("eq-detail-specs", "children"),
            Output("eq-detail-alerts", "children"),
            Output("eq-detail-maintenance", "children"),
        ],
        [
            Input("store-revision", "data"),
            Input("eq-detail-id", "data"),
        ],
    )
    def update_equipment_detail(revision: int, equipment_id: str):
        eq = repository.get_equipment(equipment_id)
        if eq is None:
            missing = _empty(f"Equipment {equipment_id} not found.")
            return html.H2("Unknown equipment", className="page-title"), missing, "", "", ""

        sub = repository.get_substation(eq.substation_id)
        header = html.Div(
            [
                html.Div(
                    [html.H2(eq.name, className="page-title", style={"marginRight": "12px"}), status_badge(eq.status)],
                    style={"display": "flex", "alignItems": "center"},
                ),
                html.P(
                    f"{eq.id} · {EQUIPMENT_TYPE_LABELS.get(eq.type, eq.type.value)} · "
                    f"{sub.name if sub else eq.substation_id} · {eq.location}",
                    className="page-subtitle",
                ),
            ]
        )

        telemetry = html.Div(
            [
                telemetry_strip(eq),
                html.Div(
                    [
                        mini_kpi("Last maintenance", eq.last_maintenance.isoformat() if eq.last_maintenance else "-"),
                        mini_kpi("Next maintenance", eq.next_maintenance.isoformat() if eq.next_maintenance else "-"),
                    ],
                    style={"display": "grid", "gridTemplateColumns": "1fr 1fr", "gap": "8px", "marginTop": "12px"},
                ),
            ]
        )

        if eq.specifications:
            specs = _table(
                ["Parameter", "Value"],
                [html.Tr([html.Td(k, style={"color": MUTED}), html.Td(v)]) for k, v in eq.specifications.items()],
            )
        else:
            specs = _empty("No specifications recorded.")

        alerts = repository.list_alerts_by_equipment(eq.id)
        if alerts:
            alert_rows = [
                html.Tr([
                    html.Td(a.time.strftime("%Y-%m-%d %H:%M"), style={"fontSize": ".72rem", "color": MUTED}),
                    html.Td(alert_level_badge(a.level)),
                    html.Td(a.message, style={"fontSize": ".78rem"}),
                    html.Td(alert_status_badge(a.status)),
                    html.Td(
                        dcc.Link("Process", href=fault_href(a), style={"fontSize": ".72rem", "color": ACCENT})
                        if a.status != "completed" else ""
                    ),
                ])
                for a in alerts
            ]
            alerts_view = _table(["Time", "Level", "Message", "Status", ""], alert_rows)
        else:
            alerts_view = _empty("No alerts recorded for this unit.")

        records = repository.list_maintenance_by_equipment(eq.id)
        if records:
            maint_rows = [
                html.Tr([
                    html.Td(m.date.isoformat(), style={"fontSize": ".72rem", "color": MUTED}),
                    html.Td(badge(MAINTENANCE_TYPE_LABELS[m.type], MAINTENANCE_TYPE_COLORS[m.type])),
                    html.Td([html.Div(m.content, style={"fontSize": ".78rem"}),
                             html.Div(f"{m.technician} · {m.duration}", style={"fontSize": ".68rem", "color": MUTED})]),
                ])
                for m in records
            ]
            maintenance_view = _table(["Date", "Type", "Work"], maint_rows)
        else:
            maintenance_view = _empty("No maintenance recorded yet.")

        return header, telemetry, specs, alerts_view, maintenance_view

    # ── Detail page: add maintenance ──────────────────────────────────────────
    @app.callback(
        Output("eq-maint-feedback", "children"),
        Input("eq-maint-submit", "n_clicks"),
        [
            State("eq-detail-id", "data"),
            State("eq-maint-type", "value"),
            State("eq-maint-date", "date"),
            State("eq-maint-technician", "value"),
            State("eq-maint-content", "value"),
            State("eq-maint-duration", "value"),
        ],
        prevent_initial_call=True,
    )
    def add_maintenance(n_clicks, equipment_id, maint_type, maint_date, technician, content, duration):
        if not maint_date or not (technician or "").strip():
            return dbc.Alert("Date and technician are required.", color="warning", className="py-2")
        try:
            record = repository.add_maintenance(
                equipment_id=equipment_id,
                type=maint_type,
                date=date.fromisoformat(maint_date[:10]),
                technician=technician.strip(),
                content=(content or "").strip(),
                duration=(duration or "").strip(),
            )
        except (ValidationError, ValueError) as exc:
            return dbc.Alert(f"Invalid maintenance record: {exc}", color="danger", className="py-2")
        return dbc.Alert(f"Maintenance record {record.id} saved.", color="success", duration=4000, className="py-2")
