"""
src/callbacks/navigation.py — Routing, change polling and overview page callbacks.
"""
from __future__ import annotations

from datetime import date
from urllib.parse import parse_qs

import dash_bootstrap_components as dbc
import plotly.graph_objects as go
import structlog
from dash import Input, Output, State, dcc, html, no_update

from config.alerts import STATUS_COLORS, STATUS_LABELS, Status
from config.equipment import EQUIPMENT_TYPE_COLORS, EQUIPMENT_TYPE_LABELS
from src.analytics.metrics import compute_system_metrics, status_by_type
from src.data.models import Alert
from src.data.simulator import simulate_alert
from src.layout.components.kpi_card import kpi_card, mini_kpi
from src.layout.components.status_badge import alert_level_badge, alert_status_badge, status_badge

CARD_BG = "#161b22"
BORDER = "#30363d"
MUTED = "#8b949e"
ACCENT = "#58a6ff"

logger = structlog.get_logger(__name__)


def _chart_layout(height: int = 240) -> dict:
    return {
        "template": "plotly_dark",
        "paper_bgcolor": CARD_BG,
        "plot_bgcolor": CARD_BG,
        "margin": {"l": 10, "r": 10, "t": 10, "b": 10},
        "font": {"color": "#c9d1d9", "size": 11},
        "legend": {"bgcolor": "rgba(0,0,0,0)", "font": {"size": 10}},
        "height": height,
    }


def fault_href(alert: Alert) -> str:
    return f"/fault?equipment={alert.equipment_id}&alert={alert.id}"


def alerts_mini_table(alerts: list[Alert]) -> html.Div | html.Table:
    if not alerts:
        return html.Div("No active alerts.", style={"color": MUTED, "padding": "12px"})
    rows = [
        html.Tr([
            html.Td(a.time.strftime("%d/%m %H:%M"), style={"fontSize": ".72rem", "color": MUTED}),
            html.Td(dcc.Link(a.equipment_name, href=f"/equipment/{a.equipment_id}", style={"color": ACCENT, "fontSize": ".78rem"})),
            html.Td(a.substation_name, style={"fontSize": ".72rem", "color": MUTED}),
            html.Td(alert_level_badge(a.level)),
            html.Td(a.message, style={"fontSize": ".75rem"}),
            html.Td(alert_status_badge(a.status)),
            html.Td(dcc.Link("Process", href=fault_href(a), style={"fontSize": ".72rem", "color": ACCENT})),
        ])
        for a in alerts
    ]
    return html.Table(
        [html.Thead(html.Tr([html.Th(h) for h in ["Time", "Equipment", "Substation", "Level", "Message", "Status", ""]],
                            style={"color": MUTED, "fontSize": ".65rem", "textTransform": "uppercase"})),
         html.Tbody(rows)],
        style={"width": "100%", "borderCollapse": "collapse", "fontSize": ".8rem"},
    )


def register(app, runtime) -> None:
    """Register routing, polling and overview page callbacks."""
    repository = runtime.repository

    # ── Page routing ──────────────────────────────────────────────────────────
    from src.pages import alerts, chat, equipment, fault, overview, reports

    @app.callback(
        Output("page-content", "children"),
        Input("url", "pathname"),
        Input("url", "search"),
    )
    def display_page(pathname: str, search: str):
        pathname = pathname or "/"
        params = parse_qs((search or "").lstrip("?"))

        if pathname.startswith("/equipment/"):
            return equipment.detail_layout(pathname.rsplit("/", 1)[-1])
        if pathname == "/equipment":
            return equipment.layout(repository.list_substations())
        if pathname == "/fault":
            return fault.layout(
                params.get("equipment", [""])[0],
                params.get("alert", [None])[0],
            )
        routes = {
            "/": overview.layout,
            "/alerts": alerts.layout,
            "/reports": reports.layout,
            "/chat": chat.layout,
        }
        return routes.get(pathname, overview.layout)()

    # ── Navbar collapse ───────────────────────────────────────────────────────
    @app.callback(
        Output("navbar-collapse", "is_open"),
        Input("navbar-toggler", "n_clicks"),
        State("navbar-collapse", "is_open"),
        prevent_initial_call=True,
    )
    def toggle_navbar(n_clicks: int, is_open: bool) -> bool:
        return not is_open

    # ── Change polling ────────────────────────────────────────────────────────
    @app.callback(
        Output("store-revision", "data"),
        Output("recovery-notice", "is_open"),
        Input("interval-live", "n_intervals"),
        State("store-revision", "data"),
    )
    def poll_revision(n_intervals: int, current: int):
        revision = runtime.revision.revision
        recovered = runtime.store.consume_recovery_notice()
        return (
            revision if revision != current else no_update,
            True if recovered else no_update,
        )

    # ── Overview: KPIs, charts, substations, alerts ───────────────────────────
    @app.callback(
        [
            Output("overview-kpi-banner", "children"),
            Output("overview-status-chart", "figure"),
            Output("overview-type-chart", "figure"),
            Output("overview-substation-cards", "children"),
            Output("overview-alerts-table", "children"),
        ],
        Input("store-revision", "data"),
    )
    def update_overview(revision: int):
        doc = runtime.store.load()
        equipment = list(doc.equipment.values())
        substations = list(doc.substations.values())
        active = [a for a in sorted(doc.alerts, key=lambda a: a.time, reverse=True) if a.status != "completed"]
        metrics = compute_system_metrics(equipment, substations, doc.alerts, doc.maintenance, today=date.today())

        health_color = STATUS_COLORS[Status.NORMAL] if metrics.health_rate >= 80 else STATUS_COLORS[Status.WARNING] if metrics.health_rate >= 60 else STATUS_COLORS[Status.ERROR]
        kpi_banner = dbc.Row(
            [
                dbc.Col(kpi_card("Total equipment", str(metrics.total_equipment), ACCENT, icon="fa-microchip",
                                 sub_label=f"{metrics.total_substations} substations"), xs=6, md=3),
                dbc.Col(kpi_card("Operating rate", f"{metrics.health_rate:.1f}%", health_color, icon="fa-check-circle",
                                 border_color=health_color), xs=6, md=3),
                dbc.Col(kpi_card("Active alerts", str(metrics.active_alerts),
                                 STATUS_COLORS[Status.WARNING] if metrics.active_alerts else STATUS_COLORS[Status.NORMAL],
                                 icon="fa-bell", sub_label=f"{metrics.error} faults · {metrics.warning} warnings"), xs=6, md=3),
                dbc.Col(kpi_card("Maintenance this month", str(metrics.maintenance_this_month), "#c9d1d9",
                                 icon="fa-tools", sub_label=f"Average load {metrics.average_load:.1f}%"), xs=6, md=3),
            ],
            className="g-3",
        )

        status_fig = go.Figure(go.Pie(
            labels=[STATUS_LABELS[s] for s in Status],
            values=[metrics.normal, metrics.warning, metrics.error],
            marker={"colors": [STATUS_COLORS[s] for s in Status]},
            hole=0.55,
            sort=False,
        ))
        status_fig.update_layout(**_chart_layout())

        by_type = status_by_type(equipment).sum(axis=1)
        type_fig = go.Figure(go.Bar(
            x=[EQUIPMENT_TYPE_LABELS[t] for t in by_type.index],
            y=by_type.values,
            marker={"color": [EQUIPMENT_TYPE_COLORS[t] for t in by_type.index]},
        ))
        type_fig.update_layout(**_chart_layout(), yaxis={"gridcolor": BORDER, "dtick": 1})

        cards = []
        for sub in substations:
            members = [doc.equipment[i] for i in sub.equipment_ids if i in doc.equipment]
            sub_alerts = sum(1 for a in active if a.substation_id == sub.id)
            border = STATUS_COLORS.get(sub.status, BORDER) if sub.status != Status.NORMAL else BORDER
            cards.append(
                dbc.Col(
                    html.Div(
                        [
                            html.Div(
                                [
                                    html.Span(sub.name, style={"fontWeight": "700", "fontSize": ".95rem"}),
                                    status_badge(sub.status),
                                ],
                                style={"display": "flex", "justifyContent": "space-between", "marginBottom": "4px"},
                            ),
                            html.Div(f"{sub.id} · {sub.location}", style={"fontSize": ".68rem", "color": MUTED, "marginBottom": "10px"}),
                            html.Div(
                                [
                                    mini_kpi("Capacity", sub.capacity or "-"),
                                    mini_kpi("Equipment", str(len(members))),
                                    mini_kpi("Active alerts", str(sub_alerts),
                                             STATUS_COLORS[Status.ERROR] if sub_alerts else STATUS_COLORS[Status.NORMAL]),
                                ],
                                style={"display": "grid", "gridTemplateColumns": "1fr 1fr 1fr", "gap": "8px"},
                            ),
                        ],
                        style={
                            "backgroundColor": CARD_BG,
                            "border": f"1px solid {border}",
                            "borderRadius": "8px",
                            "padding": "14px",
                        },
                    ),
                    md=4,
                )
            )

        return kpi_banner, status_fig, type_fig, dbc.Row(cards, className="g-3"), alerts_mini_table(active[:8])

    # ── Overview: simulate alert ──────────────────────────────────────────────
    @app.callback(
        Output("overview-sim-feedback", "children"),
        Input("overview-simulate-btn", "n_clicks"),
        prevent_initial_call=True,
    )
    def on_simulate(n_clicks: int):
        result = simulate_alert(repository)
        if result.alert is None:
            return dbc.Alert(result.reason, color="warning", duration=4000, className="py-2")
        return dbc.Alert(
            f"Simulated alert raised for {result.alert.equipment_name}: {result.alert.message}",
            color="danger" if result.alert.level == "error" else "warning",
            duration=4000,
            className="py-2",
        )
