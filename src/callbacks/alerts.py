"""
src/callbacks/alerts.py
────────────────────────
Alert management page callbacks.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
import pandas as pd
import structlog
from dash import ALL, Input, Output, ctx, dcc, html
from dash.exceptions import PreventUpdate

from config.alerts import MAX_ALERTS_DISPLAY, STATUS_COLORS, AlertStatus
from src.callbacks.navigation import fault_href
from src.data.models import Alert
from src.layout.components.status_badge import alert_level_badge, alert_status_badge

CARD_BG = "#161b22"
BORDER = "#30363d"
MUTED = "#8b949e"
ACCENT = "#58a6ff"

logger = structlog.get_logger(__name__)

_LEVEL_ORDER = {"error": 2, "warning": 1}


def _action_button(label: str, kind: str, alert_id: str, color: str) -> html.Button:
    return html.Button(
        label,
        id={"type": kind, "index": alert_id},
        n_clicks=0,
        style={
            "fontSize": ".68rem",
            "fontWeight": "600",
            "color": color,
            "background": "transparent",
            "border": f"1px solid {color}",
            "borderRadius": "4px",
            "padding": "2px 8px",
            "marginRight": "4px",
            "cursor": "pointer",
        },
    )


def _actions(alert: Alert) -> html.Div:
    buttons = []
    if alert.status != AlertStatus.COMPLETED:
        buttons.append(dcc.Link("Process", href=fault_href(alert),
                                style={"fontSize": ".72rem", "color": ACCENT, "marginRight": "8px"}))
        if alert.status == AlertStatus.PENDING:
            buttons.append(_action_button("Take", "alert-processing-btn", alert.id, "#e8a020"))
        buttons.append(_action_button("Complete", "alert-complete-btn", alert.id, "#2ea44f"))
    buttons.append(_action_button("Delete", "alert-delete-btn", alert.id, MUTED))
    return html.Div(buttons, style={"display": "flex", "alignItems": "center", "whiteSpace": "nowrap"})


def filter_alerts(alerts: list[Alert], scope: str = "active", level: str = "all") -> pd.DataFrame:
    """
    Filter and order alerts for the table.

    Returns a DataFrame with one row per alert (id, level, status, time),
    most severe first, then newest first.
    """
    df = pd.DataFrame({
        "id": [a.id for a in alerts],
        "level": [a.level.value for a in alerts],
        "status": [a.status.value for a in alerts],
        "time": [a.time for a in alerts],
    })
    if df.empty:
        return df
    if scope == "active":
        df = df[df["status"] != AlertStatus.COMPLETED.value]
    if level != "all":
        df = df[df["level"] == level]
    df = df.assign(_sev=df["level"].map(_LEVEL_ORDER).fillna(0))
    return df.sort_values(["_sev", "time"], ascending=[False, False]).head(MAX_ALERTS_DISPLAY)


def _build_table(df: pd.DataFrame, alerts: list[Alert]) -> html.Div:
    if df.empty:
        return html.Div(
            "No alerts for the selected filters.",
            style={"color": MUTED, "padding": "20px", "textAlign": "center"},
        )

    by_id = {a.id: a for a in alerts}
    rows = []
    for alert in (by_id[alert_id] for alert_id in df["id"]):
        rows.append(
            html.Tr(
                [
                    html.Td(alert.time.strftime("%d/%m %H:%M"), style={"color": MUTED, "fontSize": ".78rem"}),
                    html.Td([
                        dcc.Link(alert.equipment_name, href=f"/equipment/{alert.equipment_id}",
                                 style={"color": ACCENT, "fontSize": ".82rem", "fontWeight": "600"}),
                        html.Div(alert.equipment_id, style={"fontSize": ".65rem", "color": MUTED}),
                    ]),
                    html.Td(alert.substation_name, style={"fontSize": ".78rem", "color": MUTED}),
                    html.Td(alert_level_badge(alert.level)),
                    html.Td(alert.message, style={"fontSize": ".78rem"}),
                    html.Td(alert_status_badge(alert.status)),
                    html.Td(_actions(alert)),
                ],
                style={"borderBottom": f"1px solid {BORDER}"},
            )
        )

    return html.Div(
        html.Table(
            [
                html.Thead(
                    html.Tr(
                        [html.Th(h) for h in ["Time", "Equipment", "Substation", "Level", "Message", "Status", ""]],
                        style={"color": MUTED, "fontSize": ".68rem", "textTransform": "uppercase"},
                    )
                ),
                html.Tbody(rows),
            ],
            style={"width": "100%", "borderCollapse": "collapse", "fontSize": ".82rem"},
        ),
        style={"overflowX": "auto"},
    )


def _summary(alerts: list[Alert]) -> dbc.Row:
    active = [a for a in alerts if a.status != AlertStatus.COMPLETED]
    tiles = [
        ("Active", len(active), ACCENT),
        ("Faults", sum(1 for a in active if a.level == "error"), STATUS_COLORS["error"]),
        ("Warnings", sum(1 for a in active if a.level == "warning"), STATUS_COLORS["warning"]),
        ("Completed", len(alerts) - len(active), STATUS_COLORS["normal"]),
    ]
    return dbc.Row(
        [
            dbc.Col(
                html.Div(
                    [
                        html.Div(str(count), style={"fontSize": "1.4rem", "fontWeight": "700", "color": color}),
                        html.Div(label, style={"fontSize": ".65rem", "color": MUTED, "textTransform": "uppercase"}),
                    ],
                    style={"backgroundColor": CARD_BG, "border": f"1px solid {BORDER}", "borderRadius": "8px", "padding": "10px 16px"},
                ),
                xs=6, md=3,
            )
            for label, count, color in tiles
        ],
        className="g-2",
    )


def register(app, runtime) -> None:
    repository = runtime.repository

    @app.callback(
        [
            Output("alerts-table", "children"),
            Output("alerts-summary-badges", "children"),
        ],
        [
            Input("store-revision", "data"),
            Input("alerts-filter-scope", "value"),
            Input("alerts-filter-level", "value"),
        ],
    )
    def update_alerts_table(revision: int, scope: str, level: str):
        alerts = repository.list_alerts()
        return _build_table(filter_alerts(alerts, scope, level), alerts), _summary(alerts)

    @app.callback(
        Output("alerts-feedback", "children"),
        [
            Input({"type": "alert-processing-btn", "index": ALL}, "n_clicks"),
            Input({"type": "alert-complete-btn", "index": ALL}, "n_clicks"),
            Input({"type": "alert-delete-btn", "index": ALL}, "n_clicks"),
            Input("alerts-clear-btn", "n_clicks"),
        ],
        prevent_initial_call=True,
    )
    def on_alert_action(processing_clicks, complete_clicks, delete_clicks, clear_clicks):
        # Re-rendered buttons arrive with n_clicks=0; only real clicks act
        if not ctx.triggered or not ctx.triggered[0]["value"]:
            raise PreventUpdate

        trigger = ctx.triggered_id
        if trigger == "alerts-clear-btn":
            repository.clear_alerts()
            return dbc.Alert("All alerts cleared.", color="secondary", duration=4000, className="py-2")

        alert_id = trigger["index"]
        if trigger["type"] == "alert-processing-btn":
            ok = repository.update_alert_status(alert_id, AlertStatus.PROCESSING)
            message = f"Alert {alert_id} is being processed."
        elif trigger["type"] == "alert-complete-btn":
            ok = repository.update_alert_status(alert_id, AlertStatus.COMPLETED)
            message = f"Alert {alert_id} completed; equipment restored to normal."
        else:
            ok = repository.delete_alert(alert_id)
            message = f"Alert {alert_id} deleted."

        if not ok:
            logger.warning("alert_action_failed", alert_id=alert_id, action=trigger["type"])
            return dbc.Alert(f"Alert {alert_id} no longer exists.", color="warning", duration=4000, className="py-2")
        return dbc.Alert(message, color="success", duration=4000, className="py-2")
