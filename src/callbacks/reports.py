"""
src/callbacks/reports.py
─────────────────────────
Reports page callbacks.
"""
from __future__ import annotations

from datetime import date

import dash_bootstrap_components as dbc
import plotly.graph_objects as go
from dash import Input, Output

from config.alerts import (
    MAINTENANCE_TYPE_COLORS,
    MAINTENANCE_TYPE_LABELS,
    STATUS_COLORS,
    STATUS_LABELS,
    MaintenanceType,
    Status,
)
from config.equipment import EQUIPMENT_TYPE_LABELS
from src.analytics.metrics import (
    alerts_by_level,
    compute_system_metrics,
    maintenance_by_month,
    maintenance_by_type,
    status_by_type,
)
from src.layout.components.kpi_card import kpi_card

CARD_BG = "#161b22"
GRID_CLR = "#30363d"
PLOTLY_TMPL = "plotly_dark"


def _layout(height: int = 280) -> dict:
    return {
        "template": PLOTLY_TMPL,
        "paper_bgcolor": CARD_BG,
        "plot_bgcolor": CARD_BG,
        "margin": {"l": 10, "r": 10, "t": 10, "b": 10},
        "font": {"color": "#c9d1d9", "size": 11},
        "xaxis": {"gridcolor": GRID_CLR},
        "yaxis": {"gridcolor": GRID_CLR},
        "legend": {"bgcolor": "rgba(0,0,0,0)", "font": {"size": 10}, "orientation": "h", "y": -0.15},
        "height": height,
    }


def register(app, runtime) -> None:

    @app.callback(
        [
            Output("reports-kpi-row", "children"),
            Output("reports-status-chart", "figure"),
            Output("reports-alerts-chart", "figure"),
            Output("reports-maintenance-trend", "figure"),
            Output("reports-maintenance-types", "figure"),
        ],
        [
            Input("store-revision", "data"),
            Input("reports-window", "value"),
        ],
    )
    def update_reports(revision: int, months: int):
        doc = runtime.store.load()
        equipment = list(doc.equipment.values())
        today = date.today()
        metrics = compute_system_metrics(equipment, list(doc.substations.values()), doc.alerts, doc.maintenance, today=today)

        kpis = dbc.Row(
            [
                dbc.Col(kpi_card("Normal", f"{metrics.normal_rate}%", STATUS_COLORS[Status.NORMAL],
                                 icon="fa-check-circle", sub_label=f"{metrics.normal} units"), xs=6, md=3),
                dbc.Col(kpi_card("Warning", f"{metrics.warning_rate}%", STATUS_COLORS[Status.WARNING],
                                 icon="fa-exclamation-triangle", sub_label=f"{metrics.warning} units"), xs=6, md=3),
                dbc.Col(kpi_card("Fault", f"{metrics.error_rate}%", STATUS_COLORS[Status.ERROR],
                                 icon="fa-times-circle", sub_label=f"{metrics.error} units"), xs=6, md=3),
                dbc.Col(kpi_card("Average load", f"{metrics.average_load:.1f}%", "#58a6ff",
                                 icon="fa-tachometer-alt", sub_label=f"{len(doc.maintenance)} maintenance records"), xs=6, md=3),
            ],
            className="g-3",
        )

        # ── Status by type (stacked) ──────────────────────────────────────────
        table = status_by_type(equipment)
        type_labels = [EQUIPMENT_TYPE_LABELS[t] for t in table.index]
        status_fig = go.Figure([
            go.Bar(
                name=STATUS_LABELS[s],
                x=type_labels,
                y=table[s.value].values,
                marker={"color": STATUS_COLORS[s]},
            )
            for s in Status
        ])
        status_fig.update_layout(**_layout(), barmode="stack")

        # ── Alerts by level ───────────────────────────────────────────────────
        all_levels = alerts_by_level(doc.alerts)
        active_levels = alerts_by_level(doc.alerts, active_only=True)
        level_labels = [STATUS_LABELS[level] for level in all_levels.index]
        alerts_fig = go.Figure([
            go.Bar(name="All", x=level_labels, y=all_levels.values, marker={"color": "#30363d"}),
            go.Bar(name="Active", x=level_labels, y=active_levels.values,
                   marker={"color": [STATUS_COLORS[level] for level in active_levels.index]}),
        ])
        alerts_fig.update_layout(**_layout(), barmode="group")

        # ── Maintenance per month ─────────────────────────────────────────────
        monthly = maintenance_by_month(doc.maintenance, months=int(months or 6), today=today)
        trend_fig = go.Figure([
            go.Bar(
                name=MAINTENANCE_TYPE_LABELS[t],
                x=monthly.index.strftime("%b %Y"),
                y=monthly[t.value].values,
                marker={"color": MAINTENANCE_TYPE_COLORS[t]},
            )
            for t in MaintenanceType
        ])
        trend_fig.update_layout(**_layout(), barmode="stack")

        # ── Maintenance by type ───────────────────────────────────────────────
        by_type = maintenance_by_type(doc.maintenance)
        types_fig = go.Figure(go.Pie(
            labels=[MAINTENANCE_TYPE_LABELS[MaintenanceType(t)] for t in by_type.index],
            values=by_type.values,
            marker={"colors": [MAINTENANCE_TYPE_COLORS[MaintenanceType(t)] for t in by_type.index]},
            hole=0.5,
            sort=False,
        ))
        types_fig.update_layout(**_layout())

        return kpis, status_fig, alerts_fig, trend_fig, types_fig
