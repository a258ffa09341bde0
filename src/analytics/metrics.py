"""
src/analytics/metrics.py
────────────────────────
Fleet-level KPIs and report aggregates computed from the stored document.

Used by the overview KPI row, the reports page and the expert-chat data
context. All functions are pure: they take entity lists and return plain
values or DataFrames ready for Plotly.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date

import pandas as pd

from config.alerts import MaintenanceType, Status
from config.equipment import EquipmentType
from src.data.models import Alert, Equipment, MaintenanceRecord, Substation


@dataclass(frozen=True)
class SystemMetrics:
    total_equipment: int
    normal: int
    warning: int
    error: int
    normal_rate: int          # whole percent
    warning_rate: int
    error_rate: int
    health_rate: float        # percent normal, one decimal
    average_load: float
    total_substations: int
    active_alerts: int
    maintenance_this_month: int

    def to_dict(self) -> dict:
        return asdict(self)


def equipment_frame(equipment: list[Equipment]) -> pd.DataFrame:
    columns = ["id", "name", "type", "substation_id", "status", "temperature", "voltage", "current", "load"]
    if not equipment:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([eq.model_dump(mode="json", include=set(columns)) for eq in equipment])[columns]


def maintenance_frame(records: list[MaintenanceRecord]) -> pd.DataFrame:
    columns = ["id", "equipment_id", "type", "date", "technician"]
    if not records:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame([r.model_dump(mode="json", include=set(columns)) for r in records])[columns]
    df["date"] = pd.to_datetime(df["date"])
    return df


def _rate(count: int, total: int) -> int:
    return round(count / total * 100) if total else 0


def compute_system_metrics(
    equipment: list[Equipment],
    substations: list[Substation],
    alerts: list[Alert],
    maintenance: list[MaintenanceRecord],
    today: date | None = None,
) -> SystemMetrics:
    """Status counts and rates, average load and activity counters."""
    today = today or date.today()
    df = equipment_frame(equipment)
    counts = df["status"].value_counts()
    total = len(df)
    normal = int(counts.get(Status.NORMAL.value, 0))
    warning = int(counts.get(Status.WARNING.value, 0))
    error = int(counts.get(Status.ERROR.value, 0))

    this_month = sum(1 for m in maintenance if (m.date.year, m.date.month) == (today.year, today.month))

    return SystemMetrics(
        total_equipment=total,
        normal=normal,
        warning=warning,
        error=error,
        normal_rate=_rate(normal, total),
        warning_rate=_rate(warning, total),
        error_rate=_rate(error, total),
        health_rate=round(normal / total * 100, 1) if total else 0.0,
        average_load=round(float(df["load"].mean()), 1) if total else 0.0,
        total_substations=len(substations),
        active_alerts=sum(1 for a in alerts if a.status != "completed"),
        maintenance_this_month=this_month,
    )


def status_by_type(equipment: list[Equipment]) -> pd.DataFrame:
    """
    Equipment counts per type and status.

    Returns a DataFrame indexed by equipment type value with one column per
    status (normal / warning / error); every type and status is present.
    """
    df = equipment_frame(equipment)
    table = pd.crosstab(df["type"], df["status"]) if len(df) else pd.DataFrame()
    return table.reindex(
        index=[t.value for t in EquipmentType],
        columns=[s.value for s in Status],
        fill_value=0,
    ).astype(int)


def maintenance_by_month(records: list[MaintenanceRecord], months: int = 6, today: date | None = None) -> pd.DataFrame:
    """
    Maintenance counts per calendar month and type for the last `months`
    months (current month included). Index: month start timestamps.
    """
    today = today or date.today()
    end = pd.Timestamp(today).to_period("M")
    periods = pd.period_range(end=end, periods=months, freq="M")

    df = maintenance_frame(records)
    if len(df):
        df["month"] = df["date"].dt.to_period("M")
        table = pd.crosstab(df["month"], df["type"])
    else:
        table = pd.DataFrame()

    table = table.reindex(
        index=periods,
        columns=[t.value for t in MaintenanceType],
        fill_value=0,
    ).astype(int)
    table.index = table.index.to_timestamp()
    return table


def maintenance_by_type(records: list[MaintenanceRecord]) -> pd.Series:
    counts = pd.Series([r.type.value for r in records], dtype="object").value_counts()
    return counts.reindex([t.value for t in MaintenanceType], fill_value=0).astype(int)


def alerts_by_level(alerts: list[Alert], active_only: bool = False) -> pd.Series:
    """Alert counts per level (warning / error)."""
    levels = [a.level.value for a in alerts if not active_only or a.status != "completed"]
    counts = pd.Series(levels, dtype="object").value_counts()
    return counts.reindex(["warning", "error"], fill_value=0).astype(int)
