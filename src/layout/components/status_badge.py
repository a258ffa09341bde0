"""
src/layout/components/status_badge.py
──────────────────────────────────────
Colour-coded inline badges for equipment status, alert level, alert
workflow status and fault-session steps/commands.
"""

from dash import html

from config.alerts import (
    ALERT_STATUS_LABELS,
    STATUS_COLORS,
    STATUS_LABELS,
    AlertStatus,
)

MUTED = "#8b949e"

ALERT_STATUS_COLORS = {
    AlertStatus.PENDING: "#da3633",
    AlertStatus.PROCESSING: "#e8a020",
    AlertStatus.COMPLETED: "#2ea44f",
}

# Shared by thinking steps and commands
PROGRESS_COLORS = {
    "pending": MUTED,
    "in_progress": "#58a6ff",
    "processing": "#58a6ff",
    "sent": "#e8a020",
    "completed": "#2ea44f",
    "failed": "#da3633",
}

PROGRESS_LABELS = {
    "pending": "Pending",
    "in_progress": "In progress",
    "processing": "Sending",
    "sent": "Sent",
    "completed": "Completed",
    "failed": "Failed",
}


def badge(label: str, color: str) -> html.Span:
    """Inline badge with color-coded border."""
    return html.Span(
        label,
        style={
            "fontSize": ".65rem",
            "fontWeight": "700",
            "color": color,
            "border": f"1px solid {color}",
            "borderRadius": "4px",
            "padding": "1px 7px",
            "whiteSpace": "nowrap",
        },
    )


def status_badge(status: str) -> html.Span:
    """Equipment / substation status: normal, warning or error."""
    return badge(STATUS_LABELS.get(status, str(status).capitalize()), STATUS_COLORS.get(status, MUTED))


def alert_level_badge(level: str) -> html.Span:
    # Alert levels share the warning / error palette with equipment status
    return status_badge(level)


def alert_status_badge(status: str) -> html.Span:
    return badge(ALERT_STATUS_LABELS.get(status, str(status)), ALERT_STATUS_COLORS.get(status, MUTED))


def progress_badge(status: str) -> html.Span:
    return badge(PROGRESS_LABELS.get(status, str(status)), PROGRESS_COLORS.get(status, MUTED))
