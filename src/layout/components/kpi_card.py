"""
src/layout/components/kpi_card.py
──────────────────────────────────
KPI indicator cards and the compact telemetry strip for equipment.
"""
from dash import html

from src.data.models import Equipment

CARD_BG = "#161b22"
MUTED = "#8b949e"


def kpi_card(
    label: str,
    value: str,
    color: str = "#c9d1d9",
    icon: str = "",
    sub_label: str = "",
    border_color: str = "#30363d",
) -> html.Div:
    """
    Compact KPI metric card.

    Args:
        label: Metric name (shown above value)
        value: Formatted value string
        color: Value text color (reflects status)
        icon: Optional Font Awesome class, e.g. "fa-microchip"
        sub_label: Small secondary label below value
        border_color: Card border color (can reflect severity)
    """
    header = [html.Span(label)]
    if icon:
        header.insert(0, html.I(className=f"fa-solid {icon}", style={"marginRight": "6px", "color": color}))

    children = [
        html.Div(header, style={"fontSize": ".68rem", "color": MUTED, "textTransform": "uppercase", "letterSpacing": ".06em"}),
        html.Div(value, style={"fontSize": "1.4rem", "fontWeight": "700", "color": color, "lineHeight": "1.2", "marginTop": "2px"}),
    ]
    if sub_label:
        children.append(html.Div(sub_label, style={"fontSize": ".68rem", "color": MUTED, "marginTop": "2px"}))

    return html.Div(
        children,
        style={
            "backgroundColor": CARD_BG,
            "border": f"1px solid {border_color}",
            "borderRadius": "8px",
            "padding": "14px 16px",
            "minWidth": "120px",
        },
    )


def mini_kpi(label: str, value: str, color: str = "#c9d1d9") -> html.Div:
    """Compact inline KPI for status cards."""
    return html.Div([
        html.Div(label, style={"fontSize": ".62rem", "color": MUTED, "textTransform": "uppercase"}),
        html.Div(value, style={"fontSize": ".85rem", "fontWeight": "700", "color": color}),
    ])


def telemetry_strip(equipment: Equipment) -> html.Div:
    """Temperature / voltage / current / load of one unit in a single row."""
    return html.Div(
        [
            mini_kpi("Temperature", f"{equipment.temperature:g} °C"),
            mini_kpi("Voltage", f"{equipment.voltage:g} kV"),
            mini_kpi("Current", f"{equipment.current:g} A"),
            mini_kpi("Load", f"{equipment.load:g} %"),
        ],
        style={"display": "grid", "gridTemplateColumns": "repeat(4, 1fr)", "gap": "8px"},
    )
