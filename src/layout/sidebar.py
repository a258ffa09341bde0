"""
src/layout/sidebar.py
──────────────────────
Equipment filter sidebar (shown on the /equipment list page).
"""
import dash_bootstrap_components as dbc
from dash import dcc, html

from config.alerts import STATUS_LABELS, Status
from config.equipment import EQUIPMENT_TYPE_LABELS, EquipmentType
from src.data.models import Substation

CARD_BG = "#161b22"
BORDER = "#30363d"
MUTED = "#8b949e"

_LABEL_STYLE = {
    "fontSize": ".68rem",
    "color": MUTED,
    "textTransform": "uppercase",
    "letterSpacing": ".08em",
    "marginBottom": "6px",
    "marginTop": "12px",
}


def _all(options: list[dict]) -> list[dict]:
    return [{"label": "All", "value": "all"}, *options]


def create_sidebar(substations: list[Substation]) -> html.Div:
    """Substation / type / status filters and a free-text search box."""
    return html.Div(
        [
            html.Div("Search", style={**_LABEL_STYLE, "marginTop": "0"}),
            dbc.Input(
                id="eq-filter-search",
                type="text",
                placeholder="Name or ID",
                debounce=True,
                size="sm",
            ),
            html.Div("Substation", style=_LABEL_STYLE),
            dcc.Dropdown(
                id="eq-filter-substation",
                options=_all([{"label": s.name, "value": s.id} for s in substations]),
                value="all",
                clearable=False,
                className="dark-dropdown",
                style={"fontSize": ".85rem"},
            ),
            html.Div("Type", style=_LABEL_STYLE),
            dcc.Dropdown(
                id="eq-filter-type",
                options=_all([{"label": EQUIPMENT_TYPE_LABELS[t], "value": t.value} for t in EquipmentType]),
                value="all",
                clearable=False,
                className="dark-dropdown",
                style={"fontSize": ".85rem"},
            ),
            html.Div("Status", style=_LABEL_STYLE),
            dbc.RadioItems(
                id="eq-filter-status",
                options=_all([{"label": STATUS_LABELS[s], "value": s.value} for s in Status]),
                value="all",
                inputStyle={"marginRight": "8px"},
                labelStyle={"cursor": "pointer", "marginBottom": "4px"},
                style={"display": "flex", "flexDirection": "column", "gap": "2px"},
            ),
        ],
        style={
            "backgroundColor": CARD_BG,
            "border": f"1px solid {BORDER}",
            "borderRadius": "8px",
            "padding": "14px",
        },
    )
