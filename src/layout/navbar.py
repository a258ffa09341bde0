"""
src/layout/navbar.py
─────────────────────
Navigation bar with page links and the storage-recovery notice.
"""

import dash_bootstrap_components as dbc
from dash import html

NAV_BG = "#0d1117"
BORDER = "#30363d"
ACCENT = "#58a6ff"

NAV_LINKS = [
    ("Overview", "/", "nav-overview"),
    ("Equipment", "/equipment", "nav-equipment"),
    ("Alerts", "/alerts", "nav-alerts"),
    ("Reports", "/reports", "nav-reports"),
    ("Expert chat", "/chat", "nav-chat"),
]


def create_navbar() -> html.Div:
    navbar = dbc.Navbar(
        dbc.Container(
            [
                # Brand
                dbc.NavbarBrand(
                    [
                        html.Span("⚡", style={"marginRight": "8px", "fontSize": "1.1rem"}),
                        html.Span(
                            "Grid Monitor", style={"fontWeight": "700", "letterSpacing": ".04em"}
                        ),
                    ],
                    href="/",
                    style={"color": ACCENT, "textDecoration": "none"},
                ),
                dbc.NavbarToggler(id="navbar-toggler", n_clicks=0),
                dbc.Collapse(
                    dbc.Nav(
                        [
                            dbc.NavItem(dbc.NavLink(label, href=href, id=nav_id, active="partial" if href != "/" else "exact"))
                            for label, href, nav_id in NAV_LINKS
                        ],
                        className="ms-auto",
                        navbar=True,
                    ),
                    id="navbar-collapse",
                    navbar=True,
                    is_open=False,
                ),
            ],
            fluid=True,
        ),
        color=NAV_BG,
        dark=True,
        sticky="top",
        style={"borderBottom": f"1px solid {BORDER}", "padding": ".5rem 1rem"},
    )

    # Shown once when the stored document was unreadable and had to be reseeded
    recovery_notice = dbc.Alert(
        "Stored data could not be read and was replaced with the initial dataset. "
        "Previous changes have been lost.",
        id="recovery-notice",
        color="warning",
        dismissable=True,
        is_open=False,
        style={"margin": ".75rem 1.5rem 0", "fontSize": ".85rem"},
    )

    return html.Div([navbar, recovery_notice])
