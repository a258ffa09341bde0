"""
src/layout/main.py
───────────────────
Main application layout composition.

Contains:
  - dcc.Location for routing
  - dcc.Store holding the change-bus revision the pages listen to
  - dcc.Interval polling the revision
  - Navbar + page content container
"""
from dash import dcc, html

from config.settings import settings
from src.layout.navbar import create_navbar


def create_layout() -> html.Div:
    """Assemble the root application layout."""
    return html.Div(
        [
            # ── Client-side state stores ──────────────────────────────────────
            dcc.Store(id="store-revision", data=0),

            # ── Routing ───────────────────────────────────────────────────────
            dcc.Location(id="url", refresh=False),

            # ── Live update interval ──────────────────────────────────────────
            dcc.Interval(
                id="interval-live",
                interval=settings.UPDATE_INTERVAL_MS,
                n_intervals=0,
            ),

            # ── Navigation bar ────────────────────────────────────────────────
            create_navbar(),

            # ── Page content ──────────────────────────────────────────────────
            html.Div(
                id="page-content",
                style={"minHeight": "calc(100vh - 60px)"},
            ),

            # ── Footer ────────────────────────────────────────────────────────
            html.Footer(
                [
                    html.Span("Grid Equipment Monitor"),
                    html.Span(" · "),
                    html.Span("Substations · Equipment · Alerts · Maintenance"),
                    html.Span(" · "),
                    html.Span("Simulated data"),
                ],
                style={
                    "textAlign": "center",
                    "padding": ".7rem",
                    "fontSize": ".72rem",
                    "color": "#8b949e",
                    "borderTop": "1px solid #30363d",
                    "marginTop": "2rem",
                },
            ),
        ],
        style={"backgroundColor": "#0d1117", "minHeight": "100vh", "color": "#c9d1d9"},
    )
