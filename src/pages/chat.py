"""
src/pages/chat.py
──────────────────
Expert chat page: free-form questions answered with the live grid data.
"""
import dash_bootstrap_components as dbc
from dash import dcc, html

from src.services.expert_chat import WELCOME_MESSAGE

MUTED = "#8b949e"


def layout() -> html.Div:
    return html.Div(
        [
            dcc.Store(id="chat-history", data=[{"role": "assistant", "content": WELCOME_MESSAGE}]),
            html.Div(
                [
                    html.H2("Expert Chat", className="page-title"),
                    html.P("Ask about equipment status, faults and maintenance", className="page-subtitle"),
                ],
                className="page-header",
            ),
            html.Div(id="chat-config-notice"),
            html.Div(
                [
                    dcc.Loading(
                        html.Div(id="chat-messages", style={"minHeight": "320px", "maxHeight": "60vh", "overflowY": "auto"}),
                        type="dot",
                        color="#58a6ff",
                    ),
                    html.Div(id="chat-error", className="mt-2"),
                    dbc.InputGroup(
                        [
                            dbc.Input(id="chat-input", placeholder="Type a question...", debounce=False),
                            dbc.Button(
                                [html.I(className="fa-solid fa-paper-plane", style={"marginRight": "6px"}), "Send"],
                                id="chat-send-btn",
                                color="primary",
                                n_clicks=0,
                            ),
                        ],
                        className="mt-3",
                    ),
                    html.Div(
                        "Answers are generated from the current equipment, alert and maintenance data.",
                        style={"fontSize": ".68rem", "color": MUTED, "marginTop": "6px"},
                    ),
                ],
                className="chart-card",
            ),
        ],
        style={"padding": "1.5rem"},
    )
