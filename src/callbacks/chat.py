"""
src/callbacks/chat.py
──────────────────────
Expert chat page callbacks.
"""
from __future__ import annotations

from datetime import date

import dash_bootstrap_components as dbc
from dash import Input, Output, State, dcc, html, no_update
from dash.exceptions import PreventUpdate

from src.analytics.metrics import compute_system_metrics
from src.services.expert_chat import ExpertChatError, build_chat_context

BORDER = "#30363d"
ACCENT = "#58a6ff"


def _bubble(message: dict) -> html.Div:
    user = message["role"] == "user"
    return html.Div(
        html.Div(
            dcc.Markdown(message["content"], style={"fontSize": ".85rem"}),
            style={
                "backgroundColor": "#1f6feb33" if user else "#21262d",
                "border": f"1px solid {ACCENT if user else BORDER}",
                "borderRadius": "8px",
                "padding": "8px 12px 0",
                "maxWidth": "80%",
            },
        ),
        style={"display": "flex", "justifyContent": "flex-end" if user else "flex-start", "marginBottom": "8px"},
    )


def register(app, runtime) -> None:
    chat = runtime.chat

    @app.callback(
        [
            Output("chat-messages", "children"),
            Output("chat-config-notice", "children"),
        ],
        Input("chat-history", "data"),
    )
    def render_history(history: list[dict]):
        notice = None
        if not chat.configured:
            notice = dbc.Alert(
                "The expert service is not configured. Set CHAT_API_KEY to enable answers.",
                color="warning",
                className="py-2",
            )
        return [_bubble(m) for m in history or []], notice

    @app.callback(
        [
            Output("chat-history", "data"),
            Output("chat-input", "value"),
            Output("chat-error", "children"),
        ],
        [
            Input("chat-send-btn", "n_clicks"),
            Input("chat-input", "n_submit"),
        ],
        [
            State("chat-input", "value"),
            State("chat-history", "data"),
        ],
        prevent_initial_call=True,
    )
    def send_question(n_clicks, n_submit, question: str, history: list[dict]):
        question = (question or "").strip()
        if not question:
            raise PreventUpdate

        doc = runtime.store.load()
        equipment = list(doc.equipment.values())
        metrics = compute_system_metrics(
            equipment, list(doc.substations.values()), doc.alerts, doc.maintenance, today=date.today()
        )
        context = build_chat_context(equipment, doc.alerts, doc.maintenance, metrics)

        history = list(history or [])
        try:
            reply = chat.ask(question, context)
        except ExpertChatError as exc:
            # Keep the question in the input so it can be re-sent
            return no_update, question, dbc.Alert(str(exc), color="danger", dismissable=True, className="py-2")

        history += [{"role": "user", "content": question}, {"role": "assistant", "content": reply}]
        return history, "", None
