"""
src/callbacks/fault.py
───────────────────────
Fault-processing page callbacks.

Two callbacks share the session through the engine's cache:

  render  ← fault-interval tick / fault-version bump
            opens the session, applies due transitions, draws everything
  actions ← start / confirm / per-command buttons
            mutates the session and bumps fault-version to force a render
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
import structlog
from dash import ALL, Input, Output, State, ctx, dcc, html
from dash.exceptions import PreventUpdate

from config.equipment import EQUIPMENT_TYPE_LABELS
from src.analytics.thresholds import SENSORS, get_static_thresholds
from src.layout.components.sensor_gauge import sensor_gauge
from src.layout.components.status_badge import badge, progress_badge, status_badge
from src.workflow.engine import WorkflowStateError
from src.workflow.session import CommandStatus, FaultSession, SessionStage, StepStatus

BORDER = "#30363d"
MUTED = "#8b949e"
ACCENT = "#58a6ff"

logger = structlog.get_logger(__name__)

SENSOR_LABELS = {
    "temperature": "Temperature",
    "current": "Current",
    "voltage": "Voltage",
    "vibration": "Vibration",
}

STAGE_LABELS = {
    SessionStage.IDLE: "Not started",
    SessionStage.ANALYZING: "Analysing",
    SessionStage.AWAITING_COMMANDS: "Awaiting commands",
    SessionStage.VERIFYING: "Verifying",
    SessionStage.RESOLVED: "Resolved",
    SessionStage.CLOSED: "Closed",
}

# Stages where nothing changes without a user action
_IDLE_STAGES = {SessionStage.IDLE, SessionStage.RESOLVED, SessionStage.CLOSED}


def _sensor_values(session: FaultSession, equipment) -> dict[str, float]:
    if session.sensors is not None:
        return session.sensors.model_dump(include=set(SENSORS))
    return {
        "temperature": equipment.temperature,
        "current": equipment.current,
        "voltage": equipment.voltage,
    }


def _sensor_row(session: FaultSession, equipment) -> html.Div:
    values = _sensor_values(session, equipment)
    cols = [
        dbc.Col(sensor_gauge(SENSOR_LABELS[name], values[name], get_static_thresholds(name)), xs=6, md=3)
        for name in SENSORS
        if name in values
    ]
    visual = None
    if session.sensors is not None and session.sensors.has_visual_anomaly:
        visual = dbc.Alert(
            [html.I(className="fa-solid fa-camera", style={"marginRight": "8px"}),
             "Camera inspection flagged an abnormal equipment appearance."],
            color="warning",
            className="py-2 mt-2",
        )
    return html.Div([dbc.Row(cols, className="g-3"), visual])


def _steps_view(session: FaultSession) -> html.Div:
    items = []
    for step in session.thinking_steps:
        active = step.status == StepStatus.IN_PROGRESS
        icon = "fa-spinner fa-spin" if active else step.icon
        items.append(
            html.Div(
                [
                    html.I(className=f"fa-solid {icon}",
                           style={"width": "22px", "color": ACCENT if active else MUTED, "marginTop": "3px"}),
                    html.Div(
                        [
                            html.Div(
                                [html.Span(step.title, style={"fontWeight": "600", "fontSize": ".85rem"}),
                                 progress_badge(step.status.value)],
                                style={"display": "flex", "justifyContent": "space-between"},
                            ),
                            html.Div(step.detail or step.description,
                                     style={"fontSize": ".75rem", "color": MUTED, "marginTop": "2px"}),
                        ],
                        style={"flex": "1"},
                    ),
                ],
                style={"display": "flex", "gap": "8px", "padding": "8px 0", "borderBottom": f"1px solid {BORDER}"},
            )
        )
    return html.Div(items)


def _command_button(command) -> dbc.Button:
    failed = command.status == CommandStatus.FAILED
    idle = command.status in (CommandStatus.PENDING, CommandStatus.FAILED)
    return dbc.Button(
        "Retry" if failed else "Send",
        id={"type": "fault-cmd", "index": command.id},
        color="danger" if failed else "primary",
        outline=True,
        size="sm",
        n_clicks=0,
        disabled=not idle,
    )


def _solution_view(session: FaultSession) -> html.Div:
    solution = session.visible_solution
    if solution is None:
        text = "Start the analysis to generate a solution." if session.stage == SessionStage.IDLE \
            else "Generating solution..."
        return html.Div(text, style={"color": MUTED, "padding": "16px", "textAlign": "center"})

    commands = [
        html.Div(
            [
                html.Div(
                    [
                        html.Div(command.name, style={"fontWeight": "600", "fontSize": ".82rem"}),
                        html.Code(command.content, style={"fontSize": ".7rem", "color": MUTED}),
                        html.Div(f"Attempts: {command.attempts}", style={"fontSize": ".65rem", "color": MUTED})
                        if command.attempts > 1 else None,
                    ],
                    style={"flex": "1"},
                ),
                progress_badge(command.status.value),
                _command_button(command),
            ],
            style={"display": "flex", "alignItems": "center", "gap": "10px",
                   "padding": "8px 0", "borderBottom": f"1px solid {BORDER}"},
        )
        for command in solution.commands
    ]
    return html.Div(
        [
            html.Div("Diagnosis", style={"fontSize": ".68rem", "color": MUTED, "textTransform": "uppercase"}),
            html.P(solution.diagnosis, style={"fontSize": ".85rem", "whiteSpace": "pre-wrap"}),
            html.Div("Procedure", style={"fontSize": ".68rem", "color": MUTED, "textTransform": "uppercase"}),
            html.Pre(solution.solution, style={"fontSize": ".78rem", "color": "#c9d1d9", "whiteSpace": "pre-wrap"}),
            html.Div("Commands", style={"fontSize": ".68rem", "color": MUTED, "textTransform": "uppercase"}),
            html.Div(commands),
        ]
    )


def _header(session: FaultSession, equipment) -> html.Div:
    return html.Div(
        [
            html.Div(
                [html.H2(f"Fault processing: {session.equipment_name}", className="page-title",
                         style={"marginRight": "12px"}),
                 status_badge(equipment.status)],
                style={"display": "flex", "alignItems": "center"},
            ),
            html.P(
                [
                    f"{equipment.id} · {EQUIPMENT_TYPE_LABELS.get(equipment.type, equipment.type.value)} · ",
                    badge(STAGE_LABELS[session.stage], ACCENT),
                    f" · alert {session.alert_id}" if session.alert_id else "",
                ],
                className="page-subtitle",
            ),
        ]
    )


def register(app, runtime) -> None:
    engine = runtime.engine
    repository = runtime.repository

    @app.callback(
        [
            Output("fault-header", "children"),
            Output("fault-sensors", "children"),
            Output("fault-steps", "children"),
            Output("fault-solution", "children"),
            Output("fault-start-btn", "disabled"),
            Output("fault-complete-btn", "disabled"),
            Output("fault-interval", "disabled"),
        ],
        [
            Input("fault-interval", "n_intervals"),
            Input("fault-version", "data"),
        ],
        State("fault-context", "data"),
    )
    def render_session(n_intervals: int, version: int, context: dict):
        equipment_id = (context or {}).get("equipment_id") or ""
        with runtime.workflow_lock:
            try:
                session = engine.open(equipment_id, context.get("alert_id"))
            except WorkflowStateError as exc:
                error = dbc.Alert(str(exc), color="danger")
                return html.H2("Fault processing", className="page-title"), error, "", "", True, True, True
            engine.tick(session)

        equipment = repository.get_equipment(equipment_id)
        return (
            _header(session, equipment),
            _sensor_row(session, equipment),
            _steps_view(session),
            _solution_view(session),
            session.stage != SessionStage.IDLE,
            session.stage != SessionStage.RESOLVED,
            session.stage in _IDLE_STAGES,
        )

    @app.callback(
        [
            Output("fault-version", "data"),
            Output("fault-feedback", "children"),
        ],
        [
            Input("fault-start-btn", "n_clicks"),
            Input("fault-complete-btn", "n_clicks"),
            Input({"type": "fault-cmd", "index": ALL}, "n_clicks"),
        ],
        [
            State("fault-context", "data"),
            State("fault-version", "data"),
        ],
        prevent_initial_call=True,
    )
    def on_fault_action(start_clicks, complete_clicks, command_clicks, context: dict, version: int):
        # Re-rendered command buttons arrive with n_clicks=0; only real clicks act
        if not ctx.triggered or not ctx.triggered[0]["value"]:
            raise PreventUpdate

        trigger = ctx.triggered_id
        feedback = None
        with runtime.workflow_lock:
            try:
                session = engine.open(context["equipment_id"], context.get("alert_id"))
                if trigger == "fault-start-btn":
                    engine.start(session)
                elif trigger == "fault-complete-btn":
                    record = engine.complete(session)
                    feedback = dbc.Alert(
                        [
                            f"Fault cleared. Repair record {record.id} logged. ",
                            dcc.Link("Back to alerts", href="/alerts", style={"color": ACCENT}),
                        ],
                        color="success",
                        className="py-2",
                    )
                else:
                    engine.dispatch_command(session, trigger["index"])
            except WorkflowStateError as exc:
                logger.warning("fault_action_rejected", equipment_id=context.get("equipment_id"), reason=str(exc))
                return version, dbc.Alert(str(exc), color="warning", duration=4000, className="py-2")

        return (version or 0) + 1, feedback
