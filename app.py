"""
app.py
──────
Grid Equipment Monitor — Application Entry Point.

Startup sequence:
  1. Configure logging and build the runtime (store, repository, change bus,
     fault-resolution engine, expert chat); an empty database is seeded
  2. Create Dash app with DARKLY bootstrap theme
  3. Register all callbacks
  4. Run dev server (or expose `server` for gunicorn in production)
"""
import dash
import dash_bootstrap_components as dbc
import structlog

from config.logging_setup import configure_logging
from config.settings import settings
from src.layout.main import create_layout
from src.runtime import build_runtime

# ── 1. Runtime ────────────────────────────────────────────────────────────────
configure_logging(settings.LOG_LEVEL)
logger = structlog.get_logger("app")
runtime = build_runtime(settings)

# ── 2. Dash app ───────────────────────────────────────────────────────────────
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.DARKLY, dbc.icons.FONT_AWESOME],
    suppress_callback_exceptions=True,
    meta_tags=[{"name": "viewport", "content": "width=device-width, initial-scale=1"}],
    title="Grid Monitor",
)

server = app.server  # gunicorn entry point
app.layout = create_layout()

# ── 3. Register callbacks ─────────────────────────────────────────────────────
from src.callbacks import alerts, chat, equipment, fault, navigation, reports

navigation.register(app, runtime)
equipment.register(app, runtime)
alerts.register(app, runtime)
fault.register(app, runtime)
reports.register(app, runtime)
chat.register(app, runtime)

# ── 4. Run ────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    logger.info("server_starting", host=settings.HOST, port=settings.PORT, debug=settings.DEBUG)
    app.run(
        debug=settings.DEBUG,
        host=settings.HOST,
        port=settings.PORT,
    )
