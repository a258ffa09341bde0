"""
config/settings.py
──────────────────
Application configuration loaded from environment variables.
"""
import os
from dataclasses import dataclass


@dataclass
class Settings:
    # Server
    DEBUG: bool = os.getenv("DEBUG", "true").lower() == "true"
    PORT: int = int(os.getenv("PORT", "8050"))
    HOST: str = os.getenv("HOST", "0.0.0.0")

    # Key-value slot (SQLite file, ":memory:" for tests)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "grid_monitor.db")
    DOCUMENT_KEY: str = os.getenv("DOCUMENT_KEY", "power_grid_db")

    # Live refresh intervals in milliseconds
    UPDATE_INTERVAL_MS: int = int(os.getenv("UPDATE_INTERVAL_MS", "2000"))
    WORKFLOW_TICK_MS: int = int(os.getenv("WORKFLOW_TICK_MS", "1000"))

    # Fault-resolution timeline (seconds)
    WORKFLOW_START_DELAY_S: float = float(os.getenv("WORKFLOW_START_DELAY_S", "1.0"))
    WORKFLOW_STEP_DWELL_S: float = float(os.getenv("WORKFLOW_STEP_DWELL_S", "2.0"))
    WORKFLOW_STEP_GAP_S: float = float(os.getenv("WORKFLOW_STEP_GAP_S", "1.0"))
    WORKFLOW_FINALIZE_DELAY_S: float = float(os.getenv("WORKFLOW_FINALIZE_DELAY_S", "2.0"))
    COMMAND_SEND_DELAY_S: float = float(os.getenv("COMMAND_SEND_DELAY_S", "1.5"))
    COMMAND_EXECUTION_DELAY_S: float = float(os.getenv("COMMAND_EXECUTION_DELAY_S", "1.0"))
    COMMAND_FAILURE_RATE: float = float(os.getenv("COMMAND_FAILURE_RATE", "0.05"))

    # Maintenance scheduling
    MAINTENANCE_INTERVAL_MONTHS: int = int(os.getenv("MAINTENANCE_INTERVAL_MONTHS", "3"))

    # Simulation (alert simulator + telemetry restoration draws)
    SIMULATION_SEED: int | None = int(os.environ["SIMULATION_SEED"]) if os.getenv("SIMULATION_SEED") else None

    # Expert chat (OpenAI-compatible chat completion endpoint)
    CHAT_API_KEY: str = os.getenv("CHAT_API_KEY", "")
    CHAT_BASE_URL: str = os.getenv("CHAT_BASE_URL", "https://dashscope.aliyuncs.com/compatible-mode/v1")
    CHAT_MODEL: str = os.getenv("CHAT_MODEL", "qwen-flash")
    CHAT_TIMEOUT_S: float = float(os.getenv("CHAT_TIMEOUT_S", "30"))
    CHAT_TEMPERATURE: float = float(os.getenv("CHAT_TEMPERATURE", "0.7"))
    CHAT_MAX_TOKENS: int = int(os.getenv("CHAT_MAX_TOKENS", "1000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
