"""
src/services/expert_chat.py
───────────────────────────
Free-form Q&A with an OpenAI-compatible chat-completion endpoint.

Each question is sent as:
  1. system prompt (the expert persona)
  2. system message with the live data context (equipment status, alert
     history, maintenance records, system metrics)
  3. the user's message

One request per question: explicit timeout, no automatic retries. Any
failure (network, auth, non-2xx, empty or unparseable reply) raises
ExpertChatError, which the chat page shows to the user.
"""
from __future__ import annotations

import json
from typing import Any

import openai
import structlog

from config.alerts import MAINTENANCE_TYPE_LABELS, STATUS_LABELS
from src.analytics.metrics import SystemMetrics
from src.data.models import Alert, Equipment, MaintenanceRecord

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT = (
    "You are Watt, a power-system AI expert responsible for analysing equipment "
    "status, diagnosing faults and giving maintenance advice. Base your answers "
    "on the live data and history provided and give professional, accurate and "
    "actionable recommendations. Keep answers concise and focused; use technical "
    "terms where needed but explain them. When analysing a fault, give likely "
    "causes, a risk assessment and a solution."
)

WELCOME_MESSAGE = (
    "Hello! I'm Watt. I can help you analyse equipment status, diagnose faults "
    "and plan maintenance. What can I help you with?"
)


class ExpertChatError(RuntimeError):
    """The chat completion could not produce a reply."""


def build_chat_context(
    equipment: list[Equipment],
    alerts: list[Alert],
    maintenance: list[MaintenanceRecord],
    metrics: SystemMetrics,
) -> dict[str, Any]:
    """Snapshot of the stored data handed to the model as context."""
    return {
        "equipment_status": [
            {
                "id": eq.id,
                "name": eq.name,
                "type": eq.type.value,
                "status": STATUS_LABELS[eq.status],
                "temperature": eq.temperature,
                "load": eq.load,
            }
            for eq in equipment
        ],
        "alert_history": [a.model_dump(mode="json") for a in alerts],
        "maintenance_records": [
            {
                "id": m.id,
                "equipment_id": m.equipment_id,
                "date": m.date.isoformat(),
                "type": MAINTENANCE_TYPE_LABELS[m.type],
                "content": m.content,
            }
            for m in maintenance
        ],
        "system_metrics": {
            "total_equipment": metrics.total_equipment,
            "normal_rate": metrics.normal_rate,
            "warning_rate": metrics.warning_rate,
            "error_rate": metrics.error_rate,
            "average_load": metrics.average_load,
            "total_substations": metrics.total_substations,
        },
    }


def build_messages(question: str, context: dict[str, Any]) -> list[dict[str, str]]:
    def dump(key: str) -> str:
        return json.dumps(context.get(key, []), ensure_ascii=False)

    data_message = (
        "Power system data to base your answer on:\n"
        f"Equipment status: {dump('equipment_status')}\n"
        f"Alert history: {dump('alert_history')}\n"
        f"Maintenance records: {dump('maintenance_records')}\n"
        f"System metrics: {dump('system_metrics')}"
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "system", "content": data_message},
        {"role": "user", "content": question},
    ]


class ExpertChatClient:
    def __init__(
        self,
        api_key: str = "",
        base_url: str | None = None,
        model: str = "qwen-flash",
        timeout: float = 30.0,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        client: Any = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

        if client is not None:
            self._client = client
        elif api_key:
            self._client = openai.OpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0,
            )
        else:
            self._client = None
            logger.warning("chat_client_not_initialized", reason="CHAT_API_KEY not configured")

    @classmethod
    def from_settings(cls, settings) -> ExpertChatClient:
        return cls(
            api_key=settings.CHAT_API_KEY,
            base_url=settings.CHAT_BASE_URL,
            model=settings.CHAT_MODEL,
            timeout=settings.CHAT_TIMEOUT_S,
            temperature=settings.CHAT_TEMPERATURE,
            max_tokens=settings.CHAT_MAX_TOKENS,
        )

    @property
    def configured(self) -> bool:
        return self._client is not None

    def ask(self, question: str, context: dict[str, Any]) -> str:
        """
        Send one question with its data context and return the reply text.

        Raises:
            ExpertChatError: client not configured, request failed or the
                reply had no text
        """
        if not question.strip():
            raise ExpertChatError("Question is empty")
        if self._client is None:
            raise ExpertChatError("Chat service is not configured (set CHAT_API_KEY)")

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=build_messages(question, context),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as exc:
            logger.error("chat_api_call_failed", model=self.model, error=str(exc))
            raise ExpertChatError("Failed to get a reply from the expert service") from exc

        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            logger.error("chat_reply_unparseable", model=self.model)
            raise ExpertChatError("The expert service returned an unreadable reply") from exc

        if not text or not text.strip():
            logger.error("chat_reply_empty", model=self.model)
            raise ExpertChatError("The expert service returned an empty reply")

        logger.info("chat_reply_received", model=self.model, chars=len(text))
        return text.strip()
