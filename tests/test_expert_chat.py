"""
tests/test_expert_chat.py
──────────────────────────
Tests for the expert chat client and its data context.

The OpenAI client is replaced by a stub exposing chat.completions.create.
"""
import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from src.analytics.metrics import compute_system_metrics
from src.services.expert_chat import (
    SYSTEM_PROMPT,
    ExpertChatClient,
    ExpertChatError,
    build_chat_context,
    build_messages,
)


class StubCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(**stub_kwargs) -> tuple[ExpertChatClient, StubCompletions]:
    completions = StubCompletions(**stub_kwargs)
    stub = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return ExpertChatClient(model="test-model", client=stub), completions


@pytest.fixture
def context(store):
    doc = store.load()
    equipment = list(doc.equipment.values())
    metrics = compute_system_metrics(equipment, list(doc.substations.values()), doc.alerts, doc.maintenance)
    return build_chat_context(equipment, doc.alerts, doc.maintenance, metrics)


class TestContext:
    def test_sections(self, context):
        assert set(context) == {"equipment_status", "alert_history", "maintenance_records", "system_metrics"}
        assert len(context["equipment_status"]) == 5
        assert context["system_metrics"]["total_equipment"] == 5

    def test_context_is_json_serialisable(self, context):
        json.dumps(context)

    def test_messages_layout(self, context):
        messages = build_messages("Why is CB-24 faulted?", context)
        assert [m["role"] for m in messages] == ["system", "system", "user"]
        assert messages[0]["content"] == SYSTEM_PROMPT
        assert "Circuit breaker CB-24" in messages[1]["content"]
        assert messages[2]["content"] == "Why is CB-24 faulted?"


class TestAsk:
    def test_returns_stripped_reply(self, context):
        client, completions = _client(content="  Check the interrupter.  ")
        assert client.ask("What should I check?", context) == "Check the interrupter."
        call = completions.calls[0]
        assert call["model"] == "test-model"
        assert call["max_tokens"] == 1000
        assert len(call["messages"]) == 3

    def test_empty_question(self, context):
        client, completions = _client(content="x")
        with pytest.raises(ExpertChatError):
            client.ask("   ", context)
        assert completions.calls == []

    def test_not_configured(self, context):
        client = ExpertChatClient(api_key="")
        assert client.configured is False
        with pytest.raises(ExpertChatError):
            client.ask("Hello?", context)

    def test_api_error(self, context):
        error = openai.APIConnectionError(request=httpx.Request("POST", "http://chat.invalid/v1/chat/completions"))
        client, _ = _client(error=error)
        with pytest.raises(ExpertChatError) as exc_info:
            client.ask("Hello?", context)
        assert exc_info.value.__cause__ is error

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_empty_reply(self, context, content):
        client, _ = _client(content=content)
        with pytest.raises(ExpertChatError):
            client.ask("Hello?", context)

    def test_unparseable_reply(self, context):
        stub = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(
            create=lambda **kwargs: SimpleNamespace(choices=[])
        )))
        with pytest.raises(ExpertChatError):
            ExpertChatClient(client=stub).ask("Hello?", context)

    def test_configured_with_key(self):
        assert ExpertChatClient(api_key="sk-test", base_url="http://chat.invalid/v1").configured is True
