import json

import httpx
import pytest

from querygate.llm.anthropic_adapter import ANTHROPIC_VERSION, AnthropicAdapter
from querygate.llm.openai_adapter import OpenAIAdapter
from querygate.schema.supplier import TableDescription

SCHEMA = {
    "users": TableDescription(columns=["id", "name", "state"], description="Customers"),
}


def _openai_reply(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _anthropic_reply(text):
    return {"content": [{"type": "text", "text": text}]}


def _transport(handler, calls):
    def _recording(request):
        calls.append(request)
        return handler(request)

    return httpx.MockTransport(_recording)


@pytest.mark.asyncio
async def test_openai_adapter_builds_json_mode_request():
    calls = []
    content = json.dumps(
        {
            "sql": "SELECT id, name FROM users WHERE state = 'TX' LIMIT 20",
            "confidence": 0.92,
            "reasoning": "Filter users by state.",
            "tables_used": ["users"],
        }
    )
    adapter = OpenAIAdapter(
        api_key="sk-test",
        model="gpt-4o-mini",
        transport=_transport(lambda request: httpx.Response(200, json=_openai_reply(content)), calls),
    )

    generation = await adapter.generate("users in texas", SCHEMA)

    assert generation.sql.startswith("SELECT id, name FROM users")
    assert generation.confidence == 0.92
    assert generation.tables_used == ["users"]

    request = calls[0]
    assert request.url == "https://api.openai.com/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body["model"] == "gpt-4o-mini"
    assert body["temperature"] == 0.2
    assert body["max_tokens"] == 2000
    assert body["response_format"] == {"type": "json_object"}
    assert body["messages"][0]["role"] == "system"
    assert "users: id, name, state (Customers)" in body["messages"][0]["content"]
    assert "users in texas" in body["messages"][1]["content"]


@pytest.mark.asyncio
async def test_anthropic_adapter_sends_system_and_version_header():
    calls = []
    text = '```json\n{"sql": "SELECT name FROM users LIMIT 5", "confidence": 0.7}\n```'
    adapter = AnthropicAdapter(
        api_key="ak-test",
        model="claude-3-5-haiku-20241022",
        transport=_transport(lambda request: httpx.Response(200, json=_anthropic_reply(text)), calls),
    )

    generation = await adapter.generate("five user names", SCHEMA)

    assert generation.sql == "SELECT name FROM users LIMIT 5"
    assert generation.confidence == 0.7

    request = calls[0]
    assert request.url == "https://api.anthropic.com/v1/messages"
    assert request.headers["x-api-key"] == "ak-test"
    assert request.headers["anthropic-version"] == ANTHROPIC_VERSION
    body = json.loads(request.content)
    assert body["max_tokens"] == 1000
    assert body["temperature"] == 0.3
    assert "Database schema:" in body["system"]
    assert body["messages"] == [
        {"role": "user", "content": body["messages"][0]["content"]}
    ]


@pytest.mark.asyncio
async def test_confidence_out_of_range_is_clamped():
    content = '{"sql": "SELECT 1", "confidence": 3}'
    adapter = OpenAIAdapter(
        api_key="sk-test",
        model="gpt-4o-mini",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=_openai_reply(content))),
    )

    generation = await adapter.generate("anything", SCHEMA)

    assert generation.confidence == 1.0


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"error": {"message": "invalid api key"}}),
        httpx.Response(500, text="upstream failure"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json=_openai_reply("I cannot help with that.")),
        httpx.Response(200, json=_openai_reply('{"sql": "SELECT 1", "confidence": "sure"}')),
    ],
)
@pytest.mark.asyncio
async def test_openai_failures_collapse_to_none(response):
    adapter = OpenAIAdapter(
        api_key="sk-test",
        model="gpt-4o-mini",
        transport=httpx.MockTransport(lambda request: response),
    )

    assert await adapter.generate("users in texas", SCHEMA) is None


@pytest.mark.asyncio
async def test_network_errors_collapse_to_none():
    def _refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    adapter = AnthropicAdapter(
        api_key="ak-test",
        model="claude-3-5-haiku-20241022",
        transport=httpx.MockTransport(_refuse),
    )

    assert await adapter.generate("users in texas", SCHEMA) is None


@pytest.mark.asyncio
async def test_anthropic_non_text_block_collapses_to_none():
    adapter = AnthropicAdapter(
        api_key="ak-test",
        model="claude-3-5-haiku-20241022",
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"content": [{"type": "tool_use"}]})
        ),
    )

    assert await adapter.generate("users in texas", SCHEMA) is None


@pytest.mark.asyncio
async def test_empty_schema_collapses_to_none_without_a_request():
    calls = []
    adapter = OpenAIAdapter(
        api_key="sk-test",
        model="gpt-4o-mini",
        transport=_transport(lambda request: httpx.Response(200, json={}), calls),
    )

    assert await adapter.generate("users in texas", {}) is None
    assert calls == []


@pytest.mark.asyncio
async def test_each_attempt_makes_exactly_one_call():
    calls = []
    adapter = OpenAIAdapter(
        api_key="sk-test",
        model="gpt-4o-mini",
        transport=_transport(lambda request: httpx.Response(503, text="busy"), calls),
    )

    await adapter.generate("users in texas", SCHEMA)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_connection_test_reports_success_and_failure():
    calls = []
    ok = OpenAIAdapter(
        api_key="sk-test",
        model="gpt-4o-mini",
        transport=_transport(lambda request: httpx.Response(200, json=_openai_reply("hi")), calls),
    )
    broken = AnthropicAdapter(
        api_key="ak-test",
        model="claude-3-5-haiku-20241022",
        transport=httpx.MockTransport(lambda request: httpx.Response(401, json={})),
    )

    assert await ok.test_connection() is True
    assert await broken.test_connection() is False
    body = json.loads(calls[0].content)
    assert body["max_tokens"] == 5
    assert "response_format" not in body
