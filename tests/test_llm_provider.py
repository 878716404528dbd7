"""Tests for the LiteLLM-backed chat model."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from broker_agent.core.config import LLMConfig
from broker_agent.core.exceptions import ConfigurationError, ModelUnavailableError
from broker_agent.models import TranscriptEntry, TranscriptRole
from broker_agent.services.agent.tools import tool_schemas
from broker_agent.services.llm.provider import LLMProvider, ToolResult, parse_tool_calls


def make_response(content="", tool_calls=None):
    """Build a minimal completion response."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message)],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=5),
    )


def make_tool_call(call_id, name, arguments):
    return SimpleNamespace(
        id=call_id,
        function=SimpleNamespace(name=name, arguments=json.dumps(arguments)),
    )


@pytest.fixture
def provider():
    """Provider with a key, no retries and no fallbacks."""
    return LLMProvider(api_key="test-key", config=LLMConfig(max_attempts=1, fallback_models=[]))


def _open(provider, history=None):
    return provider.start_dialogue(
        model="gemini-2.5-flash",
        system_prompt="ROLE: test agent",
        temperature=0.4,
        tools=tool_schemas(),
        history=history or [],
    )


def test_resolve_model(provider):
    assert provider.resolve_model("gemini-2.5-flash") == "gemini/gemini-2.5-flash"
    assert provider.resolve_model("openai/gpt-4o-mini") == "openai/gpt-4o-mini"
    assert provider.resolve_model(None) == "gemini/gemini-2.5-flash"


def test_missing_api_key_is_configuration_error():
    provider = LLMProvider(api_key="", config=LLMConfig())

    with pytest.raises(ConfigurationError):
        _open(provider)


@pytest.mark.asyncio
async def test_send_builds_messages_from_history(provider):
    history = [
        TranscriptEntry(role=TranscriptRole.USER, text="Busco depto"),
        TranscriptEntry(role=TranscriptRole.MODEL, text="¿En qué zona?"),
    ]
    dialogue = _open(provider, history)

    with patch("litellm.acompletion", new=AsyncMock(return_value=make_response("Perfecto"))) as mock:
        reply = await dialogue.send("Palermo")

    assert reply.text == "Perfecto"
    assert not reply.has_tool_calls
    assert reply.tokens_input == 12

    kwargs = mock.call_args.kwargs
    assert kwargs["model"] == "gemini/gemini-2.5-flash"
    assert kwargs["api_key"] == "test-key"
    assert kwargs["temperature"] == 0.4
    assert kwargs["tools"] == tool_schemas()
    assert [m["role"] for m in kwargs["messages"]] == ["system", "user", "assistant", "user"]
    assert kwargs["messages"][-1]["content"] == "Palermo"


@pytest.mark.asyncio
async def test_tool_calls_and_results_round_trip(provider):
    dialogue = _open(provider)
    call = make_tool_call("call_a", "search_properties", {"location": "Palermo", "operationType": "rent"})
    responses = [make_response("", [call]), make_response("Encontré uno")]

    with patch("litellm.acompletion", new=AsyncMock(side_effect=responses)) as mock:
        reply = await dialogue.send("Alquiler en Palermo")
        assert reply.has_tool_calls
        assert reply.tool_calls[0].name == "search_properties"
        assert reply.tool_calls[0].arguments == {"location": "Palermo", "operationType": "rent"}

        final = await dialogue.send_tool_results(
            [ToolResult(call_id="call_a", name="search_properties", payload={"result": [], "count": 0})]
        )

    assert final.text == "Encontré uno"

    messages = mock.call_args.kwargs["messages"]
    assistant, tool = messages[-2], messages[-1]
    assert assistant["role"] == "assistant"
    assert assistant["tool_calls"][0]["id"] == "call_a"
    assert tool["role"] == "tool"
    assert tool["tool_call_id"] == "call_a"
    assert json.loads(tool["content"]) == {"result": [], "count": 0}


@pytest.mark.asyncio
async def test_unanswered_tool_calls_are_settled(provider):
    """A new user message after unanswered tool calls drops them."""
    dialogue = _open(provider)
    call = make_tool_call("call_a", "send_scheduling_link", {"propertyId": 101})
    responses = [make_response("Un momento", [call]), make_response("Hola")]

    with patch("litellm.acompletion", new=AsyncMock(side_effect=responses)) as mock:
        await dialogue.send("Quiero visitar")
        await dialogue.send("Hola?")

    messages = mock.call_args.kwargs["messages"]
    assert messages[-2] == {"role": "assistant", "content": "Un momento"}
    assert messages[-1] == {"role": "user", "content": "Hola?"}


@pytest.mark.asyncio
async def test_failed_call_leaves_dialogue_unchanged(provider):
    dialogue = _open(provider)
    before = list(dialogue.messages)

    with patch("litellm.acompletion", new=AsyncMock(side_effect=RuntimeError("503 overloaded"))):
        with pytest.raises(ModelUnavailableError) as exc_info:
            await dialogue.send("Hola")

    assert dialogue.messages == before
    assert exc_info.value.details["model"] == "gemini/gemini-2.5-flash"


@pytest.mark.asyncio
async def test_fallback_model_used_on_failure():
    provider = LLMProvider(
        api_key="test-key",
        config=LLMConfig(max_attempts=1, fallback_models=["openai/gpt-4o-mini"]),
    )
    dialogue = _open(provider)
    responses = [RuntimeError("quota"), make_response("Hola desde fallback")]

    with patch("litellm.acompletion", new=AsyncMock(side_effect=responses)) as mock:
        reply = await dialogue.send("Hola")

    assert reply.text == "Hola desde fallback"
    assert reply.model == "openai/gpt-4o-mini"
    assert [c.kwargs["model"] for c in mock.call_args_list] == [
        "gemini/gemini-2.5-flash",
        "openai/gpt-4o-mini",
    ]


def test_parse_tool_calls_tolerates_bad_arguments():
    calls = parse_tool_calls(
        [
            {"id": "c1", "function": {"name": "search_properties", "arguments": "{not json"}},
            {"function": {"name": "send_scheduling_link", "arguments": {"propertyId": 3}}},
        ]
    )

    assert calls[0].arguments == {}
    assert calls[1].id == "call_1"
    assert calls[1].arguments == {"propertyId": 3}
