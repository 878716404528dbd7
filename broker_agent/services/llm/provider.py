"""LLM Provider using LiteLLM for multi-provider abstraction.

The orchestration core talks to the model through two small interfaces:
``ChatModel`` opens a ``Dialogue``; a dialogue performs one model round-trip
per user message and one per batch of tool results.
"""

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import litellm
import structlog
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from broker_agent.core.config import LLMConfig, settings
from broker_agent.core.exceptions import ConfigurationError, ModelUnavailableError
from broker_agent.models import TranscriptEntry

logger = structlog.get_logger()

litellm.set_verbose = settings.app_debug


@dataclass
class ToolCall:
    """A model request to invoke a tool."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    raw_arguments: str = ""


@dataclass
class ToolResult:
    """Return value of one tool call, correlated by call id."""

    call_id: str
    name: str
    payload: dict[str, Any]


@dataclass
class ModelReply:
    """One model response: text and zero or more tool calls."""

    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    model: str = ""
    tokens_input: int = 0
    tokens_output: int = 0
    latency_ms: float = 0.0

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


class Dialogue(ABC):
    """A live conversation with the model. Not safe for concurrent use."""

    @abstractmethod
    async def send(self, text: str) -> ModelReply:
        """Append a user message and get the model's reply."""
        ...

    @abstractmethod
    async def send_tool_results(self, results: list[ToolResult]) -> ModelReply:
        """Submit a batch of tool results in one round-trip."""
        ...


class ChatModel(ABC):
    """Factory for model dialogues."""

    @abstractmethod
    def start_dialogue(
        self,
        model: str,
        system_prompt: str,
        temperature: float,
        tools: list[dict[str, Any]],
        history: list[TranscriptEntry],
    ) -> Dialogue:
        """Open a dialogue seeded with a system prompt and prior transcript.

        Raises:
            ConfigurationError: The provider cannot be used as configured
        """
        ...


def parse_tool_calls(raw_calls: Any) -> list[ToolCall]:
    """Parse OpenAI-format tool calls from a completion message."""
    calls: list[ToolCall] = []
    for raw in raw_calls or []:
        function = getattr(raw, "function", None)
        if function is None and isinstance(raw, dict):
            function = raw.get("function", {})
            call_id = raw.get("id", "")
            name = function.get("name", "")
            raw_arguments = function.get("arguments") or "{}"
        else:
            call_id = getattr(raw, "id", "") or ""
            name = getattr(function, "name", "") or ""
            raw_arguments = getattr(function, "arguments", None) or "{}"

        if isinstance(raw_arguments, dict):
            arguments = raw_arguments
            raw_arguments = json.dumps(raw_arguments)
        else:
            try:
                arguments = json.loads(raw_arguments)
            except json.JSONDecodeError:
                logger.warning("Tool call arguments are not valid JSON", tool=name)
                arguments = {}
            if not isinstance(arguments, dict):
                arguments = {}

        calls.append(
            ToolCall(
                id=call_id or f"call_{len(calls)}",
                name=name,
                arguments=arguments,
                raw_arguments=raw_arguments,
            )
        )
    return calls


class LLMProvider(ChatModel):
    """LLM provider with multi-model support and fallbacks.

    Uses LiteLLM for a unified API across Gemini, OpenAI, Anthropic and more.
    The API key is passed explicitly; nothing is read from the process
    environment here.
    """

    def __init__(
        self,
        api_key: str | None = None,
        config: LLMConfig | None = None,
    ) -> None:
        self.config = config or settings.llm
        self.api_key = api_key if api_key is not None else self.config.api_key

        logger.info(
            "LLM Provider initialized",
            default_model=self.config.default_model,
            fallbacks=self.config.fallback_models,
        )

    def resolve_model(self, model: str | None) -> str:
        """Map a persona model id to a LiteLLM model string."""
        name = model or self.config.default_model
        if "/" in name:
            return name
        return f"{self.config.model_prefix}{name}"

    def start_dialogue(
        self,
        model: str,
        system_prompt: str,
        temperature: float,
        tools: list[dict[str, Any]],
        history: list[TranscriptEntry],
    ) -> "LiteLLMDialogue":
        if not self.api_key:
            raise ConfigurationError(
                "Language model API key is not configured",
                details={"setting": "LLM__API_KEY"},
            )
        messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        messages.extend(entry.to_llm_message() for entry in history)
        return LiteLLMDialogue(
            provider=self,
            model=self.resolve_model(model),
            temperature=temperature,
            tools=tools,
            messages=messages,
        )

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> tuple[ModelReply, dict[str, Any]]:
        """Run one completion, trying fallback models on failure.

        Args:
            messages: Chat messages including the system prompt
            model: LiteLLM model string
            temperature: Sampling temperature
            tools: OpenAI-format tool schemas
            **kwargs: Additional parameters passed to LiteLLM

        Returns:
            Tuple of (parsed reply, raw assistant message for the dialogue)

        Raises:
            ModelUnavailableError: All models failed
        """
        temp = temperature if temperature is not None else self.config.default_temperature
        candidates = [model] + [
            self.resolve_model(m) for m in self.config.fallback_models if self.resolve_model(m) != model
        ]

        last_error: Exception | None = None
        for candidate in candidates:
            try:
                return await self._complete_once(messages, candidate, temp, tools, **kwargs)
            except Exception as e:
                last_error = e
                logger.warning(
                    "LLM completion failed",
                    model=candidate,
                    error=str(e),
                )

        raise ModelUnavailableError(f"All LLM providers failed: {last_error}", model=model)

    async def _complete_once(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float,
        tools: list[dict[str, Any]] | None,
        **kwargs: Any,
    ) -> tuple[ModelReply, dict[str, Any]]:
        start_time = time.perf_counter()

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, self.config.max_attempts)),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        ):
            with attempt:
                params: dict[str, Any] = {
                    "model": model,
                    "messages": messages,
                    "temperature": temperature,
                    "timeout": self.config.timeout_seconds,
                    "api_key": self.api_key,
                    **kwargs,
                }
                if tools:
                    params["tools"] = tools
                response = await litellm.acompletion(**params)

        latency_ms = (time.perf_counter() - start_time) * 1000

        message = response.choices[0].message
        content = message.content or ""
        raw_tool_calls = getattr(message, "tool_calls", None) or []
        tool_calls = parse_tool_calls(raw_tool_calls)

        usage = getattr(response, "usage", None)
        tokens_input = getattr(usage, "prompt_tokens", 0) or 0
        tokens_output = getattr(usage, "completion_tokens", 0) or 0

        logger.info(
            "LLM completion successful",
            model=model,
            tool_calls=len(tool_calls),
            tokens_in=tokens_input,
            tokens_out=tokens_output,
            latency_ms=round(latency_ms, 2),
        )

        assistant_message: dict[str, Any] = {"role": "assistant", "content": content}
        if tool_calls:
            assistant_message["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.raw_arguments},
                }
                for call in tool_calls
            ]

        reply = ModelReply(
            text=content,
            tool_calls=tool_calls,
            model=model,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=latency_ms,
        )
        return reply, assistant_message


class LiteLLMDialogue(Dialogue):
    """Dialogue state kept as a chat-completion message list.

    Messages are committed only after a successful round-trip, so a failed
    model call leaves the dialogue as it was.
    """

    def __init__(
        self,
        provider: LLMProvider,
        model: str,
        temperature: float,
        tools: list[dict[str, Any]],
        messages: list[dict[str, Any]],
    ) -> None:
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.tools = tools
        self.messages = messages

    async def send(self, text: str) -> ModelReply:
        self._settle_unanswered_tool_calls()
        pending = self.messages + [{"role": "user", "content": text}]
        return await self._round_trip(pending)

    async def send_tool_results(self, results: list[ToolResult]) -> ModelReply:
        pending = self.messages + [
            {
                "role": "tool",
                "tool_call_id": result.call_id,
                "name": result.name,
                "content": json.dumps(result.payload, ensure_ascii=False, default=str),
            }
            for result in results
        ]
        return await self._round_trip(pending)

    async def _round_trip(self, pending: list[dict[str, Any]]) -> ModelReply:
        reply, assistant_message = await self.provider.complete(
            messages=pending,
            model=self.model,
            temperature=self.temperature,
            tools=self.tools,
        )
        self.messages = pending + [assistant_message]
        return reply

    def _settle_unanswered_tool_calls(self) -> None:
        # Providers reject a history where tool calls have no results
        if not self.messages:
            return
        last = self.messages[-1]
        if last.get("role") == "assistant" and last.get("tool_calls"):
            self.messages[-1] = {"role": "assistant", "content": last.get("content") or ""}
