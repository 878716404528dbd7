"""Agent session - one conversation between a user and a tenant's agent.

A session owns one model dialogue and runs the tool-call cycle per turn:

    user text -> model -> [tool calls -> adapters -> tool results -> model] -> reply

At most two model calls happen per turn. Failures of the listings provider are
handed to the model as tool errors so it can recover in its own words; only a
failure of the model call itself (or an unexpected fault) aborts the turn.
"""

import asyncio
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

import structlog
from pydantic import ValidationError

from broker_agent.core.config import Settings, settings as default_settings
from broker_agent.core.exceptions import (
    AgentError,
    AgentInitError,
    IntegrationError,
    ModelUnavailableError,
)
from broker_agent.models import (
    ConversationTurn,
    DataSource,
    DecisionLog,
    DisplayMessage,
    Property,
    SessionStart,
    Tenant,
    TranscriptEntry,
    TurnResult,
)
from broker_agent.services.agent.prompts import build_system_prompt
from broker_agent.services.agent.tools import (
    SchedulingLinkArgs,
    SearchPropertiesArgs,
    build_scheduling_link,
    get_tool,
    tool_schemas,
)
from broker_agent.services.crm.history import ConversationHistoryService, get_history_service
from broker_agent.services.listings.search import PropertySearchService, get_search_service
from broker_agent.services.llm.provider import (
    ChatModel,
    Dialogue,
    LLMProvider,
    ModelReply,
    ToolCall,
    ToolResult,
)

logger = structlog.get_logger()

EMPTY_REPLY_TEXT = "Sorry, I couldn't generate a text response."
CRM_WARNING_TEXT = "Connection warning: CRM history unavailable."
CRM_SYNCED_TEXT = "--- History synced from CRM ---"


@dataclass
class _TurnPayload:
    """What the tools of one turn surface to the caller."""

    properties: list[Property] | None = None
    scheduling_link: str | None = None


class AgentSession:
    """Conversation with a tenant's agent persona.

    Construction does no I/O. ``start`` seeds the dialogue; ``send_message``
    runs one turn. Calls to ``send_message`` on the same session are
    serialized, independent sessions share no mutable state.
    """

    def __init__(
        self,
        tenant: Tenant,
        chat_model: ChatModel | None = None,
        search_service: PropertySearchService | None = None,
        history_service: ConversationHistoryService | None = None,
        config: Settings | None = None,
        session_id: str | None = None,
    ) -> None:
        self.id = session_id or uuid4().hex
        self.tenant = tenant
        self.settings = config or default_settings
        self.chat_model = chat_model or LLMProvider(
            api_key=self.settings.llm.api_key,
            config=self.settings.llm,
        )
        self.search_service = search_service or get_search_service()
        self.history_service = history_service or get_history_service()

        self.system_prompt = build_system_prompt(tenant)
        self.turns: list[ConversationTurn] = []

        self._dialogue: Dialogue | None = None
        self._lock = asyncio.Lock()
        self._logger = logger.bind(tenant_id=tenant.id, session_id=self.id)

    @property
    def is_started(self) -> bool:
        return self._dialogue is not None

    # ==================== Session start ====================

    async def start(self, history: list[TranscriptEntry] | None = None) -> SessionStart:
        """Open the model dialogue.

        Args:
            history: Prior transcript. When None, it is fetched from the
                tenant's CRM; CRM failures never abort the start.

        Returns:
            SessionStart with the display messages and transcript used

        Raises:
            AgentInitError: The model dialogue could not be opened
        """
        async with self._lock:
            return await self._start(history)

    async def _start(self, history: list[TranscriptEntry] | None) -> SessionStart:
        if history is None:
            display, transcript = await self._load_history()
        else:
            display, transcript = [], list(history)

        try:
            self._dialogue = self.chat_model.start_dialogue(
                model=self.tenant.agent.model,
                system_prompt=self.system_prompt,
                temperature=self.tenant.agent.temperature,
                tools=tool_schemas(),
                history=transcript,
            )
        except Exception as e:
            log = DecisionLog()
            log.error("Agent initialization failed", error=str(e), error_type=type(e).__name__)
            self._logger.error("Agent initialization failed", error=str(e))
            raise AgentInitError(log=list(log)) from e

        self._logger.info(
            "Agent session started",
            model=self.tenant.agent.model,
            history_length=len(transcript),
        )
        return SessionStart(display=display, transcript=transcript)

    async def _load_history(self) -> tuple[list[DisplayMessage], list[TranscriptEntry]]:
        """Fetch CRM history, degrading to a warning message on failure."""
        credentials = self.tenant.integrations
        try:
            history = await self.history_service.fetch(
                credentials.crm_location_id,
                credentials.crm_access_token,
            )
        except IntegrationError as e:
            self._logger.warning("CRM history unavailable", error=e.message, code=e.code)
            return [DisplayMessage.system(CRM_WARNING_TEXT, message_id="crm_error")], []

        display = list(history.display)
        if history.source == DataSource.LIVE:
            display.append(DisplayMessage.system(CRM_SYNCED_TEXT, message_id="crm_synced"))
        return display, list(history.transcript)

    # ==================== Turns ====================

    async def send_message(self, text: str) -> TurnResult:
        """Run one full turn for a user message.

        Args:
            text: User utterance

        Returns:
            TurnResult with reply text, optional properties and scheduling
            link, and the decision log

        Raises:
            AgentError: The model call failed or an unexpected fault occurred.
                The message is generic; the cause is in ``AgentError.log``.
        """
        async with self._lock:
            if self._dialogue is None:
                await self._start([])

            log = DecisionLog()
            try:
                result = await self._run_turn(self._dialogue, text, log)
            except ModelUnavailableError as e:
                log.error("Model call failed", error=e.message, **e.details)
                self._logger.error("Model call failed", error=e.message)
                raise AgentError(log=list(log)) from e
            except Exception as e:
                log.error("Critical agent failure", error=str(e), error_type=type(e).__name__)
                self._logger.exception("Critical agent failure")
                raise AgentError(log=list(log)) from e

            self.turns.append(ConversationTurn.from_result(text, result))
            return result

    async def _run_turn(self, dialogue: Dialogue, text: str, log: DecisionLog) -> TurnResult:
        reply = await dialogue.send(text)
        if not reply.has_tool_calls:
            return TurnResult(text=self._reply_text(reply), log=list(log))

        payload = _TurnPayload()
        results = [await self._execute_tool(call, payload, log) for call in reply.tool_calls]

        # One follow-up for the whole batch
        final = await dialogue.send_tool_results(results)
        if final.has_tool_calls:
            log.error(
                "Tool chain limit reached",
                requested_tools=[call.name for call in final.tool_calls],
            )
            self._logger.warning(
                "Model requested tools after tool results, not executed",
                tools=[call.name for call in final.tool_calls],
            )

        self._logger.info(
            "Turn completed",
            tool_calls=len(reply.tool_calls),
            properties=len(payload.properties) if payload.properties is not None else None,
            scheduling_link=payload.scheduling_link is not None,
        )
        return TurnResult(
            text=self._reply_text(final),
            properties=payload.properties,
            scheduling_link=payload.scheduling_link,
            log=list(log),
        )

    @staticmethod
    def _reply_text(reply: ModelReply) -> str:
        return reply.text.strip() or EMPTY_REPLY_TEXT

    # ==================== Tool dispatch ====================

    async def _execute_tool(
        self,
        call: ToolCall,
        payload: _TurnPayload,
        log: DecisionLog,
    ) -> ToolResult:
        log.tool_call(f"Tool triggered: {call.name}", tool=call.name, arguments=call.arguments)

        spec = get_tool(call.name)
        if spec is None:
            log.error("Unsupported tool", tool=call.name)
            return ToolResult(call.id, call.name, {"error": "unsupported tool", "tool": call.name})

        try:
            args = spec.parse_arguments(call.arguments)
        except ValidationError as e:
            details = [
                {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            log.error("Invalid tool arguments", tool=call.name, details=details)
            return ToolResult(call.id, call.name, {"error": "invalid arguments", "details": details})

        if isinstance(args, SearchPropertiesArgs):
            response = await self._search_properties(args, payload, log)
        elif isinstance(args, SchedulingLinkArgs):
            response = self._send_scheduling_link(args, payload, log)
        else:
            raise TypeError(f"No handler for tool {call.name}")

        return ToolResult(call.id, call.name, response)

    async def _search_properties(
        self,
        args: SearchPropertiesArgs,
        payload: _TurnPayload,
        log: DecisionLog,
    ) -> dict[str, Any]:
        search_filter = args.to_filter()
        log.api_request(
            "Listings API request",
            filters=search_filter.model_dump(mode="json", exclude_none=True),
        )

        try:
            result = await self.search_service.search(
                search_filter,
                self.tenant.integrations.listings_api_key,
            )
        except IntegrationError as e:
            log.error("Listings API failed", error=e.message, **e.details)
            return {"error": "external API unavailable", "details": e.message}

        if result.source == DataSource.MOCK:
            log.info("Listings served from fallback dataset", reason="api key not configured")

        # The first successful search of a turn is the one surfaced
        if payload.properties is None:
            payload.properties = result.properties
        else:
            log.info("Additional search result not surfaced", count=result.count)

        return {
            "result": [p.model_dump(mode="json") for p in result.properties],
            "count": result.count,
        }

    def _send_scheduling_link(
        self,
        args: SchedulingLinkArgs,
        payload: _TurnPayload,
        log: DecisionLog,
    ) -> dict[str, Any]:
        link = build_scheduling_link(
            self.settings.scheduling_base_url,
            self.tenant.name,
            args.property_id,
        )
        log.api_request("Scheduling link generated", property_id=args.property_id, link=link)
        payload.scheduling_link = link
        return {"link": link, "status": "generated"}
