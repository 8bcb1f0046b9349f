"""LangGraph orchestrator for one assistant turn.

Architecture:
  A turn is a LangGraph StateGraph with five nodes:

    1. **decide**          — model call with the full catalog and automatic
                             tool selection
    2. **direct_reply**    — the model answered; its text is the reply
    3. **run_capability**  — executes the single requested capability
    4. **chain_booking**   — books a slot the check just reported free,
                             without asking the model again
    5. **synthesize**      — model call (no catalog) that phrases the tool
                             result as the final reply

  Routing:
    decide → (no tool call?) → direct_reply → END
    decide → (tool call?)    → run_capability → (check + cue + free?) → chain_booking → synthesize → END
                                              → (otherwise)           → synthesize → END

  Only the first requested tool call is honoured.  The chained booking
  result is reported under the original call's id, since the protocol only
  tracks one outstanding call per turn.

  Any exception raised inside the graph is caught by
  :meth:`Orchestrator.run_turn` and turned into :data:`FALLBACK_REPLY`.
  Nothing is retried.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage
from langgraph.graph import END, StateGraph
from typing_extensions import TypedDict

from agenda.chaining import extract_description, should_chain_booking
from agenda.config import Settings
from agenda.prompts import get_system_prompt
from agenda.registry import ArgumentParseError, CapabilityRegistry, build_default_registry
from agenda.services.appointment_store import AppointmentStore, normalize_datetime
from agenda.services.completion import CompletionService
from agenda.services.http_client import PublicAPIClient
from agenda.tools.scheduling import BOOK_APPOINTMENT

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Ops, algo deu errado! Tente novamente."
EMPTY_SYNTHESIS_REPLY = "Não consegui gerar uma resposta."


# ── State schema ─────────────────────────────────────────────────────


class TurnState(TypedDict, total=False):
    """Values flowing through one turn.

    ``decision`` is the model's first response; ``tool_call`` is the first
    call it requested (``None`` for a direct answer).  ``tool_result`` holds
    whichever result is reported back: the handler's, or the chained
    booking's when ``chained`` is set.
    """

    user_message: str
    decision: AIMessage
    tool_call: dict[str, Any] | None
    arguments: dict[str, Any]
    tool_result: str
    chained: bool
    reply: str


# ── Message helpers ──────────────────────────────────────────────────


def _text_content(message: AIMessage) -> str:
    """Flatten message content (plain string or content blocks) to text."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def _single_call_message(decision: AIMessage, tool_call: dict[str, Any]) -> AIMessage:
    """The decision message trimmed to the one tool call being answered."""
    return AIMessage(content=_text_content(decision), tool_calls=[tool_call])


# ── Nodes ────────────────────────────────────────────────────────────


def _make_decide_node(completion: CompletionService, registry: CapabilityRegistry):
    def decide_node(state: TurnState) -> dict:
        """Ask the model to answer or pick a capability."""
        messages = [
            SystemMessage(content=get_system_prompt()),
            HumanMessage(content=state["user_message"]),
        ]
        response = completion.decide(messages, registry.catalog())

        if response.tool_calls:
            if len(response.tool_calls) > 1:
                logger.warning(
                    "Model requested %d tool calls; only %s will run",
                    len(response.tool_calls), response.tool_calls[0]["name"],
                )
            return {"decision": response, "tool_call": response.tool_calls[0]}

        invalid = getattr(response, "invalid_tool_calls", None)
        if invalid:
            raise ArgumentParseError(
                f"Could not decode arguments for {invalid[0].get('name')}: {invalid[0].get('error')}"
            )

        return {"decision": response, "tool_call": None}

    return decide_node


def direct_reply_node(state: TurnState) -> dict:
    """Return the model's answer verbatim."""
    reply = _text_content(state["decision"])
    logger.debug("Direct answer, no capability requested")
    return {"reply": reply}


def _make_capability_node(registry: CapabilityRegistry):
    def capability_node(state: TurnState) -> dict:
        """Validate the requested call's arguments and run it."""
        call = state["tool_call"]
        arguments = registry.parse_arguments(call["name"], call.get("args"))
        result = registry.invoke(call["name"], arguments)
        return {"arguments": arguments, "tool_result": result, "chained": False}

    return capability_node


def _make_chain_booking_node(registry: CapabilityRegistry):
    def chain_booking_node(state: TurnState) -> dict:
        """Book the slot the check just reported as free."""
        booking_args = {
            "dataHora": normalize_datetime(state["arguments"]["dataHora"]),
            "descricao": extract_description(state["user_message"]),
        }
        logger.info("Slot is free and booking was requested; chaining %s", BOOK_APPOINTMENT)
        result = registry.invoke(BOOK_APPOINTMENT, booking_args)
        return {"tool_result": result, "chained": True}

    return chain_booking_node


def _make_synthesize_node(completion: CompletionService, registry: CapabilityRegistry):
    def synthesize_node(state: TurnState) -> dict:
        """Turn the tool result into the final reply."""
        call = state["tool_call"]
        messages = [
            HumanMessage(content=state["user_message"]),
            _single_call_message(state["decision"], call),
            ToolMessage(
                content=json.dumps({"result": state["tool_result"]}, ensure_ascii=False),
                tool_call_id=call["id"],
            ),
        ]
        response = completion.synthesize(messages, registry.catalog())
        reply = _text_content(response)
        if not reply:
            logger.warning("Synthesis returned no content")
            reply = EMPTY_SYNTHESIS_REPLY
        return {"reply": reply}

    return synthesize_node


# ── Conditional edges ────────────────────────────────────────────────


def route_after_decision(state: TurnState) -> str:
    if state.get("tool_call"):
        return "run_capability"
    return "direct_reply"


def route_after_capability(state: TurnState) -> str:
    call = state["tool_call"]
    if should_chain_booking(call["name"], state["user_message"], state["tool_result"]):
        return "chain_booking"
    return "synthesize"


# ── Graph assembly ───────────────────────────────────────────────────


def build_turn_graph(completion: CompletionService, registry: CapabilityRegistry):
    """Compile the single-turn StateGraph."""
    graph = StateGraph(TurnState)

    graph.add_node("decide", _make_decide_node(completion, registry))
    graph.add_node("direct_reply", direct_reply_node)
    graph.add_node("run_capability", _make_capability_node(registry))
    graph.add_node("chain_booking", _make_chain_booking_node(registry))
    graph.add_node("synthesize", _make_synthesize_node(completion, registry))

    graph.set_entry_point("decide")
    graph.add_conditional_edges(
        "decide",
        route_after_decision,
        {"run_capability": "run_capability", "direct_reply": "direct_reply"},
    )
    graph.add_edge("direct_reply", END)
    graph.add_conditional_edges(
        "run_capability",
        route_after_capability,
        {"chain_booking": "chain_booking", "synthesize": "synthesize"},
    )
    graph.add_edge("chain_booking", "synthesize")
    graph.add_edge("synthesize", END)

    return graph.compile()


class Orchestrator:
    """Runs turns one at a time and never raises."""

    def __init__(self, completion: CompletionService, registry: CapabilityRegistry) -> None:
        self._registry = registry
        self._graph = build_turn_graph(completion, registry)
        self._turn_lock = threading.Lock()

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    def run_turn_state(self, user_message: str) -> TurnState:
        """Run one turn and return the final graph state.  May raise."""
        with self._turn_lock:
            return self._graph.invoke({"user_message": user_message})

    def run_turn(self, user_message: str) -> str:
        """Run one turn and return the reply, or :data:`FALLBACK_REPLY` on any failure."""
        try:
            state = self.run_turn_state(user_message)
        except Exception:
            logger.exception("Turn failed for message %r", user_message)
            return FALLBACK_REPLY
        return state.get("reply") or ""


def create_orchestrator(
    settings: Settings | None = None,
    *,
    completion: CompletionService | None = None,
    store: AppointmentStore | None = None,
    client: PublicAPIClient | None = None,
) -> Orchestrator:
    """Wire the default store, HTTP client, registry and model together."""
    settings = settings or Settings.from_env()
    store = store or AppointmentStore(settings.appointments_path)
    client = client or PublicAPIClient(timeout=settings.http_timeout_seconds)
    completion = completion or CompletionService(settings)
    registry = build_default_registry(store, client)

    logger.debug(
        "Orchestrator ready — provider: %s, model: %s, capabilities: %s",
        settings.llm_provider, settings.model_name, ", ".join(registry.names),
    )
    return Orchestrator(completion, registry)
