"""Agenda Assistant — a natural-language front end for a local agenda.

Architecture Overview
=====================

Each user utterance is one **turn**, driven by a LangGraph state machine
(``agenda.agent``):

1. **decide** — the chat model sees the utterance plus the capability
   catalog and either answers directly or requests one capability.
2. **run_capability** — the requested LangChain tool runs through the
   :class:`~agenda.registry.CapabilityRegistry`.
3. **chain_booking** — if the user asked to check *and* book a slot and the
   check says it is free, the slot is booked immediately.
4. **synthesize** — the chat model phrases the tool result as the reply.

Key Design Decisions
--------------------
- **Explicit configuration**: ``Settings.from_env()`` is resolved once and
  passed into every component.
- **Text-only tool outcomes**: handlers report failures as result strings,
  so the turn keeps going to synthesis.  Only protocol violations and a
  corrupt agenda file abort a turn, and those become a fixed fallback reply.
- **Local agenda**: appointments live in a JSON file rewritten atomically on
  every booking.
- **Dual Interface**: FastAPI server + CLI.

Package Structure
-----------------
- ``agenda/agent.py`` — turn StateGraph and ``Orchestrator``
- ``agenda/chaining.py`` — check-then-book heuristic
- ``agenda/registry.py`` — capability registry and argument validation
- ``agenda/config.py`` — ``Settings`` from environment variables
- ``agenda/prompts.py`` — system prompt
- ``agenda/server.py`` / ``agenda/main.py`` — FastAPI app / CLI
- ``agenda/services/`` — appointment store, chat model adapter, HTTP client, metrics
- ``agenda/tools/`` — LangChain tools (scheduling + public info)
- ``agenda/api/`` — FastAPI routes and Pydantic schemas
"""
