"""FastAPI route definitions for the scheduling assistant API."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request

from agenda.api.schemas import AppointmentOut, ChatRequest, ChatResponse, HealthResponse
from agenda.services.appointment_store import StoreReadError

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_orchestrator(request: Request):
    """Retrieve the orchestrator built during the FastAPI lifespan."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=503,
            detail="The assistant is still starting up. Please try again in a moment.",
        )
    return orchestrator


def _get_store(request: Request):
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(
            status_code=503,
            detail="The assistant is still starting up. Please try again in a moment.",
        )
    return store


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse()


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, http_request: Request):
    """Run one turn for the given message.

    ``run_turn`` blocks on the model and public APIs, so it runs in a worker
    thread.  It never raises: failures come back as the fallback reply.
    """
    orchestrator = _get_orchestrator(http_request)
    request_id = getattr(http_request.state, "request_id", "?")
    logger.debug("[%s] chat turn started", request_id)

    reply = await asyncio.to_thread(orchestrator.run_turn, request.message)
    return ChatResponse(reply=reply)


@router.get("/appointments", response_model=list[AppointmentOut])
async def list_appointments(http_request: Request):
    """Every stored appointment, in booking order."""
    store = _get_store(http_request)
    request_id = getattr(http_request.state, "request_id", "?")
    try:
        appointments = await asyncio.to_thread(store.load)
    except StoreReadError as e:
        logger.exception("[%s] Could not read the agenda", request_id)
        raise HTTPException(status_code=500, detail="The agenda could not be read.") from e
    return [AppointmentOut(**a.to_record()) for a in appointments]
