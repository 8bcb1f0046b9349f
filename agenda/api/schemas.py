"""Pydantic schemas for the FastAPI endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """One user utterance."""

    message: str = Field(..., min_length=1, max_length=2000, description="The user's message")


class ChatResponse(BaseModel):
    reply: str = Field(..., description="The assistant's final reply for this turn")


class AppointmentOut(BaseModel):
    id: int
    data_hora: str
    descricao: str


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "agenda-assistant"
