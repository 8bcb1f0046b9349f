"""Shared test fixtures for the Agenda Assistant test suite."""

from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest

from agenda.config import Settings
from agenda.services.appointment_store import AppointmentStore
from agenda.services.completion import CompletionService
from agenda.services.http_client import PublicAPIClient


def pytest_configure(config):
    """Set credentials before collection so nothing fails on import."""
    os.environ.setdefault("OPENAI_API_KEY", "test-openai-key-123")
    os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key-456")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        api_key="test-key",
        llm_provider="openai",
        appointments_path=tmp_path / "agendamentos.json",
    )


@pytest.fixture
def store(settings) -> AppointmentStore:
    return AppointmentStore(settings.appointments_path)


@pytest.fixture
def api_client() -> MagicMock:
    return MagicMock(spec=PublicAPIClient)


@pytest.fixture
def chat_model() -> MagicMock:
    """A mock LangChain chat model.

    ``chat_model.bind_tools(...).invoke`` answers the decision call and
    ``chat_model.invoke`` answers the synthesis call (OpenAI provider).
    """
    model = MagicMock()
    model.bind_tools.return_value = MagicMock(name="bound_model")
    return model


@pytest.fixture
def completion(settings, chat_model) -> CompletionService:
    return CompletionService(settings, chat_model=chat_model)
