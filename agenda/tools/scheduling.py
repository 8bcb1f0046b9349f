"""LangChain tools for checking and booking slots in the local agenda.

Each tool wraps an :class:`AppointmentStore` call and returns a
human-readable string.  An unparseable date becomes an explanatory result
rather than an exception; a corrupt agenda file (``StoreReadError``) is the
one failure allowed to escape and abort the turn.
"""

from __future__ import annotations

import logging
import re

from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, Field

from agenda.services.appointment_store import (
    AppointmentStore,
    InvalidDateFormatError,
    normalize_datetime,
)

logger = logging.getLogger(__name__)

CHECK_AVAILABILITY = "verificarAgenda"
BOOK_APPOINTMENT = "agendarCompromisso"

# Appears in the check result only when the slot is free.
FREE_SLOT_PHRASE = "está livre"

# The whole free-slot result; an occupied result may quote a description
# that happens to contain FREE_SLOT_PHRASE.
FREE_RESULT_RE = re.compile(
    rf"^O horário \d{{4}}-\d{{2}}-\d{{2}} \d{{2}}:\d{{2}} {FREE_SLOT_PHRASE}\.$"
)


def is_free_result(result: str) -> bool:
    """True iff *result* is the availability check's free-slot answer."""
    return bool(FREE_RESULT_RE.match(result.strip()))


class CheckAvailabilityArgs(BaseModel):
    dataHora: str = Field(
        ...,
        description="Data e hora no formato AAAA-MM-DD HH:MM (ex.: 2025-04-04 15:00).",
    )


class BookAppointmentArgs(BaseModel):
    dataHora: str = Field(
        ...,
        description="Data e hora no formato AAAA-MM-DD HH:MM (ex.: 2025-04-04 15:00).",
    )
    descricao: str = Field(..., description="Descrição curta do compromisso.")


def _invalid_format_message(raw: str) -> str:
    return f"Formato de data inválido: '{raw}'. Use o formato AAAA-MM-DD HH:MM."


def build_scheduling_tools(store: AppointmentStore) -> list[BaseTool]:
    """Create the check and book tools bound to *store*."""

    @tool(CHECK_AVAILABILITY, args_schema=CheckAvailabilityArgs)
    def check_availability(dataHora: str) -> str:
        """Verifica se um horário da agenda está livre."""
        try:
            timestamp = normalize_datetime(dataHora)
        except InvalidDateFormatError:
            logger.info("Rejected unparseable date %r", dataHora)
            return _invalid_format_message(dataHora)

        existing = store.find_at(timestamp)
        if existing is None:
            return f"O horário {timestamp} {FREE_SLOT_PHRASE}."
        return f"O horário {timestamp} já está ocupado: {existing.description}."

    @tool(BOOK_APPOINTMENT, args_schema=BookAppointmentArgs)
    def book_appointment(dataHora: str, descricao: str) -> str:
        """Agenda um compromisso na data e hora informadas."""
        try:
            appointment = store.book(dataHora, descricao)
        except InvalidDateFormatError:
            logger.info("Rejected unparseable date %r", dataHora)
            return _invalid_format_message(dataHora)

        return (
            f"Compromisso #{appointment.id} agendado para "
            f"{appointment.timestamp}: {appointment.description}."
        )

    return [check_availability, book_appointment]
