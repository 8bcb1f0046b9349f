"""Check-then-book heuristic.

When one utterance both asks whether a slot is free and asks to book it,
the assistant books right after a "free" check instead of asking the model
again.  The rule is purely textual:

* the capability just run was the availability check,
* the utterance contains a booking cue word (case-insensitive), and
* the check result is exactly the free-slot answer
  (``O horário <AAAA-MM-DD HH:MM> está livre.``).  Matching the whole
  sentence keeps an occupied slot whose description mentions
  :data:`FREE_SLOT_PHRASE` from being booked twice.

The booking description comes from a ``descrição: <text>`` /
``description: <text>`` suffix in the utterance, or
:data:`DEFAULT_DESCRIPTION` when there is none.
"""

from __future__ import annotations

import re

from agenda.tools.scheduling import CHECK_AVAILABILITY, is_free_result

DEFAULT_DESCRIPTION = "Compromisso agendado pelo assistente"

BOOKING_CUE_RE = re.compile(
    r"\b(agende|agendar|agendamento|marque|marcar|reserve|reservar|book|schedule)\b",
    re.IGNORECASE,
)

DESCRIPTION_RE = re.compile(
    r"(?:com|with)?\s*(?:descri[çc][ãa]o|description)\s*:\s*(?P<text>.+)$",
    re.IGNORECASE | re.DOTALL,
)


def wants_booking(utterance: str) -> bool:
    return bool(BOOKING_CUE_RE.search(utterance))


def should_chain_booking(capability: str, utterance: str, result: str) -> bool:
    """True when a free-slot check should be followed by a direct booking."""
    return (
        capability == CHECK_AVAILABILITY
        and wants_booking(utterance)
        and is_free_result(result)
    )


def extract_description(utterance: str) -> str:
    """Pull the booking description out of *utterance*, or the default."""
    match = DESCRIPTION_RE.search(utterance)
    if match:
        text = match.group("text").strip().strip(".!?\"'").strip()
        if text:
            return text
    return DEFAULT_DESCRIPTION
