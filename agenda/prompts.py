"""System prompt for the scheduling assistant."""

from datetime import datetime

from agenda.services.appointment_store import BRASILIA_TZ

SYSTEM_PROMPT_TEMPLATE = """Você é um assistente de agenda prestativo e objetivo.

Agora são {current_time} de {current_date} ({current_day_of_week}), horário de Brasília.
Use isso para resolver datas relativas como "amanhã" ou "sexta que vem".

- Para saber se um horário está livre, use `verificarAgenda`.
- Para marcar um compromisso, use `agendarCompromisso`.
- Sempre envie datas no formato AAAA-MM-DD HH:MM.
- Para clima, lançamentos da SpaceX ou informações de países, use a ferramenta correspondente.
- Nunca invente horários ou dados: use apenas o que as ferramentas retornarem.
- Responda em português, de forma breve.
"""

_WEEKDAYS = (
    "segunda-feira", "terça-feira", "quarta-feira", "quinta-feira",
    "sexta-feira", "sábado", "domingo",
)


def get_system_prompt(now: datetime | None = None) -> str:
    """Build the system prompt with the current Brasília date injected."""
    now = now or datetime.now(BRASILIA_TZ)
    return SYSTEM_PROMPT_TEMPLATE.format(
        current_date=now.strftime("%Y-%m-%d"),
        current_day_of_week=_WEEKDAYS[now.weekday()],
        current_time=now.strftime("%H:%M"),
    )
