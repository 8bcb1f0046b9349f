"""Tests for the check-then-book heuristic."""

from __future__ import annotations

import pytest

from agenda.chaining import (
    DEFAULT_DESCRIPTION,
    extract_description,
    should_chain_booking,
    wants_booking,
)

SCENARIO = (
    "Verifique se esta a agenda esta livre em 2025-04-04 15:00, "
    "se estive agende uma reunião com descrição: teste"
)
FREE = "O horário 2025-04-04 15:00 está livre."
TAKEN = "O horário 2025-04-04 15:00 já está ocupado: dentista."


class TestWantsBooking:
    @pytest.mark.parametrize(
        "utterance",
        [SCENARIO, "AGENDE para mim", "pode marcar às 10?", "please book it", "Schedule a call"],
    )
    def test_detects_cue_words(self, utterance):
        assert wants_booking(utterance)

    @pytest.mark.parametrize(
        "utterance",
        ["A agenda está livre amanhã?", "Qual o clima em Brasília?", "agendamentos antigos"],
    )
    def test_ignores_other_text(self, utterance):
        assert not wants_booking(utterance)


class TestShouldChainBooking:
    def test_chains_on_free_check_with_cue(self):
        assert should_chain_booking("verificarAgenda", SCENARIO, FREE)

    def test_not_when_slot_taken(self):
        assert not should_chain_booking("verificarAgenda", SCENARIO, TAKEN)

    def test_not_without_booking_cue(self):
        assert not should_chain_booking("verificarAgenda", "Está livre às 15h?", FREE)

    def test_not_when_taken_description_mentions_free(self):
        taken = "O horário 2025-04-04 15:00 já está ocupado: sala está livre depois."
        assert not should_chain_booking("verificarAgenda", SCENARIO, taken)

    def test_not_for_invalid_date_result(self):
        invalid = "Formato de data inválido: 'está livre'. Use o formato AAAA-MM-DD HH:MM."
        assert not should_chain_booking("verificarAgenda", SCENARIO, invalid)

    def test_not_for_other_capabilities(self):
        assert not should_chain_booking("getWeather", SCENARIO, FREE)
        assert not should_chain_booking("agendarCompromisso", SCENARIO, FREE)


class TestExtractDescription:
    @pytest.mark.parametrize(
        ("utterance", "expected"),
        [
            (SCENARIO, "teste"),
            ("agende com descricao: almoço com Ana.", "almoço com Ana"),
            ("book 10am with description: Team sync!", "Team sync"),
            ("agende, Descrição:   revisão do contrato  ", "revisão do contrato"),
        ],
    )
    def test_extracts_text_after_marker(self, utterance, expected):
        assert extract_description(utterance) == expected

    def test_default_when_no_marker(self):
        assert extract_description("agende às 15h") == DEFAULT_DESCRIPTION

    def test_default_when_marker_is_empty(self):
        assert extract_description("agende com descrição: ") == DEFAULT_DESCRIPTION
