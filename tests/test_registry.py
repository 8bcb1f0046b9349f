"""Tests for the capability registry."""

from __future__ import annotations

import pytest

from agenda.registry import (
    ArgumentParseError,
    CapabilityRegistry,
    UnknownCapabilityError,
    build_default_registry,
)
from agenda.tools.scheduling import build_scheduling_tools


@pytest.fixture
def registry(store, api_client):
    return build_default_registry(store, api_client)


class TestCatalog:
    def test_registers_all_capabilities_in_order(self, registry):
        assert registry.names == [
            "verificarAgenda",
            "agendarCompromisso",
            "getWeather",
            "getNextLaunchSpaceX",
            "getCountryInfo",
        ]

    def test_catalog_returns_tools(self, registry):
        assert [t.name for t in registry.catalog()] == registry.names

    def test_duplicate_names_rejected(self, store):
        tools = build_scheduling_tools(store)
        with pytest.raises(ValueError, match="Duplicate"):
            CapabilityRegistry([*tools, tools[0]])


class TestParseArguments:
    def test_accepts_json_string(self, registry):
        args = registry.parse_arguments("verificarAgenda", '{"dataHora": "2025-04-04 15:00"}')
        assert args == {"dataHora": "2025-04-04 15:00"}

    def test_accepts_mapping(self, registry):
        args = registry.parse_arguments("getCountryInfo", {"country": "Brasil"})
        assert args == {"country": "Brasil"}

    def test_empty_payload_for_no_arg_capability(self, registry):
        assert registry.parse_arguments("getNextLaunchSpaceX", "") == {}
        assert registry.parse_arguments("getNextLaunchSpaceX", None) == {}

    def test_malformed_json(self, registry):
        with pytest.raises(ArgumentParseError, match="not valid JSON"):
            registry.parse_arguments("verificarAgenda", '{"dataHora": ')

    def test_non_object_payload(self, registry):
        with pytest.raises(ArgumentParseError, match="must be an object"):
            registry.parse_arguments("verificarAgenda", '["2025-04-04 15:00"]')

    def test_missing_required_field(self, registry):
        with pytest.raises(ArgumentParseError, match="Invalid arguments"):
            registry.parse_arguments("agendarCompromisso", {"dataHora": "2025-04-04 15:00"})

    def test_unknown_capability(self, registry):
        with pytest.raises(UnknownCapabilityError):
            registry.parse_arguments("deleteEverything", {})


class TestInvoke:
    def test_runs_handler_and_returns_text(self, registry):
        result = registry.invoke("verificarAgenda", {"dataHora": "2025-04-04 15:00"})
        assert isinstance(result, str)
        assert "livre" in result

    def test_unknown_capability(self, registry):
        with pytest.raises(UnknownCapabilityError, match="sendEmail"):
            registry.invoke("sendEmail", {})
