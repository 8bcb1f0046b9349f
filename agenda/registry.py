"""Capability registry: name → LangChain tool, resolved once at startup.

The registry is both the catalog advertised to the model and the dispatch
table for executing whatever the model requests.  Argument payloads are
validated against each tool's pydantic ``args_schema`` before the handler
runs.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from langchain_core.tools import BaseTool
from pydantic import BaseModel, ValidationError

from agenda.services.appointment_store import AppointmentStore
from agenda.services.http_client import PublicAPIClient
from agenda.tools.public_info import build_public_info_tools
from agenda.tools.scheduling import build_scheduling_tools

logger = logging.getLogger(__name__)


class UnknownCapabilityError(LookupError):
    """The model requested a capability that is not registered."""


class ArgumentParseError(ValueError):
    """A capability argument payload is not valid JSON or fails its schema."""


class CapabilityRegistry:
    """Immutable table of the tools available to the assistant."""

    def __init__(self, tools: Iterable[BaseTool]) -> None:
        self._tools: dict[str, BaseTool] = {}
        for t in tools:
            if t.name in self._tools:
                raise ValueError(f"Duplicate capability name: {t.name}")
            self._tools[t.name] = t

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def catalog(self) -> list[BaseTool]:
        """Every registered tool, in registration order."""
        return list(self._tools.values())

    def get(self, name: str) -> BaseTool:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownCapabilityError(f"Unknown capability: {name!r}") from None

    def parse_arguments(self, name: str, raw: str | Mapping[str, Any] | None) -> dict[str, Any]:
        """Decode and validate *raw* for capability *name*.

        Raises:
            UnknownCapabilityError: *name* is not registered.
            ArgumentParseError: *raw* is not a JSON object or fails the schema.
        """
        capability = self.get(name)

        if raw is None or raw == "":
            payload: Any = {}
        elif isinstance(raw, str):
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise ArgumentParseError(f"Arguments for {name} are not valid JSON: {exc}") from exc
        else:
            payload = raw

        if not isinstance(payload, Mapping):
            raise ArgumentParseError(
                f"Arguments for {name} must be an object, got {type(payload).__name__}"
            )

        schema = capability.args_schema
        if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
            return dict(payload)
        try:
            return schema.model_validate(dict(payload)).model_dump()
        except ValidationError as exc:
            raise ArgumentParseError(f"Invalid arguments for {name}: {exc}") from exc

    def invoke(self, name: str, args: Mapping[str, Any]) -> str:
        """Run capability *name* and return its textual result."""
        capability = self.get(name)
        logger.info("Invoking %s with %s", name, dict(args))
        result = capability.invoke(dict(args))
        logger.debug("%s returned: %s", name, result)
        return str(result)


def build_default_registry(store: AppointmentStore, client: PublicAPIClient) -> CapabilityRegistry:
    """Registry with the scheduling and public-info capabilities."""
    return CapabilityRegistry([*build_scheduling_tools(store), *build_public_info_tools(client)])
