"""Centralized configuration for the scheduling assistant.

Secret resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/agenda-assistant/<VARIABLE_NAME>``.

Configuration is resolved once into a :class:`Settings` object which is
handed to every component at construction time.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "anthropic")

_API_KEY_VARS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

_DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-haiku-4-5",
}


# ── Secret resolution ────────────────────────────────────────────────

def _on_aws() -> bool:
    return bool(os.getenv("AWS_EXECUTION_ENV"))


def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 is
    unavailable.  Errors are logged but never raised so that local-dev
    fallback still works.
    """
    try:
        import boto3  # noqa: PLC0415 — lazy import to avoid boto3 dep in tests

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"/agenda-assistant/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _require_env(name: str) -> str:
    """Return a config value from env-var or SSM, or raise a clear error."""
    value = os.getenv(name)
    if value and not value.startswith("your_"):
        return value

    if _on_aws():
        ssm_value = _get_ssm_parameter(name)
        if ssm_value:
            return ssm_value

    raise OSError(
        f"Missing required configuration: {name}. "
        f"Set it in .env (local) or SSM Parameter Store /agenda-assistant/{name} (AWS)."
    )


def load_cors_origins() -> list[str]:
    """Read once at import time by the server, before :class:`Settings` exists."""
    return os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    ).split(",")


# ── Settings ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Settings:
    """Everything the assistant needs to run one turn."""

    api_key: str
    llm_provider: str = "openai"
    model_name: str = _DEFAULT_MODELS["openai"]
    temperature: float = 0.1
    appointments_path: Path = Path("data/agendamentos.json")
    http_timeout_seconds: float = 15.0
    server_host: str = "0.0.0.0"
    server_port: int = 8000

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the environment (and SSM on AWS)."""
        provider = os.getenv("LLM_PROVIDER", "openai").strip().lower()
        if provider not in SUPPORTED_PROVIDERS:
            raise OSError(
                f"Unsupported LLM_PROVIDER {provider!r}; "
                f"expected one of: {', '.join(SUPPORTED_PROVIDERS)}."
            )

        return cls(
            api_key=_require_env(_API_KEY_VARS[provider]),
            llm_provider=provider,
            model_name=os.getenv("MODEL_NAME", _DEFAULT_MODELS[provider]),
            temperature=float(os.getenv("LLM_TEMPERATURE", "0.1")),
            appointments_path=Path(os.getenv("APPOINTMENTS_PATH", "data/agendamentos.json")),
            http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "15")),
            server_host=os.getenv("SERVER_HOST", "0.0.0.0"),
            server_port=int(os.getenv("SERVER_PORT", "8000")),
        )
