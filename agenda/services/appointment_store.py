"""JSON-file backed appointment store.

The whole collection is read from disk at the start of every operation and
rewritten in full after every booking.  A missing file is an empty agenda.

Persisted format
────────────────
A single JSON array of records::

    [{"id": 1, "data_hora": "2025-04-04 15:00", "descricao": "reunião"}]

Conflicts
─────────
``is_occupied`` reports whether a slot is taken, but ``book`` never consults
it: deciding whether to proceed is the caller's job.  Bookings at an already
occupied timestamp are accepted.

Concurrency
───────────
``book`` holds a process-level lock around its load → append → save cycle,
so concurrent turns in one process cannot assign the same id or drop each
other's writes.  Separate processes sharing the same file are not
coordinated.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterable

logger = logging.getLogger(__name__)

CANONICAL_FORMAT = "%Y-%m-%d %H:%M"

# Brasília has had no daylight saving since 2019.
BRASILIA_TZ = timezone(timedelta(hours=-3), "BRT")

# Tried after ISO 8601 parsing fails.
_FALLBACK_FORMATS = (
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %Hh%M",
    "%d/%m/%Y",
)


class InvalidDateFormatError(ValueError):
    """Raised when a date-time string cannot be parsed."""


class StoreReadError(Exception):
    """Raised when the persisted agenda exists but cannot be read."""


@dataclass(frozen=True)
class Appointment:
    """A single booked slot."""

    id: int
    timestamp: str
    description: str

    def to_record(self) -> dict[str, Any]:
        return {"id": self.id, "data_hora": self.timestamp, "descricao": self.description}

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Appointment:
        return cls(
            id=int(record["id"]),
            timestamp=str(record["data_hora"]),
            description=str(record["descricao"]),
        )


def normalize_datetime(raw: str) -> str:
    """Parse a free-form date-time string into ``YYYY-MM-DD HH:MM``.

    Offset-aware inputs (``...Z``, ``...-03:00``) are converted to Brasília
    wall-clock time; naive inputs are taken as already local.  Seconds and
    below are dropped.

    Raises:
        InvalidDateFormatError: if *raw* matches none of the known formats.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidDateFormatError(f"Empty or non-text date: {raw!r}")

    text = raw.strip()
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        raise InvalidDateFormatError(f"Unrecognised date format: {raw!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(BRASILIA_TZ).replace(tzinfo=None)
    return parsed.strftime(CANONICAL_FORMAT)


class AppointmentStore:
    """Load / save / query the agenda file at *path*."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    # ── Persistence ──────────────────────────────────────────────────

    def load(self) -> list[Appointment]:
        """Read every stored appointment in insertion order.

        Raises:
            StoreReadError: if the file exists but is unreadable or corrupt.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StoreReadError(f"Could not read {self._path}: {exc}") from exc

        try:
            records = json.loads(raw)
            if not isinstance(records, list):
                raise TypeError(f"expected a JSON array, got {type(records).__name__}")
            return [Appointment.from_record(r) for r in records]
        except (ValueError, KeyError, TypeError) as exc:
            raise StoreReadError(f"Corrupt agenda file {self._path}: {exc}") from exc

    def save(self, appointments: Iterable[Appointment]) -> None:
        """Overwrite the agenda file.  Write failures are logged, not raised."""
        data = [a.to_record() for a in appointments]
        folder = self._path.resolve().parent
        tmp_name: str | None = None
        try:
            folder.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", delete=False, encoding="utf-8", dir=folder, suffix=".tmp",
            ) as tf:
                tmp_name = tf.name
                json.dump(data, tf, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            logger.warning("Failed to persist agenda to %s: %s", self._path, exc)
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    # ── Queries ──────────────────────────────────────────────────────

    def find_at(self, timestamp: str) -> Appointment | None:
        """Return the first appointment at *timestamp*, if any."""
        canonical = normalize_datetime(timestamp)
        for appointment in self.load():
            if appointment.timestamp == canonical:
                return appointment
        return None

    def is_occupied(self, timestamp: str) -> bool:
        """True iff some stored appointment has exactly this canonical timestamp."""
        return self.find_at(timestamp) is not None

    # ── Writes ───────────────────────────────────────────────────────

    def book(self, timestamp: str, description: str) -> Appointment:
        """Append a new appointment and persist the agenda.

        Does not check for conflicts.  Ids are ``max(existing) + 1``.
        """
        canonical = normalize_datetime(timestamp)
        with self._lock:
            appointments = self.load()
            next_id = max((a.id for a in appointments), default=0) + 1
            appointment = Appointment(id=next_id, timestamp=canonical, description=description)
            appointments.append(appointment)
            self.save(appointments)

        logger.info("Booked appointment #%d at %s", appointment.id, canonical)
        return appointment
