from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, List, Mapping, Optional, Union
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from app.schemas import Reading, ReadingCreate
from models.errors import ValidationError
from settings import get_settings

logger = logging.getLogger(__name__)

_ROOT_KEY = "readings"


def _describe_errors(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "body"
        parts.append(f"{field}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_reading(payload: Union[ReadingCreate, Mapping[str, Any]]) -> ReadingCreate:
    """Validate a raw payload into a typed reading draft."""
    if isinstance(payload, ReadingCreate):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError("Reading payload must be a JSON object.")
    try:
        return ReadingCreate.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid reading: {_describe_errors(exc)}") from exc


class ReadingStore:
    """Append-only collection of readings persisted as a single JSON document."""

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._readings: List[Reading] = []
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def append(self, payload: Union[ReadingCreate, Mapping[str, Any]]) -> Reading:
        draft = parse_reading(payload)
        with self._lock:
            reading = Reading(
                id=str(uuid4()),
                timestamp=datetime.now(timezone.utc),
                **draft.model_dump(),
            )
            self._readings.append(reading)
            try:
                self._persist()
            except OSError:
                self._readings.pop()
                raise
        return reading

    def recent(self, limit: int) -> list[Reading]:
        """Return up to ``limit`` readings, newest first."""
        if limit <= 0:
            return []
        with self._lock:
            return self._readings[::-1][:limit]

    def in_range(self, days: int, now: Optional[datetime] = None) -> list[Reading]:
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        with self._lock:
            return [reading for reading in self._readings if reading.timestamp >= cutoff]

    def by_bin(self, bin_id: str) -> list[Reading]:
        with self._lock:
            return [reading for reading in self._readings if reading.bin_id == bin_id]

    def scan(self) -> list[Reading]:
        with self._lock:
            return list(self._readings)

    def __len__(self) -> int:
        with self._lock:
            return len(self._readings)

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {
            _ROOT_KEY: [
                reading.model_dump(mode="json", by_alias=True) for reading in self._readings
            ]
        }
        self.persistence_path.write_text(json.dumps(payload, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "Ignoring unreadable reading store",
                extra={"path": str(self.persistence_path), "reason": str(exc)},
            )
            data = {}

        if not isinstance(data, dict):
            data = {}
        records = data.get(_ROOT_KEY, [])
        try:
            if not isinstance(records, list):
                raise TypeError(f"{_ROOT_KEY!r} must be a list, got {type(records).__name__}")
            loaded = [Reading.model_validate(payload) for payload in records]
        except (PydanticValidationError, TypeError) as exc:
            logger.warning(
                "Ignoring malformed reading store",
                extra={"path": str(self.persistence_path), "reason": str(exc)},
            )
            loaded = []
        self._readings.extend(loaded)
        logger.info(
            "Loaded readings from disk",
            extra={"path": str(self.persistence_path), "count": len(self._readings)},
        )


@lru_cache
def build_default_store(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> ReadingStore:
    settings = get_settings()
    store_name = settings.store_name if name is None else name
    store_path = settings.store_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return ReadingStore(name=store_name, persistence_path=persistence)
