"""File-backed storage for provider API keys."""

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ValidationError

from navigator.config import is_unset

logger = logging.getLogger(__name__)

GOOGLE_MAPS_SLOT = "google_maps_api_key"
GEMINI_SLOT = "gemini_api_key"
SLOTS = (GOOGLE_MAPS_SLOT, GEMINI_SLOT)


class StoredKey(BaseModel):
    """A saved key and when it was saved."""
    value: str
    saved_at: datetime


class CredentialStore:
    """
    Persist the maps and model keys between sessions.

    Keys expire ``ttl_days`` after they were saved. Placeholder values from
    .env.example are never written and read back as unset.
    """

    def __init__(
        self,
        path: Path,
        ttl_days: int = 30,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.path = Path(path)
        self.ttl = timedelta(days=ttl_days)
        self._now = now

    def _load(self) -> dict[str, StoredKey]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return {
                slot: StoredKey.model_validate(data)
                for slot, data in raw.items()
                if slot in SLOTS
            }
        except (OSError, ValueError, AttributeError, ValidationError) as e:
            logger.warning("Ignoring unreadable credentials file %s: %s", self.path, e)
            return {}

    def _write(self, keys: dict[str, StoredKey]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {slot: key.model_dump(mode="json") for slot, key in keys.items()}
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, slot: str) -> str | None:
        """Return the saved key for ``slot``, or None if unset or expired."""
        key = self._load().get(slot)
        if key is None or is_unset(key.value):
            return None
        if self._now() - key.saved_at > self.ttl:
            logger.info("Saved %s has expired", slot)
            return None
        return key.value

    def save(self, slot: str, value: str) -> bool:
        """Save a key. Returns False (and writes nothing) for placeholders."""
        if slot not in SLOTS:
            raise KeyError(f"Unknown credential slot: {slot}")
        if is_unset(value):
            return False
        keys = self._load()
        keys[slot] = StoredKey(value=value.strip(), saved_at=self._now())
        self._write(keys)
        logger.info("Saved %s", slot)
        return True

    def clear(self) -> None:
        """Forget both keys."""
        if self.path.exists():
            self.path.unlink()
        logger.info("Cleared saved API keys")

    def resolve(self, slot: str, fallback: str | None = None) -> str | None:
        """Saved key if present, else ``fallback`` unless it is a placeholder."""
        value = self.get(slot)
        if value is not None:
            return value
        return None if is_unset(fallback) else fallback
