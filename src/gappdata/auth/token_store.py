"""Persistence slot for the last acquired access token."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


class TokenStore(ABC):
    """A single key-value slot holding one access token."""

    @abstractmethod
    def load(self) -> str | None:
        """Return the stored token, or None if the slot is empty."""

    @abstractmethod
    def save(self, token: str) -> None:
        """Replace the stored token."""

    @abstractmethod
    def clear(self) -> None:
        """Empty the slot."""


class MemoryTokenStore(TokenStore):
    """Token slot that lives as long as the process."""

    def __init__(self, token: str | None = None):
        self._token = token

    def load(self) -> str | None:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore(TokenStore):
    """Token slot backed by a JSON file.

    The file holds ``{"access_token": ..., "saved_at": ...}``. A missing or
    unreadable file is treated as an empty slot.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> str | None:
        if not self.path.exists():
            logger.info("No existing token found")
            return None

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load token from {self.path}: {e}")
            return None

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            logger.warning(f"Token file {self.path} has no access_token")
            return None

        logger.info(f"Loaded token saved at {data.get('saved_at', 'unknown')}")
        return token

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "access_token": token,
            "saved_at": datetime.now(timezone.utc).isoformat(),
        }
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Token saved to {self.path}")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info(f"Token removed from {self.path}")
