"""Provider credentials.

Adapters read keys through ``get_key_manager()`` rather than ``os.getenv`` so
that every value handed out can later be scrubbed from log lines.
"""

from __future__ import annotations

import os
from typing import Optional

from trip_expenses.security.redact import redact_sensitive
from trip_expenses.shared.exceptions import KeyMissingError

NAVER_CLIENT_ID = "NAVER_CLIENT_ID"
NAVER_CLIENT_SECRET = "NAVER_CLIENT_SECRET"
OPINET_API_KEY = "OPINET_API_KEY"


class KeyManager:
    """Process-wide cache of API keys loaded from the environment."""

    def __init__(self):
        self._keys: dict[str, str] = {}

    def get(self, name: str, *, required: bool = False) -> Optional[str]:
        value = self._keys.get(name)
        if value is None:
            value = os.getenv(name, "").strip()
            if value:
                self._keys[name] = value
            elif required:
                raise KeyMissingError(name)
            else:
                return None
        return value

    def naver_credentials(self) -> tuple[str, str]:
        """Both halves of the Naver Cloud gateway key pair; raises if either is unset."""
        return (
            self.get(NAVER_CLIENT_ID, required=True) or "",
            self.get(NAVER_CLIENT_SECRET, required=True) or "",
        )

    def opinet_key(self) -> Optional[str]:
        return self.get(OPINET_API_KEY)

    def has_key(self, name: str) -> bool:
        if name in self._keys:
            return True
        return bool(os.getenv(name, "").strip())

    def reload(self, name: str) -> None:
        raw = os.getenv(name, "").strip()
        if raw:
            self._keys[name] = raw
        else:
            self._keys.pop(name, None)

    @staticmethod
    def redact(value: str) -> str:
        """Keep the first and last four characters only."""
        if not value or len(value) <= 8:
            return "****"
        return value[:4] + "****" + value[-4:]

    def scrub_text(self, text: str) -> str:
        result = redact_sensitive(str(text) if text is not None else "")
        for name, value in self._keys.items():
            if value and value in result:
                result = result.replace(value, f"[{name}:***REDACTED***]")
        return result


_manager: Optional[KeyManager] = None


def get_key_manager() -> KeyManager:
    global _manager
    if _manager is None:
        _manager = KeyManager()
    return _manager
