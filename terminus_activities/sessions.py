"""User id to bearer token lookup populated by the OAuth callback."""

from __future__ import annotations

import threading
from typing import Dict, Optional


class TokenStore:
    """In-memory token table.

    Writes are serialised; reads take no lock since a single ``dict.get`` is
    atomic and writes only happen on login.
    """

    def __init__(self) -> None:
        self._tokens: Dict[str, str] = {}
        self._write_lock = threading.Lock()

    def get(self, user_id: str) -> Optional[str]:
        return self._tokens.get(user_id)

    def set(self, user_id: str, token: str) -> None:
        with self._write_lock:
            self._tokens[user_id] = token
