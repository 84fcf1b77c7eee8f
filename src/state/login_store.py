from __future__ import annotations

import threading
from typing import Dict, Optional, Protocol


class LoginStateStore(Protocol):
    """Key-value store mapping a user id to the display name it signed in with."""

    def put(self, user_id: str, name: str) -> None: ...

    def get(self, user_id: str) -> Optional[str]: ...


class InMemoryLoginStateStore:
    """
    Thread-safe, process-local `LoginStateStore`.

    - `put` overwrites; concurrent puts for the same user resolve last-writer-wins.
    - Entries are never removed, so the map lives (and grows) with the process.
    """

    def __init__(self) -> None:
        self._names: Dict[str, str] = {}
        self._lock = threading.Lock()

    def put(self, user_id: str, name: str) -> None:
        if not user_id:
            raise ValueError("user_id is required")
        with self._lock:
            self._names[user_id] = name

    def get(self, user_id: str) -> Optional[str]:
        with self._lock:
            return self._names.get(user_id)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._names

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)
