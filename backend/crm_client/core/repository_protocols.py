"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports storage implementations: they are injected
    - Values are JSON-compatible (str, bool, numbers, lists, dicts)

Design Decisions:
    - Protocol over ABC: structural subtyping, in-memory fakes need no base class
    - Sync methods: reads of a local store are not suspension points
"""

from typing import Any, Protocol


class KeyValueStorage(Protocol):
    """Durable client-side key/value storage addressed by fixed keys."""
    def get(self, key: str) -> Any | None: ...
    def set(self, key: str, value: Any) -> None: ...
    def delete(self, key: str) -> None: ...
