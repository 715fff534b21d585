"""Key/value contract for exam document storage."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IPersistenceBackend(Protocol):
    """One serialized JSON document per key."""

    def save(self, key: str, data: str) -> None:
        """Replace the document stored under ``key``."""
        ...

    def load(self, key: str) -> str:
        """Raises KeyError if ``key`` is unknown."""
        ...

    def exists(self, key: str) -> bool: ...

    def delete(self, key: str) -> None:
        """No-op if ``key`` is unknown."""
        ...

    def list_keys(self, prefix: str = "") -> list[str]: ...
