"""Dict-backed exam store used by tests and ``--store memory`` runs."""

from __future__ import annotations

import logging

log = logging.getLogger(__name__)


class MemoryPersistenceBackend:
    def __init__(self) -> None:
        self._docs: dict[str, str] = {}

    def save(self, key: str, data: str) -> None:
        self._docs[key] = data
        log.debug("Stored exam document %s (%d bytes)", key, len(data))

    def load(self, key: str) -> str:
        try:
            return self._docs[key]
        except KeyError:
            raise KeyError(f"No exam document for key {key!r}") from None

    def exists(self, key: str) -> bool:
        return key in self._docs

    def delete(self, key: str) -> None:
        self._docs.pop(key, None)

    def list_keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._docs if k.startswith(prefix))
