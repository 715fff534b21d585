"""Pluggable key/value backends for exam records.

Factory function::

    from vetscribe.persistence import create_persistence_backend
    backend = create_persistence_backend(settings.persistence)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vetscribe.persistence.file_backend import FilePersistenceBackend
from vetscribe.persistence.memory_backend import MemoryPersistenceBackend
from vetscribe.persistence.protocols import IPersistenceBackend

if TYPE_CHECKING:
    from vetscribe.core.config import PersistenceConfig


def create_persistence_backend(config: PersistenceConfig) -> IPersistenceBackend:
    if config.backend == "memory":
        return MemoryPersistenceBackend()
    return FilePersistenceBackend(config.store_path)


__all__ = [
    "FilePersistenceBackend",
    "IPersistenceBackend",
    "MemoryPersistenceBackend",
    "create_persistence_backend",
]
