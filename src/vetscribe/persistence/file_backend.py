"""One JSON file per exam under a base directory.

Writes go to a sibling temp file and are moved into place, so a crash
mid-write never leaves a truncated exam document behind.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from vetscribe.exceptions import PersistenceError

log = logging.getLogger(__name__)

_UNSAFE_KEY_RE = re.compile(r"[^A-Za-z0-9._-]")


class FilePersistenceBackend:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._base.mkdir(parents=True, exist_ok=True)

    def _key_path(self, key: str) -> Path:
        safe = _UNSAFE_KEY_RE.sub("_", key).lstrip(".")
        if not safe:
            raise PersistenceError(f"Unusable storage key: {key!r}")
        return self._base / f"{safe}.json"

    def save(self, key: str, data: str) -> None:
        path = self._key_path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(data, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            raise PersistenceError(f"Failed to write {path}: {exc}") from exc
        log.debug("Saved %s to %s", key, path)

    def load(self, key: str) -> str:
        path = self._key_path(key)
        if not path.is_file():
            raise KeyError(f"No exam document for key {key!r} (path: {path})")
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to read {path}: {exc}") from exc

    def exists(self, key: str) -> bool:
        return self._key_path(key).is_file()

    def delete(self, key: str) -> None:
        path = self._key_path(key)
        if path.is_file():
            path.unlink()

    def list_keys(self, prefix: str = "") -> list[str]:
        return sorted(p.stem for p in self._base.glob("*.json") if p.stem.startswith(prefix))
