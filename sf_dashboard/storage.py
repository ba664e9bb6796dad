"""
Key-value storage backends for client-side session data.

Every backend exposes the same three calls:

    get(key)            → str | None
    set_many(mapping)   write several keys as one batch
    remove_many(keys)   delete several keys, missing keys are ignored

Backend failures surface as OSError so callers can treat quota / disk
problems uniformly.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping, MutableMapping
from pathlib import Path

logger = logging.getLogger("storage")
logger.setLevel(logging.INFO)


# ════════════════════════════════════════════
# In-memory / mapping-backed
# ════════════════════════════════════════════

class MappingStorage:
    """Storage over any mutable mapping (a fresh dict by default)."""

    def __init__(self, mapping: MutableMapping | None = None):
        self._data = mapping if mapping is not None else {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set_many(self, values: Mapping[str, str]) -> None:
        self._data.update(values)

    def remove_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)


# ════════════════════════════════════════════
# Durable JSON file
# ════════════════════════════════════════════

class JsonFileStorage:
    """Durable storage kept in a single JSON document on disk.

    Each batch rewrites the whole document through a temp file and
    os.replace, so a reader never sees half of a batch.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> dict:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Corrupt storage file ignored: %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp, self.path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_many(self, values: Mapping[str, str]) -> None:
        data = self._read()
        data.update(values)
        self._write(data)

    def remove_many(self, keys: Iterable[str]) -> None:
        data = self._read()
        removed = [k for k in keys if data.pop(k, None) is not None]
        if removed:
            self._write(data)
