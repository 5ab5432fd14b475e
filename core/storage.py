"""Key/value persistence for session state that must survive reloads.

Values are JSON text written whole; there are no partial updates. Every
browser session on the server shares the same records, so stores wrap
their read-modify-write cycles in `KeyValueStorage.lock`.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from typing import Dict, Optional

from core.constants import STORAGE_FILE_DEFAULT
from core.services import DBConnection, is_postgres

logger = logging.getLogger(__name__)


class KeyValueStorage:
    """Minimal storage contract used by the settings and alert stores."""

    # Shared by all instances: sessions run as threads of one server process
    lock = threading.RLock()

    def load(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def save(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    """In-process storage (tests, or when nothing durable is configured)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """All records kept in one JSON document on disk."""

    def __init__(self, path: str = STORAGE_FILE_DEFAULT):
        self.path = path

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} does not hold an object")
        return data

    def _read_for_update(self) -> Dict[str, str]:
        """Current document, or an empty one when the file is unreadable."""
        try:
            return self._read()
        except ValueError:
            logger.exception("Storage file %s is unreadable, starting over", self.path)
            return {}

    def _write(self, data: Dict[str, str]) -> None:
        """Write a temp file next to the target and swap it in."""
        folder = os.path.dirname(self.path) or "."
        os.makedirs(folder, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=folder, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def load(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def save(self, key: str, value: str) -> None:
        with self.lock:
            data = self._read_for_update()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self.lock:
            data = self._read_for_update()
            if key in data:
                del data[key]
                self._write(data)


class DatabaseStorage(KeyValueStorage):
    """Records kept in the ``app_storage`` table of the app database."""

    def __init__(self, conn: DBConnection):
        self.conn = conn

    @property
    def _placeholder(self) -> str:
        return "%s" if is_postgres(self.conn) else "?"

    def load(self, key: str) -> Optional[str]:
        cur = self.conn.cursor()
        cur.execute(
            f"SELECT value FROM app_storage WHERE key={self._placeholder}", (key,)
        )
        row = cur.fetchone()
        return row[0] if row else None

    def save(self, key: str, value: str) -> None:
        p = self._placeholder
        cur = self.conn.cursor()
        try:
            cur.execute(
                f"""
                INSERT INTO app_storage (key, value) VALUES ({p}, {p})
                ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value
                """,
                (key, value),
            )
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise

    def remove(self, key: str) -> None:
        cur = self.conn.cursor()
        try:
            cur.execute(
                f"DELETE FROM app_storage WHERE key={self._placeholder}", (key,)
            )
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
