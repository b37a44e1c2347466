"""JSON-file storage tier.

All keys live in one small JSON document.  Reads and writes run in a
worker thread so the event loop never blocks on disk I/O; writes go
through a temp file + rename so a crash never leaves half a document.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

from coliving.exceptions import StorageUnavailable

from .base import StorageBackend

log = logging.getLogger("coliving.storage.file")


class FileStorage(StorageBackend):
    """Plain JSON file under the configured storage directory."""

    def __init__(self, path: str | Path, name: str = "file") -> None:
        self.name = name
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    # ---- encoding hooks (overridden by the encrypted tier) ----------------

    def _encode(self, document: dict[str, str]) -> bytes:
        return json.dumps(document, indent=2).encode("utf-8")

    def _decode(self, raw: bytes) -> dict[str, str]:
        data = json.loads(raw.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("storage document is not a JSON object")
        return {str(k): str(v) for k, v in data.items()}

    # ---- blocking helpers (run via asyncio.to_thread) ---------------------

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            return self._decode(self._path.read_bytes())
        except OSError as exc:
            raise StorageUnavailable(f"Cannot read {self._path}", exc) from exc
        except ValueError as exc:
            raise StorageUnavailable(f"Corrupt storage file {self._path}", exc) from exc

    def _write(self, document: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_bytes(self._encode(document))
            os.replace(tmp, self._path)
            try:
                os.chmod(self._path, 0o600)
            except OSError:
                pass
        except OSError as exc:
            raise StorageUnavailable(f"Cannot write {self._path}", exc) from exc

    def _update(self, key: str, value: str | None) -> None:
        document = self._read()
        if value is None:
            if key not in document:
                return
            document.pop(key)
        else:
            document[key] = value
        self._write(document)

    # ---- StorageBackend interface -----------------------------------------

    async def get(self, key: str) -> str | None:
        document = await asyncio.to_thread(self._read)
        return document.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._update, key, value)
        log.debug("%s: stored %s", self.name, key)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._update, key, None)
        log.debug("%s: removed %s", self.name, key)
