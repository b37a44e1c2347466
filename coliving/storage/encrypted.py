"""AES-GCM encrypted file storage, the secure tier for credentials.

Same document layout as FileStorage, but the whole document is sealed
with AES-256-GCM.  The file format is::

    base64( nonce ‖ ciphertext ‖ tag )

Without a key the tier is unavailable, and a file that fails
authentication is treated the same way, so the Session Manager falls
back to the plain tier instead of trusting tampered data.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from coliving.exceptions import StorageUnavailable

from .file import FileStorage

_NONCE_SIZE = 12


def generate_key() -> str:
    """Generate a base64 AES-256 key suitable for COLIVING_SESSION_ENCRYPTION_KEY."""
    return base64.b64encode(AESGCM.generate_key(bit_length=256)).decode("ascii")


class EncryptedFileStorage(FileStorage):
    """Encrypted JSON file. ``key`` of None makes every call unavailable."""

    def __init__(self, path: str | Path, key: bytes | None, name: str = "secure") -> None:
        super().__init__(path, name=name)
        self._aesgcm = AESGCM(key) if key else None

    def _cipher(self) -> AESGCM:
        if self._aesgcm is None:
            raise StorageUnavailable("No encryption key configured for secure storage")
        return self._aesgcm

    def _encode(self, document: dict[str, str]) -> bytes:
        nonce = os.urandom(_NONCE_SIZE)
        ct = self._cipher().encrypt(nonce, json.dumps(document).encode("utf-8"), None)
        return base64.b64encode(nonce + ct)

    def _decode(self, raw: bytes) -> dict[str, str]:
        cipher = self._cipher()
        try:
            blob = base64.b64decode(raw, validate=True)
            plain = cipher.decrypt(blob[:_NONCE_SIZE], blob[_NONCE_SIZE:], None)
        except (binascii.Error, InvalidTag) as exc:
            raise StorageUnavailable("Secure storage could not be decrypted", exc) from exc
        return super()._decode(plain)

    def _read(self) -> dict[str, str]:
        self._cipher()
        return super()._read()
