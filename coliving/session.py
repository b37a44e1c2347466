"""Session Manager — single source of truth for "who is logged in".

The manager owns one in-memory Session slot and persists it across
process restarts:

  1. The non-secret profile (id, name, user type, contact) goes to the
     general ``profile_store`` as one JSON blob.
  2. The bearer token and optional refresh token go to the ranked
     ``credential_stores``: the first tier that accepts a write wins, so
     a machine without the secure tier falls back to the plain one.
  3. Clearing removes every artifact from every tier.

Storage failures are logged and degrade to "no session" or to the next
tier; they never reach callers.  Token expiry is checked once, when the
persisted session is loaded.

Typical lifecycle::

    manager = SessionManager(profile_store, [secure_store, plain_store])
    session = await manager.load_persisted_session()   # at startup
    ...
    await manager.set_session(new_session)             # after OTP login
    await manager.logout()                             # explicit logout
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from pydantic import ValidationError

from coliving.config import Settings, settings
from coliving.exceptions import ColivingError, ColivingErrorCodes, StorageUnavailable
from coliving.models.session import Session
from coliving.notifications import Notifier
from coliving.storage import EncryptedFileStorage, FileStorage, StorageBackend
from coliving.tokens import is_expired

log = logging.getLogger("coliving.session")

PROFILE_KEY = "userData"
TOKEN_KEY = "userToken"
REFRESH_TOKEN_KEY = "refreshToken"

SessionListener = Callable[[Optional[Session]], None]


def redact_pii(value: str) -> str:
    """Mask PII for logging — show first 3 and last 2 chars only."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]


class SessionManager:
    """Owns the authenticated-user slot and its persistence.

    The slot is mutated only from the event loop thread.  Persistence
    writes are serialized through one lock, so overlapping ``set_session``
    calls hit storage in call order and the last call wins both in memory
    and on disk.
    """

    def __init__(
        self,
        profile_store: StorageBackend,
        credential_stores: Sequence[StorageBackend],
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not credential_stores:
            raise ValueError("at least one credential store is required")
        self._profile_store = profile_store
        self._credential_stores = list(credential_stores)
        self._notifier = notifier
        self._clock = clock

        self._current: Session | None = None
        self._listeners: list[SessionListener] = []
        self._write_lock = asyncio.Lock()
        self._loading = False

    @classmethod
    def from_settings(
        cls,
        cfg: Settings | None = None,
        notifier: Notifier | None = None,
    ) -> "SessionManager":
        """Build the default tiers under ``storage_dir``: secure file, then plain file."""
        cfg = cfg or settings
        plain = FileStorage(cfg.storage_dir / "session.json", name="plain")
        try:
            key = cfg.encryption_key_bytes()
        except ValueError:
            log.warning("Ignoring malformed session encryption key; secure tier disabled")
            key = None
        secure = EncryptedFileStorage(cfg.storage_dir / "credentials.bin", key)
        return cls(plain, [secure, plain], notifier=notifier)

    # ── Read side ─────────────────────────────────────────────────

    @property
    def current(self) -> Session | None:
        return self._current

    def get(self) -> Session | None:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    @property
    def is_loading(self) -> bool:
        return self._loading

    def bearer_headers(self) -> dict[str, str]:
        """Authorization header for the current session, or {} when anonymous."""
        if self._current is None:
            return {}
        return {"Authorization": f"Bearer {self._current.token}"}

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` on every session change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    # ── Transitions ───────────────────────────────────────────────

    def _set_current(self, session: Session | None) -> None:
        self._current = session
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                log.exception("Session listener %r failed", listener)

    async def load_persisted_session(self) -> Session | None:
        """Rehydrate the session saved by a previous process.

        Returns None, after clearing every stored artifact, when the
        saved token has expired, can't be decoded, or storage can't be
        read.  Never raises.
        """
        self._loading = True
        try:
            session = await self._read_persisted()
        except (ColivingError, ValueError, TypeError, ValidationError) as exc:
            log.warning("Discarding persisted session: %s", exc)
            session = None
            await self._clear_persisted()
        finally:
            self._loading = False

        self._set_current(session)
        return session

    async def _read_persisted(self) -> Session | None:
        raw_profile = await self._profile_store.get(PROFILE_KEY)
        token = await self._read_credential(TOKEN_KEY)

        if not raw_profile and not token:
            log.info("No persisted session")
            return None
        if not raw_profile or not token:
            raise ColivingError(ColivingErrorCodes.DECODE_ERROR, "Persisted session is incomplete")

        profile = json.loads(raw_profile)
        if not isinstance(profile, dict):
            raise ValueError("persisted profile is not a JSON object")

        now = self._clock() if self._clock else None
        if is_expired(token, now=now):
            log.info("Persisted token expired; logging out")
            await self._clear_persisted()
            return None

        refresh_token = await self._read_credential(REFRESH_TOKEN_KEY)
        session = Session.model_validate(
            {**profile, "token": token, "refreshToken": refresh_token}
        )
        log.info("Restored session for user %s", redact_pii(session.id))
        return session

    async def set_session(self, session: Session | None) -> None:
        """Replace the current session and persist (or clear) it.

        The in-memory slot and listeners update before any storage I/O.
        """
        self._set_current(session)
        if session is None:
            log.info("Session cleared")
            await self._clear_persisted()
            return

        log.info("Session set for user %s", redact_pii(session.id))
        async with self._write_lock:
            try:
                await self._profile_store.set(PROFILE_KEY, json.dumps(session.profile_blob()))
            except StorageUnavailable as exc:
                log.warning("Failed to save profile to %s: %s", self._profile_store.name, exc)
            await self._write_credential(TOKEN_KEY, session.token)
            if session.refresh_token:
                await self._write_credential(REFRESH_TOKEN_KEY, session.refresh_token)
            else:
                await self._remove_credential(REFRESH_TOKEN_KEY)

    async def logout(self) -> None:
        """Clear the session and tell the user. Navigation is the caller's job."""
        await self.set_session(None)
        if self._notifier is not None:
            self._notifier.info("Logged out!")

    # ── Tiered storage helpers ────────────────────────────────────

    async def _read_credential(self, key: str) -> str | None:
        failures: list[StorageUnavailable] = []
        for store in self._credential_stores:
            try:
                value = await store.get(key)
            except StorageUnavailable as exc:
                log.info("%s get failed, trying next tier: %s", store.name, exc)
                failures.append(exc)
                continue
            if value:
                return value
        if len(failures) == len(self._credential_stores):
            raise failures[-1]
        return None

    async def _write_credential(self, key: str, value: str) -> None:
        for store in self._credential_stores:
            try:
                await store.set(key, value)
            except StorageUnavailable as exc:
                log.info("%s set failed, trying next tier: %s", store.name, exc)
                continue
            # Drop copies left in other tiers by earlier fallbacks
            await self._remove_credential(key, skip=store)
            return
        log.warning("No storage tier accepted %s; session will not survive restart", key)

    async def _remove_credential(self, key: str, skip: StorageBackend | None = None) -> None:
        for store in self._credential_stores:
            if store is skip:
                continue
            try:
                await store.remove(key)
            except StorageUnavailable as exc:
                log.debug("%s remove failed: %s", store.name, exc)

    async def _clear_persisted(self) -> None:
        async with self._write_lock:
            try:
                await self._profile_store.remove(PROFILE_KEY)
            except StorageUnavailable as exc:
                log.warning("Failed to clear profile from %s: %s", self._profile_store.name, exc)
            await self._remove_credential(TOKEN_KEY)
            await self._remove_credential(REFRESH_TOKEN_KEY)
