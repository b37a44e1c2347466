"""Shared fixtures: settings, storage tiers, tokens and a wired backend."""

import os
import sys
from datetime import datetime, timedelta, timezone

import jwt
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from coliving.api import ApiClient, Backend
from coliving.config import Settings
from coliving.models.session import Session
from coliving.notifications import Notifier
from coliving.session import SessionManager
from coliving.storage import MemoryStorage

BASE_URL = "https://api.test"
_SIGNING_KEY = "test-signing-key-long-enough-for-hs256"


def make_token(expires_in: timedelta = timedelta(hours=1), **claims) -> str:
    exp = datetime.now(timezone.utc) + expires_in
    payload = {"sub": "42", "exp": int(exp.timestamp()), **claims}
    return jwt.encode(payload, _SIGNING_KEY, algorithm="HS256")


def make_session(**overrides) -> Session:
    fields = {
        "id": "42",
        "token": make_token(),
        "full_name": "Asha Rao",
        "user_type": "student",
        "email": "asha@example.com",
    }
    fields.update(overrides)
    return Session(**fields)


@pytest.fixture
def cfg(tmp_path):
    return Settings(
        api_base_url=BASE_URL,
        payment_redirect_base=f"{BASE_URL}/payment/redirect",
        storage_dir=tmp_path,
        session_encryption_key="",
        _env_file=None,
    )


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def profile_store():
    return MemoryStorage("plain")


@pytest.fixture
def secure_store():
    return MemoryStorage("secure")


@pytest.fixture
def sessions(profile_store, secure_store, notifier):
    return SessionManager(profile_store, [secure_store, profile_store], notifier=notifier)


@pytest.fixture
def backend(sessions, cfg):
    return Backend(ApiClient(sessions, cfg))


@pytest.fixture
async def logged_in(sessions):
    session = make_session()
    await sessions.set_session(session)
    return session
