"""Passwordless login flow: email → emailed OTP → session."""

from __future__ import annotations

import logging
import re
from typing import Optional

from coliving.api import Backend
from coliving.exceptions import AccountNotFound, ColivingError, ColivingErrorCodes
from coliving.models.session import Session
from coliving.notifications import Notifier, describe_error

from .scope import CancelScope

log = logging.getLogger("coliving.flows.login")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_email(value: str) -> str:
    """Return an error message, or "" when the address looks usable."""
    if not value.strip():
        return "Email is required"
    if not _EMAIL_RE.match(value.strip()):
        return "Enter valid email"
    return ""


class LoginFlow:
    """State for the login screen. Every failure ends as a notice, never an exception."""

    def __init__(
        self,
        backend: Backend,
        notifier: Notifier,
        scope: CancelScope | None = None,
    ) -> None:
        self._backend = backend
        self._notifier = notifier
        self._scope = scope or CancelScope("login")

        self.email = ""
        self.otp_sent = False
        self.needs_signup = False
        self.sending = False
        self.verifying = False
        self.errors: dict[str, str] = {}

    async def send_otp(self, email: str) -> bool:
        """Ask the backend to email a login code. True when one was sent."""
        error = validate_email(email)
        if error:
            self.errors = {"email": error}
            return False
        self.errors = {}
        self.email = email.strip()

        self.sending = True
        try:
            await self._scope.run(self._backend.auth.request_login_otp(self.email))
        except AccountNotFound:
            self.needs_signup = True
            self._notifier.info("Account not found — Please sign up")
            return False
        except ColivingError as e:
            if e.code != ColivingErrorCodes.CANCELLED:
                self._notifier.error(describe_error(e, "Couldn't send OTP"))
            return False
        finally:
            self.sending = False

        self.otp_sent = True
        self._notifier.success("OTP sent to your email")
        return True

    async def verify_otp(self, otp: str) -> Optional[Session]:
        """Exchange the code for a session. The Session Manager is updated on success."""
        if not otp.strip():
            self.errors = {"otp": "OTP is required"}
            return None
        if not self.otp_sent:
            self.errors = {"otp": "Request an OTP first"}
            return None
        self.errors = {}

        self.verifying = True
        try:
            session = await self._scope.run(
                self._backend.auth.verify_login_otp(self.email, otp.strip())
            )
        except ColivingError as e:
            if e.code != ColivingErrorCodes.CANCELLED:
                self._notifier.error(describe_error(e, "Invalid OTP"))
            return None
        finally:
            self.verifying = False

        self._notifier.success("Login successful")
        return session

    def close(self) -> None:
        self._scope.close()
