"""Passwordless login, signup verification and password endpoints."""

from __future__ import annotations

import logging
from datetime import date

from pydantic import ValidationError

from coliving.exceptions import AccountNotFound, ApiError, ColivingError, ColivingErrorCodes
from coliving.models.session import Session
from coliving.models.user import LoginResult, MessageResponse
from coliving.session import redact_pii

from .client import ApiClient

log = logging.getLogger("coliving.api.auth")

LOGIN_REQUEST_OTP = "/api/common/login/request-otp"
LOGIN_VERIFY_OTP = "/api/common/login/verify-otp"
SIGNUP_SEND_OTP = "/api/user/send-otp"
SIGNUP_VERIFY_OTP = "/api/user/verifyOTP"
REGISTER = "/api/user/register"
FORGOT_PASSWORD = "/api/common/forgot-password"
RESET_PASSWORD = "/api/common/reset-password"
CHANGE_PASSWORD = "/api/common/change-password"

_ACCOUNT_NOT_FOUND_MESSAGE = "Email not found"


class AuthApi:
    """OTP login and account endpoints. A verified login updates the session."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def request_login_otp(self, email: str) -> MessageResponse:
        """Email a login code. Raises AccountNotFound for unknown emails."""
        try:
            return await self._client.request(
                "POST", LOGIN_REQUEST_OTP, MessageResponse,
                auth="none", json={"email": email},
            )
        except ApiError as e:
            if e.message == _ACCOUNT_NOT_FOUND_MESSAGE:
                log.info("No account for %s", redact_pii(email))
                raise AccountNotFound(
                    code=ColivingErrorCodes.ACCOUNT_NOT_FOUND,
                    message=e.message,
                    status_code=e.status_code,
                    errors=e.errors,
                ) from e
            raise

    async def verify_login_otp(self, email: str, otp: str) -> Session:
        """Exchange the emailed code for a token and make it the current session."""
        result = await self._client.request(
            "POST", LOGIN_VERIFY_OTP, LoginResult,
            auth="none", json={"email": email, "otp": otp},
        )
        if not result.success or not result.token or result.account is None:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message=result.message or "Invalid OTP",
            )

        account = result.account.model_dump(exclude_none=True)
        try:
            session = Session.model_validate({**account, "token": result.token})
        except ValidationError as e:
            raise ColivingError(
                code=ColivingErrorCodes.DECODE_ERROR,
                message="Login response carried an unusable account",
                cause=e,
            ) from e

        if self._client.sessions is not None:
            await self._client.sessions.set_session(session)
        log.info("Logged in as %s", redact_pii(session.id))
        return session

    async def send_signup_otp(self, email: str, full_name: str | None = None) -> MessageResponse:
        body = {"email": email}
        if full_name:
            body["fullName"] = full_name
        return await self._client.request(
            "POST", SIGNUP_SEND_OTP, MessageResponse, auth="none", json=body,
        )

    async def verify_signup_otp(self, email: str, otp: str) -> MessageResponse:
        return await self._client.request(
            "POST", SIGNUP_VERIFY_OTP, MessageResponse,
            auth="none", json={"email": email, "otp": otp},
        )

    async def register(
        self,
        *,
        full_name: str,
        email: str,
        phone: str,
        gender: str,
        user_type: str,
        date_of_birth: date,
        otp: str,
    ) -> MessageResponse:
        """Create the account. The user still has to log in afterwards."""
        result = await self._client.request(
            "POST", REGISTER, MessageResponse,
            auth="none",
            json={
                "fullName": full_name,
                "email": email,
                "phone": phone,
                "gender": gender,
                "userType": user_type,
                "dateOfBirth": date_of_birth.isoformat(),
                "otp": otp,
            },
        )
        if result.success is False:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message=result.message or "Registration failed",
            )
        return result

    async def forgot_password(self, email: str) -> MessageResponse:
        return await self._client.request(
            "POST", FORGOT_PASSWORD, MessageResponse, auth="none", json={"email": email},
        )

    async def reset_password(self, email: str, reset_code: str, new_password: str) -> MessageResponse:
        return await self._client.request(
            "POST", RESET_PASSWORD, MessageResponse,
            auth="none",
            json={"email": email, "newPassword": new_password, "resetCode": reset_code},
        )

    async def change_password(
        self, old_password: str, new_password: str, confirm_password: str,
    ) -> MessageResponse:
        if new_password != confirm_password:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message="Passwords do not match",
            )
        return await self._client.request(
            "POST", CHANGE_PASSWORD, MessageResponse,
            json={
                "oldPassword": old_password,
                "newPassword": new_password,
                "confirmPassword": confirm_password,
            },
        )
