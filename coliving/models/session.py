"""Pydantic model for the authenticated user session."""

from typing import Literal, Optional

from pydantic import ConfigDict, field_validator

from ._base import ApiModel


class Session(ApiModel):
    """The currently authenticated identity and its bearer credential.

    ``token`` always carries an ``exp`` claim.  The Session Manager never
    exposes a Session whose token it found expired at load time.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    token: str
    refresh_token: Optional[str] = None
    role: Literal["user"] = "user"
    full_name: str = ""
    user_type: str = ""  # "student", "professional", ...

    # Contact details shown on the booking screen
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        # Backend sends numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("token")
    @classmethod
    def _token_present(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("token must not be empty")
        return value

    def profile_blob(self) -> dict:
        """Non-secret fields persisted to general storage."""
        return self.model_dump(
            by_alias=True,
            exclude={"token", "refresh_token"},
            exclude_none=True,
        )
