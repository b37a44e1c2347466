"""Pydantic models for auth responses and the user profile."""

from typing import Optional

from pydantic import field_validator

from ._base import ApiModel


class Account(ApiModel):
    """The ``account`` object returned by login OTP verification."""

    id: str
    role: str = "user"
    full_name: str = ""
    user_type: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    refresh_token: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class LoginResult(ApiModel):
    success: bool = False
    message: str = ""
    token: Optional[str] = None
    account: Optional[Account] = None


class MessageResponse(ApiModel):
    """Generic ``{success?, message?}`` acknowledgement."""

    success: Optional[bool] = None
    message: str = ""


# Fields that only apply to one user type
STUDENT_FIELDS = ("parent_name", "parent_mobile", "college_name", "course")
PROFESSIONAL_FIELDS = ("company_name", "position")


class UserProfile(ApiModel):
    id: int
    full_name: str = ""
    email: str = ""
    phone: str = ""
    gender: str = ""
    user_type: str = ""
    date_of_birth: Optional[str] = None
    profile_image: Optional[str] = None
    food_preference: str = ""
    allergies: str = ""
    parent_name: Optional[str] = None
    parent_mobile: Optional[str] = None
    college_name: Optional[str] = None
    course: Optional[str] = None
    company_name: Optional[str] = None
    position: Optional[str] = None

    @field_validator("profile_image", mode="before")
    @classmethod
    def _image_is_string(cls, value: object) -> object:
        # Some records carry an object here; treat as no image
        return value if isinstance(value, str) else None

    @field_validator("food_preference", "allergies", mode="before")
    @classmethod
    def _blank(cls, value: object) -> object:
        return "" if value is None else value


class UserEnvelope(ApiModel):
    user: UserProfile
