"""User profile read and update."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Any, Mapping

from coliving.exceptions import ColivingError, ColivingErrorCodes
from coliving.models.user import (
    PROFESSIONAL_FIELDS,
    STUDENT_FIELDS,
    MessageResponse,
    UserEnvelope,
    UserProfile,
)

from .client import ApiClient

log = logging.getLogger("coliving.api.profile")

GET_USER = "/api/user/getUser/{user_id}"
UPDATE_PROFILE = "/api/user/update-profile/{user_id}"


def profile_form(changes: Mapping[str, Any], user_type: str) -> dict[str, str]:
    """Form fields for a profile update.

    Blank values are dropped, and so are fields that belong to the other
    user type (a student has no company, a professional no college).
    """
    kind = user_type.strip().lower()
    excluded: tuple[str, ...] = ()
    if kind == "student":
        excluded = PROFESSIONAL_FIELDS
    elif kind == "professional":
        excluded = STUDENT_FIELDS

    aliases = UserProfile.model_fields
    form: dict[str, str] = {}
    for name, value in changes.items():
        if name in excluded or value is None or str(value).strip() == "":
            continue
        field = aliases.get(name)
        key = field.alias if field is not None and field.alias else name
        form[key] = str(value)
    return form


class ProfileApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def _user_id(self) -> str:
        session = self._client.sessions.current if self._client.sessions else None
        if session is None:
            raise ColivingError(
                code=ColivingErrorCodes.UNAUTHORIZED,
                message="Please log in to view your profile",
            )
        return session.id

    async def get_profile(self) -> UserProfile:
        path = GET_USER.format(user_id=self._user_id())
        envelope = await self._client.request("GET", path, UserEnvelope)
        return envelope.user

    async def update_profile(
        self,
        changes: Mapping[str, Any],
        image_path: Path | None = None,
    ) -> MessageResponse:
        session = self._client.sessions.current if self._client.sessions else None
        user_type = session.user_type if session else ""
        path = UPDATE_PROFILE.format(user_id=self._user_id())
        form = profile_form(changes, user_type)

        files: dict[str, Any] = {name: (None, value) for name, value in form.items()}
        if image_path is not None:
            image_path = Path(image_path)
            try:
                content = await asyncio.to_thread(image_path.read_bytes)
            except OSError as e:
                raise ColivingError(
                    code=ColivingErrorCodes.VALIDATION_ERROR,
                    message=f"Cannot read profile image {image_path.name}",
                    cause=e,
                ) from e
            content_type = mimetypes.guess_type(image_path.name)[0] or "image/jpeg"
            files["profileImage"] = (image_path.name, content, content_type)

        result = await self._client.request("PUT", path, MessageResponse, files=files)
        log.info("Profile updated (%d fields%s)", len(form), ", new image" if image_path else "")
        return result
