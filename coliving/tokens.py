"""Bearer token expiry checks.

Tokens are decoded *without* verifying the signature: the backend is the
authority on validity, the client only needs to know whether a cached
token has already expired.
"""

from __future__ import annotations

from datetime import datetime, timezone

import jwt

from coliving.exceptions import ColivingError, ColivingErrorCodes


def decode_expiry(token: str) -> datetime:
    """Return the token's ``exp`` claim as an aware UTC datetime."""
    try:
        payload = jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
        )
    except jwt.PyJWTError as e:
        raise ColivingError(
            code=ColivingErrorCodes.DECODE_ERROR,
            message="Token is not a valid JWT",
            cause=e,
        ) from e

    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise ColivingError(
            code=ColivingErrorCodes.DECODE_ERROR,
            message="Token has no numeric exp claim",
        )
    try:
        return datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ColivingError(
            code=ColivingErrorCodes.DECODE_ERROR,
            message=f"Token exp claim is out of range: {exp!r}",
            cause=e,
        ) from e


def is_expired(token: str, now: datetime | None = None) -> bool:
    """True when the token's expiry is at or before ``now``.

    A naive ``now`` is taken to be UTC.  Raises ColivingError(DECODE_ERROR)
    for a token that can't be read.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return decode_expiry(token) <= now
