"""Application configuration via environment variables."""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path

from pydantic_settings import BaseSettings

log = logging.getLogger("coliving.config")


class Settings(BaseSettings):
    # Backend
    api_base_url: str = "https://staging.cocoliving.in"
    payment_redirect_base: str = "https://staging.cocoliving.in/payment/redirect"

    # Timeouts (seconds). Ticket uploads carry images, so they get longer.
    request_timeout: float = 15.0
    upload_timeout: float = 30.0

    # Session persistence
    storage_dir: Path = Path.home() / ".coliving"
    session_encryption_key: str = ""  # base64 AES-256 key; empty disables secure tier

    debug: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "COLIVING_",
    }

    def encryption_key_bytes(self) -> bytes | None:
        """Decode the secure-tier key, or None when it is not configured."""
        if not self.session_encryption_key:
            return None
        try:
            key = base64.b64decode(self.session_encryption_key, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("COLIVING_SESSION_ENCRYPTION_KEY is not valid base64") from exc
        if len(key) != 32:
            raise ValueError(
                "COLIVING_SESSION_ENCRYPTION_KEY must decode to 32 bytes (AES-256)."
            )
        return key

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings, raises on errors."""
        warnings: list[str] = []

        if not self.api_base_url.startswith("https://"):
            if not self.debug:
                raise ValueError(
                    "COLIVING_API_BASE_URL must use https:// outside DEBUG mode."
                )
            warnings.append(
                f"API base URL {self.api_base_url} is not HTTPS (DEBUG=true)."
            )

        # Raises on a malformed key
        if self.encryption_key_bytes() is None:
            warnings.append(
                "COLIVING_SESSION_ENCRYPTION_KEY not set. "
                "Tokens will be stored in the plain session file."
            )

        if self.upload_timeout < self.request_timeout:
            warnings.append(
                "COLIVING_UPLOAD_TIMEOUT is shorter than the request timeout; "
                "ticket attachments may time out."
            )

        return warnings


settings = Settings()
