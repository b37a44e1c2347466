"""Storage tiers for persisted session data."""

from .base import StorageBackend
from .encrypted import EncryptedFileStorage
from .file import FileStorage
from .memory import MemoryStorage

__all__ = ["EncryptedFileStorage", "FileStorage", "MemoryStorage", "StorageBackend"]
