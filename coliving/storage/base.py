"""Abstract base class for session storage tiers.

Defines the key/value interface the Session Manager persists through.
Any backend (plain file, encrypted file, in-memory) implements this ABC.
"""

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Abstract string key/value store.

    Subclasses raise ``StorageUnavailable`` when the tier cannot be used
    at all; the Session Manager then falls through to the next tier.
    """

    name: str = "storage"

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is not an error."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
