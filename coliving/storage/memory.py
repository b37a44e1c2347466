"""In-process storage tier, used by tests and throwaway runs."""

from __future__ import annotations

from coliving.exceptions import StorageUnavailable

from .base import StorageBackend


class MemoryStorage(StorageBackend):
    """Dict-backed store. ``available=False`` simulates a missing tier."""

    def __init__(self, name: str = "memory", available: bool = True) -> None:
        self.name = name
        self.available = available
        self._data: dict[str, str] = {}

    def _check(self) -> None:
        if not self.available:
            raise StorageUnavailable(f"{self.name} storage is unavailable")

    async def get(self, key: str) -> str | None:
        self._check()
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._check()
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._check()
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
