"""User-facing notices: the client's stand-in for toast banners.

Flows push a Notice whenever something worth telling the user happens
(login succeeded, booking failed, logged out).  Each Notice is logged and
delivered to every subscriber's asyncio.Queue, so a CLI, a test, or a
real UI can render them however it likes.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Literal, TypedDict

import httpx

from coliving.exceptions import ApiError, ColivingError, ColivingErrorCodes

log = logging.getLogger("coliving.notifications")

NoticeLevel = Literal["success", "error", "info"]


class Notice(TypedDict):
    level: NoticeLevel
    title: str
    message: str
    timestamp: float


class Notifier:
    """Notice broadcaster using asyncio.Queue per subscriber."""

    def __init__(self, maxsize: int = 50) -> None:
        self._maxsize = maxsize
        self._subscribers: list[asyncio.Queue[Notice]] = []
        self._event_log: list[Notice] = []

    def subscribe(self) -> asyncio.Queue[Notice]:
        """Create a new subscriber queue and return it."""
        q: asyncio.Queue[Notice] = asyncio.Queue(maxsize=self._maxsize)
        self._subscribers.append(q)
        log.debug("Notice subscriber added (total: %d)", len(self._subscribers))
        return q

    def unsubscribe(self, q: asyncio.Queue[Notice]) -> None:
        """Remove a subscriber queue."""
        try:
            self._subscribers.remove(q)
        except ValueError:
            pass
        log.debug("Notice subscriber removed (total: %d)", len(self._subscribers))

    def notify(self, level: NoticeLevel, title: str, message: str = "") -> Notice:
        """Broadcast a notice to all subscribers and append it to the log."""
        notice: Notice = {
            "level": level,
            "title": title,
            "message": message,
            "timestamp": time.time(),
        }
        self._event_log.append(notice)
        log_level = logging.WARNING if level == "error" else logging.INFO
        log.log(log_level, "[%s] %s%s", level, title, f" — {message}" if message else "")

        for q in self._subscribers:
            try:
                q.put_nowait(notice)
            except asyncio.QueueFull:
                # Drop oldest notice to make room
                try:
                    q.get_nowait()
                    q.put_nowait(notice)
                except (asyncio.QueueEmpty, asyncio.QueueFull):
                    pass
        return notice

    def success(self, title: str, message: str = "") -> Notice:
        return self.notify("success", title, message)

    def error(self, title: str, message: str = "") -> Notice:
        return self.notify("error", title, message)

    def info(self, title: str, message: str = "") -> Notice:
        return self.notify("info", title, message)

    @property
    def event_log(self) -> list[Notice]:
        """Every notice sent so far."""
        return list(self._event_log)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


def describe_error(exc: BaseException, fallback: str = "Something went wrong.") -> str:
    """Pick the most useful human-readable message for a failed call.

    Backend messages win; validation error lists are joined; transport
    failures get a generic network message.
    """
    if isinstance(exc, ApiError):
        if exc.message:
            return exc.message
        if exc.errors:
            return "; ".join(exc.errors)
        return fallback
    if isinstance(exc, ColivingError):
        if exc.code == ColivingErrorCodes.NETWORK_ERROR:
            return "Network error. Check your connection and try again."
        return exc.message or fallback
    if isinstance(exc, httpx.HTTPError):
        return "Network error. Check your connection and try again."
    return fallback
