"""Pydantic models for support tickets."""

from typing import Optional

from pydantic import field_validator

from ._base import ApiModel

PRIORITIES = ("LOW", "MEDIUM", "HIGH")


class Ticket(ApiModel):
    id: int
    support_code: str = ""
    issue: str = ""
    description: str = ""
    priority: str = ""
    status: str = "open"  # "open" | "closed"
    date: Optional[str] = None
    room_number: Optional[str] = None
    image: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("room_number", mode="before")
    @classmethod
    def _room_number(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def is_open(self) -> bool:
        return self.status.lower() == "open"

    @property
    def status_label(self) -> str:
        return "Pending" if self.is_open else "Closed"


class TicketList(ApiModel):
    tickets: list[Ticket] = []


class TicketCreated(ApiModel):
    success: bool = True
    message: str = ""
    ticket: Optional[Ticket] = None
