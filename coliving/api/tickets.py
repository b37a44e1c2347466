"""Support tickets: history and creation with an optional photo."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from coliving.exceptions import ColivingError, ColivingErrorCodes
from coliving.models.ticket import PRIORITIES, Ticket, TicketCreated, TicketList

from .client import ApiClient

log = logging.getLogger("coliving.api.tickets")

USER_TICKETS = "/api/tickets/get-user-tickets"
CREATE_TICKET = "/api/tickets/create"


@dataclass
class TicketDraft:
    """What the user fills in on the raise-complaint form."""

    issue: str
    description: str
    priority: str = "medium"
    date: date | None = None
    booking_id: int | None = None
    image_path: Path | None = None

    def validate(self) -> None:
        missing = [name for name in ("issue", "description") if not getattr(self, name).strip()]
        if missing:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message=f"Required: {', '.join(missing)}",
            )
        if self.priority.upper() not in PRIORITIES:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message=f"Priority must be one of {', '.join(PRIORITIES)}",
            )

    def form_fields(self) -> dict[str, str]:
        fields = {
            "date": (self.date or date.today()).isoformat(),
            "issue": self.issue.strip(),
            "description": self.description.strip(),
            "priority": self.priority.upper(),
        }
        if self.booking_id is not None:
            fields["bookingId"] = str(self.booking_id)
        return fields


def split_by_status(tickets: list[Ticket]) -> tuple[list[Ticket], list[Ticket]]:
    """(open, closed) tickets, preserving order."""
    ongoing = [t for t in tickets if t.is_open]
    closed = [t for t in tickets if not t.is_open]
    return ongoing, closed


class TicketsApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_tickets(self) -> list[Ticket]:
        result = await self._client.request("GET", USER_TICKETS, TicketList)
        return result.tickets

    async def create_ticket(self, draft: TicketDraft) -> TicketCreated:
        """Multipart upload; uses the longer upload timeout."""
        draft.validate()
        fields = draft.form_fields()
        timeout = self._client.config.upload_timeout

        if draft.image_path is None:
            # Backend only parses multipart bodies; send plain fields as parts
            return await self._client.request(
                "POST", CREATE_TICKET, TicketCreated,
                files={name: (None, value) for name, value in fields.items()},
                timeout=timeout,
            )

        path = Path(draft.image_path)
        content_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message=f"Cannot read attachment {path.name}",
                cause=e,
            ) from e
        result = await self._client.request(
            "POST", CREATE_TICKET, TicketCreated,
            data=fields,
            files={"ticketImage": (path.name, content, content_type)},
            timeout=timeout,
        )
        log.info("Ticket created with attachment %s", path.name)
        return result
