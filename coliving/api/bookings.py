"""Booking submission, history and cancellation."""

from __future__ import annotations

import logging
from datetime import date

from coliving.exceptions import ColivingError, ColivingErrorCodes
from coliving.models.booking import Booking, BookingPage, BookingRequest, BookingResult
from coliving.models.property import RateCard
from coliving.models.user import MessageResponse
from coliving.pricing import BookingQuote

from .client import ApiClient

log = logging.getLogger("coliving.api.bookings")

ADD_BOOKING = "/api/book-room/add"
USER_BOOKINGS = "/api/book-room/getUserBookings"
CANCEL_BOOKING = "/api/book-room/bookings/{booking_id}/cancel"


def build_booking_request(
    user_id: str,
    rate_card: RateCard,
    check_in: date,
    quote: BookingQuote,
) -> BookingRequest:
    """Shape the booking body from a rate card and the quote shown to the user."""
    if rate_card.property_id is None:
        raise ColivingError(
            code=ColivingErrorCodes.VALIDATION_ERROR,
            message=f"Rate card {rate_card.id} has no property",
        )
    try:
        numeric_user_id = int(user_id)
    except ValueError as e:
        raise ColivingError(
            code=ColivingErrorCodes.VALIDATION_ERROR,
            message=f"User id {user_id!r} is not numeric",
            cause=e,
        ) from e
    return BookingRequest(
        user_id=numeric_user_id,
        rate_card_id=rate_card.id,
        property_id=rate_card.property_id,
        check_in_date=check_in,
        monthly_rent=float(quote.monthly_rent),
        duration=quote.duration_months,
        room_type=rate_card.room_type,
    )


class BookingsApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def create_booking(self, request: BookingRequest) -> BookingResult:
        result = await self._client.request(
            "POST", ADD_BOOKING, BookingResult, json=request.to_payload(),
        )
        if not result.success:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message=result.message or "Booking failed",
            )
        log.info(
            "Booking submitted: rate card %s, %d months from %s",
            request.rate_card_id, request.duration, request.check_in_date,
        )
        return result

    async def list_bookings(self, page: int = 1, limit: int = 10) -> BookingPage:
        return await self._client.request(
            "GET", USER_BOOKINGS, BookingPage, params={"page": page, "limit": limit},
        )

    async def active_booking(self) -> Booking | None:
        """The first active or approved booking, used to prefill support tickets."""
        page = await self.list_bookings(page=1, limit=10)
        return next((b for b in page.bookings if b.is_active), None)

    async def cancel_booking(self, booking_id: int) -> MessageResponse:
        path = CANCEL_BOOKING.format(booking_id=booking_id)
        result = await self._client.request("PUT", path, MessageResponse, json={})
        log.info("Booking %s cancelled", booking_id)
        return result
