"""Multi-step booking flow.

    select_room → choose_stay → review (quote) → submit → paying → done

Each step checks that it is being called in order; the quote is built by
the shared price calculator and thrown away once the booking request has
been sent, whatever the outcome.  Backend failures become error notices
and leave the flow where it was so the user can retry by hand.
"""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from typing import Optional

from coliving.api import Backend, build_booking_request
from coliving.exceptions import ColivingError, ColivingErrorCodes
from coliving.models.booking import BookingResult
from coliving.models.payment import PaymentOutcome
from coliving.models.property import Property, RateCard
from coliving.notifications import Notifier, describe_error
from coliving.pricing import BookingMode, BookingQuote, compute_quote, parse_duration, validate_duration

from .scope import CancelScope

log = logging.getLogger("coliving.flows.booking")


class BookingStep(str, Enum):
    SELECT_ROOM = "select_room"
    CHOOSE_STAY = "choose_stay"
    REVIEW = "review"
    PAYING = "paying"
    DONE = "done"


# step -> steps it may be entered from
_ENTERED_FROM: dict[BookingStep, set[BookingStep]] = {
    BookingStep.CHOOSE_STAY: {BookingStep.SELECT_ROOM, BookingStep.CHOOSE_STAY, BookingStep.REVIEW},
    BookingStep.REVIEW: {BookingStep.CHOOSE_STAY, BookingStep.REVIEW},
    BookingStep.PAYING: {BookingStep.REVIEW},
    BookingStep.DONE: {BookingStep.REVIEW, BookingStep.PAYING},
}


class BookingWizard:
    """Drives one booking from room choice to payment result."""

    def __init__(
        self,
        backend: Backend,
        notifier: Notifier,
        scope: CancelScope | None = None,
    ) -> None:
        self._backend = backend
        self._notifier = notifier
        self._scope = scope or CancelScope("booking")

        self._step = BookingStep.SELECT_ROOM
        self._property: Optional[Property] = None
        self._rate_card: Optional[RateCard] = None
        self._check_in: Optional[date] = None
        self._months: Optional[int] = None
        self._quote: Optional[BookingQuote] = None
        self._order_id: Optional[str] = None
        self._redirect_url: Optional[str] = None
        self.result: Optional[BookingResult] = None
        self.outcome: Optional[PaymentOutcome] = None
        self.loading = False

    # ── State ─────────────────────────────────────────────────

    @property
    def step(self) -> BookingStep:
        return self._step

    @property
    def quote(self) -> BookingQuote | None:
        return self._quote

    @property
    def redirect_url(self) -> str | None:
        return self._redirect_url

    def _advance(self, target: BookingStep) -> None:
        if self._step not in _ENTERED_FROM[target]:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message=f"Cannot go to {target.value} from {self._step.value}",
            )
        if target is not self._step:
            log.info("Booking flow: %s → %s", self._step.value, target.value)
        self._step = target

    # ── Steps ─────────────────────────────────────────────────

    def select_room(self, prop: Property, rate_card: RateCard) -> None:
        if self._step not in (BookingStep.SELECT_ROOM, BookingStep.CHOOSE_STAY, BookingStep.REVIEW):
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message="Booking already submitted",
            )
        if rate_card.property_id is None:
            rate_card = rate_card.model_copy(update={"property_id": prop.id})
        self._property = prop
        self._rate_card = rate_card
        self._quote = None
        self._step = BookingStep.SELECT_ROOM
        self._advance(BookingStep.CHOOSE_STAY)

    def choose_stay(self, check_in: date, duration: int | str) -> None:
        """Pick the check-in date and stay length ("6 Months" or 6)."""
        if check_in < date.today():
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message="Check-in date cannot be in the past",
            )
        months = parse_duration(duration) if isinstance(duration, str) else validate_duration(duration)
        self._advance(BookingStep.REVIEW)
        self._check_in = check_in
        self._months = months
        self._quote = None

    def review(self, mode: BookingMode | str) -> BookingQuote:
        """Price the stay for the chosen mode. Can be called again to switch modes."""
        if self._step is not BookingStep.REVIEW or self._rate_card is None or self._months is None:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message="Choose a room and stay before reviewing the price",
            )
        self._quote = compute_quote(self._rate_card.rent, self._months, mode)
        return self._quote

    async def submit(self) -> BookingResult | None:
        """Send the booking. Returns None (after notifying) on failure."""
        if self._step is not BookingStep.REVIEW or self._quote is None:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message="Review the price before submitting",
            )
        sessions = self._backend.client.sessions
        session = sessions.current if sessions else None
        if session is None:
            self._notifier.error("Booking Failed", "Please log in to book a room.")
            return None

        if self._rate_card is None or self._check_in is None:
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message="Choose a room and stay before submitting",
            )
        self.loading = True
        try:
            request = build_booking_request(session.id, self._rate_card, self._check_in, self._quote)
            result = await self._scope.run(self._backend.bookings.create_booking(request))
        except ColivingError as e:
            if e.code == ColivingErrorCodes.CANCELLED:
                log.info("Booking submission cancelled")
                return None
            self._notifier.error("Booking Failed", describe_error(e))
            return None
        finally:
            self.loading = False
            self._quote = None

        self.result = result
        self._notifier.success(
            "Booking Submitted",
            result.message or "Your booking request has been successfully submitted.",
        )
        if result.redirect_url and result.order_id:
            self.begin_payment(result.redirect_url, result.order_id)
        else:
            self._advance(BookingStep.DONE)
        return result

    def begin_payment(self, redirect_url: str, order_id: str) -> None:
        self._advance(BookingStep.PAYING)
        self._redirect_url = redirect_url
        self._order_id = order_id

    async def on_navigation(self, url: str) -> PaymentOutcome | None:
        """Feed web-view URLs here. Returns the outcome once the redirect page is reached."""
        if self._step is not BookingStep.PAYING or self._order_id is None:
            return None
        if not self._backend.payments.is_return_url(url):
            return None

        self.loading = True
        try:
            outcome = await self._scope.run(self._backend.payments.resolve(self._order_id))
        except ColivingError as e:
            if e.code == ColivingErrorCodes.CANCELLED:
                log.info("Payment status check cancelled")
                return None
            raise
        finally:
            self.loading = False

        self.outcome = outcome
        self._advance(BookingStep.DONE)
        if outcome.succeeded:
            self._notifier.success("Payment Successful", "Your booking is confirmed.")
        else:
            message = " ".join(p for p in (outcome.reason, outcome.detail) if p)
            self._notifier.error("Payment Failed", message)
        return outcome

    def close(self) -> None:
        """Screen teardown: cancel whatever is still in flight."""
        self._scope.close()
