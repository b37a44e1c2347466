"""Booking price calculator.

One pure function turns (monthly rent, stay duration, booking mode) into
the breakdown shown before a booking is submitted:

    security_deposit = rent * 2
    net_payable      = rent * months + security_deposit
    pre_book_amount  = round_half_up(net_payable * 10%)
    amount_due_now   = pre_book_amount if PRE_BOOK else net_payable

Every screen that shows a price goes through ``compute_quote`` so the
arithmetic can't drift between them.  Only ``pre_book_amount`` is
rounded, to whole rupees.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict

from coliving.exceptions import ColivingError, ColivingErrorCodes

ALLOWED_DURATIONS: tuple[int, ...] = (3, 6, 12)
DEPOSIT_MONTHS = 2
PRE_BOOK_RATE = Decimal("0.10")

_DURATION_RE = re.compile(r"(\d+)")


class BookingMode(str, Enum):
    """How much is paid up front. Values match the backend's action strings."""

    FULL_BOOK = "Book"
    PRE_BOOK = "PreBook"


class BookingQuote(BaseModel):
    """Derived price breakdown. Never persisted."""

    model_config = ConfigDict(frozen=True)

    monthly_rent: Decimal
    duration_months: int
    mode: BookingMode
    security_deposit: Decimal
    net_payable: Decimal
    pre_book_amount: int
    amount_due_now: Decimal

    @property
    def rent_total(self) -> Decimal:
        return self.monthly_rent * self.duration_months

    @property
    def amount_label(self) -> str:
        if self.mode is BookingMode.PRE_BOOK:
            return "Pre-Book @ 10% (Taxes Included)"
        return "Total Payable Now (Full Amount)"

    @property
    def action_label(self) -> str:
        if self.mode is BookingMode.PRE_BOOK:
            return "Proceed To Pre-book"
        return "Proceed To Book & Pay"

    def breakdown(self) -> list[tuple[str, Decimal]]:
        """Rows for the payable-amount summary, top to bottom."""
        rows: list[tuple[str, Decimal]] = [
            (f"Rent ({_fmt(self.monthly_rent)} x {self.duration_months} months)", self.rent_total),
            (f"Security Deposit ({DEPOSIT_MONTHS} months rent)", self.security_deposit),
        ]
        if self.mode is BookingMode.PRE_BOOK:
            rows.append(("Total Booking Value (Including Taxes)", self.net_payable))
            rows.append(("Pre-Book @ 10% (Amount Payable Now)", Decimal(self.pre_book_amount)))
        else:
            rows.append(("Net Payable (Total Booking Value)", self.net_payable))
        return rows


def _fmt(amount: Decimal) -> str:
    return f"{amount.normalize():f}" if amount == amount.to_integral() else f"{amount:.2f}"


def _to_decimal(value: int | float | Decimal | str) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("monthly_rent must be a number")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ColivingError(
                code=ColivingErrorCodes.VALIDATION_ERROR,
                message=f"monthly_rent must be finite, got {value!r}",
            )
        # str() keeps 1999.9 as 1999.9 instead of its binary expansion
        return Decimal(str(value))
    return Decimal(value)


def round_half_up(value: Decimal) -> int:
    """Round to the nearest whole unit, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_quote(
    monthly_rent: int | float | Decimal | str,
    duration_months: int,
    mode: BookingMode | str,
) -> BookingQuote:
    """Compute the price breakdown for one booking.

    ``monthly_rent`` must be finite and positive; anything else raises
    ColivingError(VALIDATION_ERROR).  ``duration_months`` is *not* checked
    against ALLOWED_DURATIONS here: callers validate the choice first
    (see :func:`validate_duration`).
    """
    rent = _to_decimal(monthly_rent)
    if not rent.is_finite() or rent <= 0:
        raise ColivingError(
            code=ColivingErrorCodes.VALIDATION_ERROR,
            message=f"monthly_rent must be a positive amount, got {monthly_rent!r}",
        )
    mode = BookingMode(mode)

    security_deposit = rent * DEPOSIT_MONTHS
    net_payable = rent * duration_months + security_deposit
    pre_book_amount = round_half_up(net_payable * PRE_BOOK_RATE)
    amount_due_now = (
        Decimal(pre_book_amount) if mode is BookingMode.PRE_BOOK else net_payable
    )

    return BookingQuote(
        monthly_rent=rent,
        duration_months=duration_months,
        mode=mode,
        security_deposit=security_deposit,
        net_payable=net_payable,
        pre_book_amount=pre_book_amount,
        amount_due_now=amount_due_now,
    )


def validate_duration(months: int) -> int:
    """Reject stay lengths the backend doesn't offer."""
    if months not in ALLOWED_DURATIONS:
        raise ColivingError(
            code=ColivingErrorCodes.VALIDATION_ERROR,
            message=f"Duration must be one of {ALLOWED_DURATIONS} months, got {months}",
        )
    return months


def parse_duration(label: str) -> int:
    """Turn a picker label such as ``"6 Months"`` into a validated month count."""
    match = _DURATION_RE.search(label or "")
    if not match:
        raise ColivingError(
            code=ColivingErrorCodes.VALIDATION_ERROR,
            message=f"Cannot read a duration from {label!r}",
        )
    return validate_duration(int(match.group(1)))
