"""Hosted payment redirect handling and payment status checks.

The payment page runs in an embedded browser.  Once it navigates back to
the configured redirect base, the client asks the backend for the order's
status and routes to success (``SUCCESS``) or failure (anything else).
"""

from __future__ import annotations

import logging

from coliving.exceptions import ColivingError, ColivingErrorCodes
from coliving.models.payment import SUCCESS_STATUS, PaymentOutcome, PaymentStatus

from .client import ApiClient

log = logging.getLogger("coliving.api.payments")

PAYMENT_STATUS = "/api/payments/status/{order_id}"


def _clean(url: str) -> str:
    return url.split("#", 1)[0].split("?", 1)[0].rstrip("/")


def is_payment_return(url: str, redirect_base: str) -> bool:
    """True when the web view has landed back on our redirect page."""
    return _clean(url).startswith(_clean(redirect_base))


class PaymentsApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def is_return_url(self, url: str) -> bool:
        return is_payment_return(url, self._client.config.payment_redirect_base)

    async def get_status(self, order_id: str) -> PaymentStatus:
        path = PAYMENT_STATUS.format(order_id=order_id)
        return await self._client.request("GET", path, PaymentStatus)

    async def resolve(self, order_id: str) -> PaymentOutcome:
        """Poll the status once and decide the outcome. Never raises ColivingError."""
        try:
            status = await self.get_status(order_id)
        except ColivingError as e:
            log.warning("Payment status check for %s failed: %s", order_id, e)
            detail = (
                "Session expired."
                if e.code == ColivingErrorCodes.UNAUTHORIZED
                else "Network error."
            )
            return PaymentOutcome(
                order_id=order_id,
                succeeded=False,
                reason="Failed to verify payment status.",
                detail=detail,
            )

        value = status.payment_status or ""
        if value == SUCCESS_STATUS:
            log.info("Payment %s succeeded", order_id)
            return PaymentOutcome(order_id=order_id, succeeded=True, status=value)

        log.info("Payment %s not successful: %s", order_id, value or "no status")
        return PaymentOutcome(
            order_id=order_id,
            succeeded=False,
            status=value,
            reason=value or "Payment failed.",
        )
