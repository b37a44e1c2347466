"""Pydantic models for payment status checks."""

from typing import Optional

from pydantic import BaseModel

from ._base import ApiModel

SUCCESS_STATUS = "SUCCESS"


class PaymentStatus(ApiModel):
    """Body of ``GET /api/payments/status/{orderId}``."""

    payment_status: Optional[str] = None


class PaymentOutcome(BaseModel):
    """Where the payment flow ends up: success or failure screen."""

    order_id: str
    succeeded: bool
    status: str = ""
    reason: str = ""
    detail: str = ""
