"""Pydantic models for booking requests, results and history."""

from datetime import date
from typing import Optional

from pydantic import Field

from ._base import ApiModel
from .property import RoomProperty


class BookingRequest(ApiModel):
    """Body of ``POST /api/book-room/add``."""

    user_id: int
    rate_card_id: int
    property_id: int
    check_in_date: date
    monthly_rent: float
    duration: int  # months
    status: str = "pending"
    room_type: str

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class BookingResult(ApiModel):
    """Backend answer to a booking submission."""

    success: bool = True
    message: str = ""
    booking_id: Optional[int] = None
    order_id: Optional[str] = None
    redirect_url: Optional[str] = None


class BookedRoom(ApiModel):
    room_number: str = ""
    room_type: str = ""
    monthly_rent: float = 0
    property_info: Optional[RoomProperty] = Field(default=None, alias="property")


class Booking(ApiModel):
    """One entry of the user's booking history."""

    id: int
    check_in_date: Optional[str] = None
    check_out_date: Optional[str] = None
    display_status: str = ""
    status: str = ""
    duration: Optional[int] = None
    room: Optional[BookedRoom] = None

    @property
    def is_active(self) -> bool:
        return self.display_status.lower() in ("active", "approved")


class BookingPage(ApiModel):
    bookings: list[Booking] = []
    total_pages: int = 1
