"""Data models for the co-living client."""

from .booking import Booking, BookingPage, BookingRequest, BookingResult
from .community import Event, EventPage, FoodMenu, FoodMenuList
from .payment import PaymentOutcome, PaymentStatus
from .property import Property, PropertyList, RateCard, Room, RoomList
from .session import Session
from .ticket import Ticket, TicketCreated, TicketList
from .user import Account, LoginResult, MessageResponse, UserProfile

__all__ = [
    "Account",
    "Booking",
    "BookingPage",
    "BookingRequest",
    "BookingResult",
    "Event",
    "EventPage",
    "FoodMenu",
    "FoodMenuList",
    "LoginResult",
    "MessageResponse",
    "PaymentOutcome",
    "PaymentStatus",
    "Property",
    "PropertyList",
    "RateCard",
    "Room",
    "RoomList",
    "Session",
    "Ticket",
    "TicketCreated",
    "TicketList",
    "UserProfile",
]
