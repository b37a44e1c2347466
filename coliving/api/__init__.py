"""Backend API wrappers."""

from .auth import AuthApi
from .bookings import BookingsApi, build_booking_request
from .client import ApiClient, decode
from .community import CommunityApi
from .payments import PaymentsApi, is_payment_return
from .profile import ProfileApi
from .properties import PropertiesApi
from .tickets import TicketDraft, TicketsApi, split_by_status


class Backend:
    """All endpoint groups sharing one ApiClient."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client
        self.auth = AuthApi(client)
        self.properties = PropertiesApi(client)
        self.bookings = BookingsApi(client)
        self.tickets = TicketsApi(client)
        self.payments = PaymentsApi(client)
        self.profile = ProfileApi(client)
        self.community = CommunityApi(client)


__all__ = [
    "ApiClient",
    "AuthApi",
    "Backend",
    "BookingsApi",
    "CommunityApi",
    "PaymentsApi",
    "ProfileApi",
    "PropertiesApi",
    "TicketDraft",
    "TicketsApi",
    "build_booking_request",
    "decode",
    "is_payment_return",
    "split_by_status",
]
