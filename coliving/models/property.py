"""Pydantic models for properties, rate cards and rooms."""

from typing import Optional

from pydantic import Field, field_validator

from ._base import ApiModel


def _split_csv(value: object) -> object:
    """The backend sometimes sends amenity lists as one comma string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [a.strip() for a in value.split(",") if a.strip()]
    return value


class RateCard(ApiModel):
    """A room type and its monthly rent at one property."""

    id: int
    room_type: str
    rent: float  # monthly rent, whole rupees
    room_images: list[str] = []
    room_amenities: list[str] = []
    property_id: Optional[int] = None

    @field_validator("room_amenities", mode="before")
    @classmethod
    def split_amenities(cls, value: object) -> object:
        return _split_csv(value)

    @field_validator("room_images", mode="before")
    @classmethod
    def _images(cls, value: object) -> object:
        return [] if value is None else value


class Property(ApiModel):
    id: int
    name: str
    address: str = ""
    description: str = ""
    amenities: list[str] = []
    rate_card: list[RateCard] = []

    @field_validator("amenities", mode="before")
    @classmethod
    def split_amenities(cls, value: object) -> object:
        return _split_csv(value)

    @field_validator("rate_card", mode="before")
    @classmethod
    def _rate_card(cls, value: object) -> object:
        return [] if value is None else value

    def model_post_init(self, __context: object) -> None:
        # Rate cards arrive without their owning property id
        for rc in self.rate_card:
            if rc.property_id is None:
                rc.property_id = self.id

    def cheapest_rent(self) -> Optional[float]:
        if not self.rate_card:
            return None
        return min(rc.rent for rc in self.rate_card)


class RoomProperty(ApiModel):
    id: Optional[int] = None
    name: str = ""
    address: str = ""


class Room(ApiModel):
    """A physical room with live occupancy."""

    id: int
    room_number: str = ""
    room_type: str = ""
    monthly_rent: float = 0
    deposit_amount: float = 0
    capacity: int = 0
    occupancy: int = 0
    floor_number: Optional[int] = None
    status: str = ""
    description: str = ""
    preferred_user_type: Optional[str] = None
    images: list[str] = []
    amenities: list[str] = []
    property_info: Optional[RoomProperty] = Field(default=None, alias="property")

    @field_validator("amenities", mode="before")
    @classmethod
    def split_amenities(cls, value: object) -> object:
        return _split_csv(value)

    @field_validator("room_number", mode="before")
    @classmethod
    def _room_number(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return "" if value is None else value

    @property
    def is_available(self) -> bool:
        return self.status == "available" and self.occupancy < self.capacity


class PropertyList(ApiModel):
    properties: list[Property] = []


class RoomList(ApiModel):
    rooms: list[Room] = []


def filter_properties(
    properties: list[Property],
    location: str = "",
    room_type: str = "",
    max_rent: Optional[float] = None,
) -> list[Property]:
    """Narrow properties to rate cards matching the filters.

    Properties left with no matching rate card are dropped.
    """
    out: list[Property] = []
    for p in properties:
        if location and location.lower() not in p.address.lower():
            continue
        cards = [
            rc for rc in p.rate_card
            if (not room_type or rc.room_type.strip().lower() == room_type.strip().lower())
            and (max_rent is None or rc.rent <= max_rent)
        ]
        if cards:
            out.append(p.model_copy(update={"rate_card": cards}))
    return out
