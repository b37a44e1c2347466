"""Pydantic models for community events and the food menu."""

from typing import Optional

from ._base import ApiModel


class Event(ApiModel):
    id: int
    title: str = ""
    description: str = ""
    location: str = ""
    event_date: Optional[str] = None
    event_time: Optional[str] = None


class EventPage(ApiModel):
    events: list[Event] = []
    total_pages: int = 1


class FoodMenu(ApiModel):
    # weekday name -> meal name -> dish description
    week_menu: dict[str, dict[str, str]] = {}

    def for_day(self, day_name: str) -> Optional[dict[str, str]]:
        return self.week_menu.get(day_name)


class FoodMenuList(ApiModel):
    menus: list[FoodMenu] = []
