"""Community events and the weekly food menu."""

from __future__ import annotations

from datetime import date

from coliving.models.community import Event, EventPage, FoodMenuList

from .client import ApiClient

EVENTS = "/api/events/allevents"
FOOD_MENUS = "/api/food-menu/user-menus"

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class CommunityApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_events(self, page: int = 1, limit: int = 2) -> list[Event]:
        result = await self._client.request(
            "GET", EVENTS, EventPage, params={"page": page, "limit": limit},
        )
        return result.events

    async def todays_menu(self, today: date | None = None) -> dict[str, str] | None:
        """Meals for today from the first menu, or None when there is none."""
        result = await self._client.request("GET", FOOD_MENUS, FoodMenuList)
        if not result.menus:
            return None
        day_name = _WEEKDAYS[(today or date.today()).weekday()]
        return result.menus[0].for_day(day_name)
