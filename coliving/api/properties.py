"""Property and room listings."""

from __future__ import annotations

import logging
from typing import Any

from coliving.models.property import Property, PropertyList, Room, RoomList

from .client import ApiClient, decode

log = logging.getLogger("coliving.api.properties")

PROPERTIES = "/api/property/getAll"
ROOMS = "/api/rooms/getall"


class PropertiesApi:
    """Browse properties (with nested rate cards) and physical rooms."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_properties(self) -> list[Property]:
        """All properties. Sends the bearer token when logged in."""
        data: Any = await self._client.request_json("GET", PROPERTIES, auth="optional")
        # Older deployments return a bare array
        if isinstance(data, list):
            data = {"properties": data}
        result = decode(PropertyList, data or {}, f"GET {PROPERTIES}")
        log.info("Loaded %d properties", len(result.properties))
        return result.properties

    async def list_rooms(self) -> list[Room]:
        result = await self._client.request("GET", ROOMS, RoomList, auth="none")
        log.info("Loaded %d rooms", len(result.rooms))
        return result.rooms

    def image_urls(self, paths: list[str]) -> list[str]:
        """Absolute URLs for backend-relative room image paths."""
        return [url for url in (self._client.absolute_url(p) for p in paths) if url]
