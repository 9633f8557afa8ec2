from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from travel_agent_loop.errors import ConfigurationError, UnknownToolError
from travel_agent_loop.tool import Tool
from travel_agent_loop.tools.amadeus.amadeus_client import AmadeusClient
from travel_agent_loop.tools.amadeus.book_hotel_tool import BookHotelTool
from travel_agent_loop.tools.amadeus.hotel_offers_tool import GetHotelOffersTool
from travel_agent_loop.tools.amadeus.hotel_sentiments_tool import GetHotelSentimentsTool
from travel_agent_loop.tools.amadeus.search_activities_tool import SearchActivitiesTool
from travel_agent_loop.tools.amadeus.search_flights_tool import SearchFlightsTool
from travel_agent_loop.tools.amadeus.search_hotels_tool import SearchHotelsByCityTool


class ToolName(StrEnum):
    SEARCH_FLIGHTS = "search_flights"
    SEARCH_HOTELS_BY_CITY = "search_hotels_by_city"
    GET_HOTEL_OFFERS = "get_hotel_offers"
    BOOK_HOTEL = "book_hotel"
    GET_HOTEL_SENTIMENTS = "get_hotel_sentiments"
    SEARCH_ACTIVITIES = "search_activities"


class ToolRegistry:
    """Read-only mapping from the closed set of ``ToolName`` values to tools.

    Construction fails if a tool is missing, duplicated, or not a member of
    ``ToolName``; lookups of names the model invents raise ``UnknownToolError``.
    """

    def __init__(self, tools: Iterable[Tool], *, require_all: bool = True):
        by_name: dict[ToolName, Tool] = {}
        for tool in tools:
            try:
                key = ToolName(tool.name)
            except ValueError as ex:
                raise ConfigurationError(f"Tool {tool.name!r} is not a declared tool name") from ex
            if key in by_name:
                raise ConfigurationError(f"Tool {tool.name!r} is registered twice")
            by_name[key] = tool

        if require_all:
            missing = [n.value for n in ToolName if n not in by_name]
            if missing:
                raise ConfigurationError(f"No handler registered for: {', '.join(missing)}")

        self._tools = by_name

    def get(self, name: str) -> Tool:
        try:
            return self._tools[ToolName(name)]
        except (ValueError, KeyError) as ex:
            raise UnknownToolError(name) from ex

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def tools(self) -> list[Tool]:
        return list(self._tools.values())

    @property
    def names(self) -> list[str]:
        return [n.value for n in self._tools]


def get_all(client: AmadeusClient) -> list[Tool]:
    return [
        SearchFlightsTool(client),
        SearchHotelsByCityTool(client),
        GetHotelOffersTool(client),
        BookHotelTool(client),
        GetHotelSentimentsTool(client),
        SearchActivitiesTool(client),
    ]


def build_registry(client: AmadeusClient) -> ToolRegistry:
    return ToolRegistry(get_all(client))
