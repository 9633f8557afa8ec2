from typing import Any

from loguru import logger

from travel_agent_loop.memory.models import DataType
from travel_agent_loop.tools.amadeus.amadeus_client import AmadeusClient

_MAX_RESULTS = 15


class SearchFlightsTool:
    def __init__(self, client: AmadeusClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "search_flights"

    @property
    def description(self) -> str:
        return (
            "Search for flights given an origin, destination, and date. "
            "Codes must be IATA airport codes."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "origin": {
                    "type": "string",
                    "description": "The IATA code of the origin airport (e.g., IST, SFO, LHR).",
                },
                "destination": {
                    "type": "string",
                    "description": "The IATA code of the destination airport (e.g., JFK, CDG, DXB).",
                },
                "date": {
                    "type": "string",
                    "description": "The departure date in YYYY-MM-DD format.",
                },
            },
            "required": ["origin", "destination", "date"],
        }

    @property
    def ui_data_type(self) -> DataType:
        return DataType.FLIGHTS

    async def execute(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        origin = str(tool_input.get("origin", "")).strip().upper()
        destination = str(tool_input.get("destination", "")).strip().upper()
        date = str(tool_input.get("date", "")).strip()
        if not origin or not destination or not date:
            raise ValueError("origin, destination and date are required")

        logger.info(f"Searching flights: {origin} -> {destination} on {date}")
        result = await self._client.get(
            "/v2/shopping/flight-offers",
            params={
                "originLocationCode": origin,
                "destinationLocationCode": destination,
                "departureDate": date,
                "adults": 1,
                "max": _MAX_RESULTS,
            },
        )
        logger.debug(f"Flight search returned {len(result.get('data', []))} offer(s)")
        return result
