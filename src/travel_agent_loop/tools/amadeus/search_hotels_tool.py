from typing import Any

from loguru import logger

from travel_agent_loop.memory.models import DataType
from travel_agent_loop.tools.amadeus.amadeus_client import AmadeusClient

_MAX_RESULTS = 15


class SearchHotelsByCityTool:
    def __init__(self, client: AmadeusClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "search_hotels_by_city"

    @property
    def description(self) -> str:
        return "Search for hotels in a specific city."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "city_code": {
                    "type": "string",
                    "description": "The IATA city code (e.g., PAR, LON, NYC).",
                },
            },
            "required": ["city_code"],
        }

    @property
    def ui_data_type(self) -> DataType:
        return DataType.HOTELS

    async def execute(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        city_code = str(tool_input.get("city_code", "")).strip().upper()
        if not city_code:
            raise ValueError("city_code is required")

        logger.info(f"Searching hotels in {city_code}")
        result = await self._client.get(
            "/v1/reference-data/locations/hotels/by-city",
            params={"cityCode": city_code},
        )
        hotels = result.get("data") or []
        logger.debug(f"Found {len(hotels)} hotel(s) in {city_code}")
        return {**result, "data": hotels[:_MAX_RESULTS]}
