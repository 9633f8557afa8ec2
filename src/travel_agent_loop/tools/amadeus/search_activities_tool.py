from typing import Any

from loguru import logger

from travel_agent_loop.memory.models import DataType
from travel_agent_loop.tools.amadeus.amadeus_client import AmadeusClient

_MAX_RESULTS = 15
_RADIUS_KM = 1


class SearchActivitiesTool:
    def __init__(self, client: AmadeusClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "search_activities"

    @property
    def description(self) -> str:
        return "Search for tours and activities in a location."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "latitude": {"type": "number", "description": "Latitude of the location."},
                "longitude": {"type": "number", "description": "Longitude of the location."},
            },
            "required": ["latitude", "longitude"],
        }

    @property
    def ui_data_type(self) -> DataType:
        return DataType.ACTIVITIES

    async def execute(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        try:
            latitude = float(tool_input["latitude"])
            longitude = float(tool_input["longitude"])
        except (KeyError, TypeError, ValueError) as ex:
            raise ValueError("latitude and longitude must be numbers") from ex

        logger.info(f"Searching activities at {latitude}, {longitude}")
        result = await self._client.get(
            "/v1/shopping/activities",
            params={"latitude": latitude, "longitude": longitude, "radius": _RADIUS_KM},
        )
        activities = result.get("data") or []
        return {"data": activities[:_MAX_RESULTS]}
