from typing import Any

import httpx
from loguru import logger

from travel_agent_loop.errors import AmadeusApiError
from travel_agent_loop.tools.amadeus.amadeus_client import AmadeusClient

UNAVAILABLE_MESSAGE = "Sentiments not available for this hotel in test environment."


class GetHotelSentimentsTool:
    def __init__(self, client: AmadeusClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "get_hotel_sentiments"

    @property
    def description(self) -> str:
        return "Get sentiment analysis/ratings for a hotel."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "hotel_ids": {
                    "type": "string",
                    "description": "Comma-separated list of Amadeus hotel IDs.",
                },
            },
            "required": ["hotel_ids"],
        }

    @property
    def ui_data_type(self) -> None:
        return None

    async def execute(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        hotel_ids = str(tool_input.get("hotel_ids", "")).replace(" ", "")
        if not hotel_ids:
            raise ValueError("hotel_ids is required")

        logger.info(f"Fetching hotel sentiments for {hotel_ids}")
        try:
            return await self._client.get("/v2/e-reputation/hotel-sentiments", params={"hotelIds": hotel_ids})
        except (AmadeusApiError, httpx.HTTPError) as ex:
            # Sandbox coverage for sentiments is sparse; let the model say so.
            logger.warning(f"Hotel sentiments unavailable for {hotel_ids}: {ex}")
            return {"message": UNAVAILABLE_MESSAGE}
