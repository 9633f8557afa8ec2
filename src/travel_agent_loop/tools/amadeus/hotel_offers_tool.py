from typing import Any

from loguru import logger

from travel_agent_loop.memory.models import DataType
from travel_agent_loop.tools.amadeus.amadeus_client import AmadeusClient


class GetHotelOffersTool:
    def __init__(self, client: AmadeusClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "get_hotel_offers"

    @property
    def description(self) -> str:
        return "Get offers for specific hotels. Use this after finding hotel IDs."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "hotel_ids": {
                    "type": "string",
                    "description": "Comma-separated list of Amadeus hotel IDs (e.g., RTPAR001).",
                },
                "adults": {
                    "type": "string",
                    "description": "Number of adult guests (default 1).",
                },
                "check_in_date": {
                    "type": "string",
                    "description": "Check-in date in YYYY-MM-DD format.",
                },
                "check_out_date": {
                    "type": "string",
                    "description": "Check-out date in YYYY-MM-DD format.",
                },
            },
            "required": ["hotel_ids", "check_in_date", "check_out_date"],
        }

    @property
    def ui_data_type(self) -> DataType:
        return DataType.OFFERS

    async def execute(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        hotel_ids = str(tool_input.get("hotel_ids", "")).replace(" ", "")
        check_in = str(tool_input.get("check_in_date", "")).strip()
        check_out = str(tool_input.get("check_out_date", "")).strip()
        if not hotel_ids or not check_in or not check_out:
            raise ValueError("hotel_ids, check_in_date and check_out_date are required")
        adults = int(tool_input.get("adults") or 1)

        logger.info(f"Fetching hotel offers for {hotel_ids} from {check_in} to {check_out}")
        return await self._client.get(
            "/v3/shopping/hotel-offers",
            params={
                "hotelIds": hotel_ids,
                "adults": adults,
                "checkInDate": check_in,
                "checkOutDate": check_out,
            },
        )
