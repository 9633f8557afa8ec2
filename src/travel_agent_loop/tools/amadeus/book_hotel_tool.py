from typing import Any

from loguru import logger

from travel_agent_loop.tools.amadeus.amadeus_client import AmadeusClient

# Amadeus sandbox test card; bookings against the test API are simulated.
_SANDBOX_CARD = {
    "vendorCode": "VI",
    "cardNumber": "4151289722471370",
    "expiryDate": "2026-12",
}
_DEFAULT_PHONE = "+33679278416"
_DEFAULT_EMAIL = "guest@example.com"


def build_booking_payload(offer_id: str, guest_name: str, guest_email: str, guest_phone: str) -> dict:
    first, _, last = guest_name.strip().partition(" ")
    return {
        "data": {
            "offerId": offer_id,
            "guests": [
                {
                    "name": {
                        "title": "MR",
                        "firstName": first.upper() if first else "GUEST",
                        "lastName": last.strip().upper() if last.strip() else "USER",
                    },
                    "contact": {
                        "phone": guest_phone or _DEFAULT_PHONE,
                        "email": guest_email or _DEFAULT_EMAIL,
                    },
                }
            ],
            "payments": [{"method": "creditCard", "card": dict(_SANDBOX_CARD)}],
        }
    }


class BookHotelTool:
    def __init__(self, client: AmadeusClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "book_hotel"

    @property
    def description(self) -> str:
        return "Book a hotel offer. This is a simulation."

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "offer_id": {"type": "string", "description": "The offer ID to book."},
                "guest_name": {"type": "string", "description": "Name of the guest."},
                "guest_email": {"type": "string", "description": "Email of the guest."},
                "guest_phone": {"type": "string", "description": "Phone number of the guest."},
            },
            "required": ["offer_id", "guest_name", "guest_email", "guest_phone"],
        }

    @property
    def ui_data_type(self) -> None:
        return None

    async def execute(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        offer_id = str(tool_input.get("offer_id", "")).strip()
        if not offer_id:
            raise ValueError("offer_id is required")

        payload = build_booking_payload(
            offer_id,
            str(tool_input.get("guest_name", "")),
            str(tool_input.get("guest_email", "")),
            str(tool_input.get("guest_phone", "")),
        )
        logger.info(f"Booking hotel offer {offer_id}")
        return await self._client.post("/v1/booking/hotel-bookings", payload)
