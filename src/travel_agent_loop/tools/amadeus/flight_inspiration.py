from __future__ import annotations

from travel_agent_loop.tools.amadeus.amadeus_client import AmadeusClient


async def search_flight_destinations(
    client: AmadeusClient,
    origin: str,
    max_price: int | None = None,
) -> dict:
    """Cheapest destinations reachable from ``origin`` (Amadeus inspiration search)."""
    return await client.get(
        "/v1/shopping/flight-destinations",
        params={"origin": origin.strip().upper(), "maxPrice": max_price},
    )
