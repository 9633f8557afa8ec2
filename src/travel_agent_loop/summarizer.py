"""Bounded text digests of result payloads.

A digest replaces the full payload when an earlier turn's results are fed
back to the model, so the model keeps track of what the user saw without the
payload re-entering context. Item budgets per type:

=========== ===== ========================================
type        items fields
=========== ===== ========================================
flights     5     route, total price + currency, carrier
hotels      10    name, hotel id
activities  5     name, price + currency or ``N/A``
offers      5     hotel name, first offer price + currency
=========== ===== ========================================

All but offers append ``...and N more`` when items were left out.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from travel_agent_loop.memory.models import DataType

FLIGHTS_LIMIT = 5
HOTELS_LIMIT = 10
ACTIVITIES_LIMIT = 5
OFFERS_LIMIT = 5

FALLBACK_DIGEST = "Data available but summarization failed."
GENERIC_DIGEST = "Data results available."


def _with_overflow(lines: list[str], total: int, limit: int) -> str:
    text = "\n".join(lines)
    if total > limit:
        text += f"\n...and {total - limit} more"
    return text


def _summarize_flights(flights: list[dict]) -> str:
    lines = []
    for offer in flights[:FLIGHTS_LIMIT]:
        itinerary = offer["itineraries"][0]
        first = itinerary["segments"][0]
        last = itinerary["segments"][-1]
        price = offer["price"]
        lines.append(
            f"{first['departure']['iataCode']}->{last['arrival']['iataCode']} | "
            f"{price['total']} {price['currency']} | {first['carrierCode']}"
        )
    return _with_overflow(lines, len(flights), FLIGHTS_LIMIT)


def _summarize_hotels(hotels: list[dict]) -> str:
    lines = [f"{h['name']} (ID: {h['hotelId']})" for h in hotels[:HOTELS_LIMIT]]
    return _with_overflow(lines, len(hotels), HOTELS_LIMIT)


def _summarize_activities(activities: list[dict]) -> str:
    lines = []
    for activity in activities[:ACTIVITIES_LIMIT]:
        price = activity.get("price")
        if price and price.get("amount") is not None:
            label = f"{price['amount']} {price.get('currencyCode', '')}".rstrip()
        else:
            label = "N/A"
        lines.append(f"{activity['name']} - {label}")
    return _with_overflow(lines, len(activities), ACTIVITIES_LIMIT)


def _summarize_offers(offers: list[dict] | dict) -> str:
    if isinstance(offers, dict):
        offers = offers["data"]
    lines = []
    for entry in offers[:OFFERS_LIMIT]:
        price = entry["offers"][0]["price"]
        lines.append(f"Hotel {entry['hotel']['name']}: {price['total']} {price['currency']}")
    return "\n".join(lines)


_SUMMARIZERS = {
    DataType.FLIGHTS: _summarize_flights,
    DataType.HOTELS: _summarize_hotels,
    DataType.ACTIVITIES: _summarize_activities,
    DataType.OFFERS: _summarize_offers,
}


def summarize_for_context(data_type: str | None, payload: Any) -> str:
    """Return a deterministic digest of ``payload``. Never raises."""
    if not payload:
        return ""
    try:
        summarizer = _SUMMARIZERS.get(DataType(data_type))
    except ValueError:
        summarizer = None
    if summarizer is None:
        return GENERIC_DIGEST
    try:
        return summarizer(payload)
    except Exception as ex:
        logger.warning(f"Summarizing {data_type} payload failed: {ex!r}")
        return FALLBACK_DIGEST
