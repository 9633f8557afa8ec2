import unittest

from travel_agent_loop.summarizer import FALLBACK_DIGEST, GENERIC_DIGEST, summarize_for_context


def _flight(dep: str, arr: str, total: str, carrier: str = "TK") -> dict:
    return {
        "itineraries": [
            {
                "segments": [
                    {"departure": {"iataCode": dep}, "arrival": {"iataCode": "XXX"}, "carrierCode": carrier},
                    {"departure": {"iataCode": "XXX"}, "arrival": {"iataCode": arr}, "carrierCode": "ZZ"},
                ]
            }
        ],
        "price": {"total": total, "currency": "EUR"},
    }


class SummarizerTests(unittest.TestCase):
    def test_flights_use_first_departure_and_last_arrival(self) -> None:
        digest = summarize_for_context("flights", [_flight("IST", "JFK", "512.30")])
        self.assertEqual("IST->JFK | 512.30 EUR | TK", digest)

    def test_flights_overflow_notice(self) -> None:
        flights = [_flight("IST", "JFK", str(100 + i)) for i in range(12)]
        lines = summarize_for_context("flights", flights).splitlines()
        self.assertEqual(6, len(lines))
        self.assertEqual("...and 7 more", lines[-1])

    def test_hotels_budget_is_ten(self) -> None:
        hotels = [{"name": f"Hotel {i}", "hotelId": f"H{i}"} for i in range(15)]
        lines = summarize_for_context("hotels", hotels).splitlines()
        self.assertEqual("Hotel 0 (ID: H0)", lines[0])
        self.assertEqual(11, len(lines))
        self.assertEqual("...and 5 more", lines[-1])

    def test_hotels_without_overflow(self) -> None:
        hotels = [{"name": "A", "hotelId": "1"}, {"name": "B", "hotelId": "2"}]
        self.assertEqual("A (ID: 1)\nB (ID: 2)", summarize_for_context("hotels", hotels))

    def test_activities_price_or_na(self) -> None:
        activities = [
            {"name": "Bosphorus Cruise", "price": {"amount": "25.00", "currencyCode": "EUR"}},
            {"name": "Walking Tour"},
        ]
        self.assertEqual(
            "Bosphorus Cruise - 25.00 EUR\nWalking Tour - N/A",
            summarize_for_context("activities", activities),
        )

    def test_offers_accept_wrapped_payload_without_overflow(self) -> None:
        entry = {"hotel": {"name": "Pera Palace"}, "offers": [{"price": {"total": "300", "currency": "USD"}}]}
        digest = summarize_for_context("offers", {"data": [entry] * 7})
        lines = digest.splitlines()
        self.assertEqual(5, len(lines))
        self.assertEqual("Hotel Pera Palace: 300 USD", lines[0])

    def test_malformed_payload_falls_back(self) -> None:
        self.assertEqual(FALLBACK_DIGEST, summarize_for_context("flights", [{"unexpected": True}]))

    def test_unknown_type_is_generic(self) -> None:
        self.assertEqual(GENERIC_DIGEST, summarize_for_context("cars", [{"id": 1}]))

    def test_empty_payload_is_empty_digest(self) -> None:
        self.assertEqual("", summarize_for_context("hotels", []))

    def test_digest_is_deterministic(self) -> None:
        hotels = [{"name": f"Hotel {i}", "hotelId": f"H{i}"} for i in range(30)]
        self.assertEqual(summarize_for_context("hotels", hotels), summarize_for_context("hotels", hotels))
