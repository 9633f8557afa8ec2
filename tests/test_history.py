import unittest
from datetime import date

from travel_agent_loop.history import annotate_utterance, to_model_messages, with_context_digest
from travel_agent_loop.memory import DataType, Message, Role


class HistoryTests(unittest.TestCase):
    def test_plain_messages_map_roles(self) -> None:
        history = [Message(role=Role.USER, content="hi"), Message(role=Role.MODEL, content="hello")]
        self.assertEqual(
            [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}],
            to_model_messages(history),
        )

    def test_data_turn_carries_digest_not_payload(self) -> None:
        hotels = [{"name": "Pera Palace", "hotelId": "HPERA", "address": {"lines": ["very long"]}}]
        message = Message(role=Role.MODEL, content="Found hotels.", data=hotels, data_type=DataType.HOTELS)

        text = with_context_digest(message)

        self.assertTrue(text.startswith("Found hotels.\n\n[System Context: User saw these hotels results:\n"))
        self.assertIn("Pera Palace (ID: HPERA)", text)
        self.assertNotIn("very long", text)
        self.assertTrue(text.endswith("]"))

    def test_consecutive_user_turns_are_merged(self) -> None:
        history = [
            Message(role=Role.USER, content="first"),
            Message(role=Role.USER, content="second"),
            Message(role=Role.MODEL, content="answer"),
        ]
        projected = to_model_messages(history)
        self.assertEqual(2, len(projected))
        self.assertEqual("first\n\nsecond", projected[0]["content"])

    def test_blank_model_turn_is_dropped(self) -> None:
        history = [
            Message(role=Role.USER, content="hello"),
            Message(role=Role.MODEL, content=""),
            Message(role=Role.USER, content="anyone there?"),
        ]
        self.assertEqual(
            [{"role": "user", "content": "hello\n\nanyone there?"}],
            to_model_messages(history),
        )

    def test_annotate_utterance_prefixes_date(self) -> None:
        self.assertEqual(
            "[System: Current Date is 2025-02-14] flights tomorrow",
            annotate_utterance("flights tomorrow", date(2025, 2, 14)),
        )
