import asyncio
import json
import unittest
from types import SimpleNamespace

from travel_agent_loop.providers.openai_provider import (
    OpenAIProvider,
    _parse_arguments,
    _STOP_REASON_MAP,
    _to_openai_messages,
    _to_openai_tools,
)

from tests.fakes import FakeTool


class ToOpenAIMessagesTests(unittest.TestCase):
    def test_system_prompt_becomes_system_message(self) -> None:
        result = _to_openai_messages("You are a travel assistant.", [])
        self.assertEqual([{"role": "system", "content": "You are a travel assistant."}], result)

    def test_user_string_content(self) -> None:
        result = _to_openai_messages("", [{"role": "user", "content": "hello"}])
        self.assertEqual([{"role": "user", "content": "hello"}], result)

    def test_assistant_tool_use_blocks(self) -> None:
        result = _to_openai_messages("", [
            {
                "role": "assistant",
                "content": [
                    {"type": "text", "text": "Searching flights."},
                    {
                        "type": "tool_use",
                        "id": "call_abc",
                        "name": "search_flights",
                        "input": {"origin": "IST"},
                    },
                ],
            }
        ])
        self.assertEqual(1, len(result))
        msg = result[0]
        self.assertEqual("Searching flights.", msg["content"])
        tc = msg["tool_calls"][0]
        self.assertEqual("call_abc", tc["id"])
        self.assertEqual("search_flights", tc["function"]["name"])
        self.assertEqual(json.dumps({"origin": "IST"}), tc["function"]["arguments"])

    def test_tool_results_become_tool_messages(self) -> None:
        result = _to_openai_messages("", [
            {
                "role": "user",
                "content": [
                    {"type": "tool_result", "tool_use_id": "call_1", "content": '{"data": []}'},
                    {"type": "tool_result", "tool_use_id": "call_2", "content": '{"error": "down"}', "is_error": True},
                ],
            }
        ])
        self.assertEqual(["tool", "tool"], [m["role"] for m in result])
        self.assertEqual("call_2", result[1]["tool_call_id"])
        self.assertEqual('{"error": "down"}', result[1]["content"])


class ToOpenAIToolsTests(unittest.TestCase):
    def test_converts_internal_tools_to_openai_format(self) -> None:
        provider = OpenAIProvider.__new__(OpenAIProvider)
        internal = provider.convert_tools([FakeTool("search_hotels_by_city")])
        result = _to_openai_tools(internal)
        self.assertEqual("function", result[0]["type"])
        self.assertEqual("search_hotels_by_city", result[0]["function"]["name"])
        self.assertIn("properties", result[0]["function"]["parameters"])


class ParseArgumentsTests(unittest.TestCase):
    def test_invalid_json_becomes_empty_input(self) -> None:
        self.assertEqual({}, _parse_arguments('{"origin": '))
        self.assertEqual({}, _parse_arguments(None))
        self.assertEqual({}, _parse_arguments("[1, 2]"))
        self.assertEqual({"origin": "IST"}, _parse_arguments('{"origin": "IST"}'))


class StopReasonMapTests(unittest.TestCase):
    def test_finish_reasons(self) -> None:
        self.assertEqual("end_turn", _STOP_REASON_MAP["stop"])
        self.assertEqual("tool_use", _STOP_REASON_MAP["tool_calls"])
        self.assertEqual("max_tokens", _STOP_REASON_MAP["length"])


class OpenAIProviderChatTests(unittest.TestCase):
    def _make_provider(self, response) -> OpenAIProvider:
        provider = OpenAIProvider.__new__(OpenAIProvider)
        calls: list[dict] = []

        async def create(**kwargs):
            calls.append(kwargs)
            return response

        provider._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        self.calls = calls
        return provider

    def _response(self, *, content=None, tool_calls=None, finish_reason="stop"):
        message = SimpleNamespace(content=content, tool_calls=tool_calls)
        return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason=finish_reason)])

    def test_chat_text_response(self) -> None:
        provider = self._make_provider(self._response(content="Hello world"))

        message, tool_use_blocks, stop_reason = asyncio.run(
            provider.chat("gpt-4o", 100, 0.5, "sys", [{"role": "user", "content": "hi"}], [])
        )

        self.assertEqual("end_turn", stop_reason)
        self.assertEqual([], tool_use_blocks)
        self.assertEqual("Hello world", message["content"][0]["text"])
        self.assertNotIn("tools", self.calls[0])

    def test_chat_tool_calls(self) -> None:
        tool_calls = [
            SimpleNamespace(id="call_a", function=SimpleNamespace(name="search_flights", arguments='{"origin": "IST"}')),
            SimpleNamespace(id="call_b", function=SimpleNamespace(name="search_hotels_by_city", arguments='{"city_code": "NYC"}')),
        ]
        provider = self._make_provider(
            self._response(content="Checking.", tool_calls=tool_calls, finish_reason="tool_calls")
        )
        tools = [{"name": "search_flights", "description": "d", "input_schema": {"type": "object"}}]

        message, tool_use_blocks, stop_reason = asyncio.run(
            provider.chat("gpt-4o", 100, 0.5, "sys", [{"role": "user", "content": "hi"}], tools)
        )

        self.assertEqual("tool_use", stop_reason)
        self.assertEqual(["search_flights", "search_hotels_by_city"], [b["name"] for b in tool_use_blocks])
        self.assertEqual({"city_code": "NYC"}, tool_use_blocks[1]["input"])
        self.assertEqual(3, len(message["content"]))
        self.assertEqual("function", self.calls[0]["tools"][0]["type"])

    def test_create_message(self) -> None:
        provider = self._make_provider(self._response(content="Weekend in Rome"))
        result = asyncio.run(provider.create_message("gpt-4o", 32, 0.3, [{"role": "user", "content": "title"}]))
        self.assertEqual("Weekend in Rome", result)


if __name__ == "__main__":
    unittest.main()
