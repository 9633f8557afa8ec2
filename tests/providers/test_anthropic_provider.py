import asyncio
import unittest
from types import SimpleNamespace

from travel_agent_loop.providers.anthropic_provider import AnthropicProvider

from tests.fakes import FakeTool


class _FakeMessages:
    def __init__(self, create_response=None):
        self._create_response = create_response
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return self._create_response


class _FakeClient:
    def __init__(self, create_response=None):
        self.messages = _FakeMessages(create_response)


class AnthropicProviderTests(unittest.TestCase):
    def _make_provider(self, create_response=None) -> AnthropicProvider:
        provider = AnthropicProvider.__new__(AnthropicProvider)
        provider._client = _FakeClient(create_response)
        return provider

    def test_convert_tools(self) -> None:
        provider = self._make_provider()
        result = provider.convert_tools([FakeTool("search_flights")])
        self.assertEqual(1, len(result))
        self.assertEqual("search_flights", result[0]["name"])
        self.assertEqual("fake search_flights", result[0]["description"])
        self.assertIn("properties", result[0]["input_schema"])

    def test_chat_text_and_tool_use(self) -> None:
        response = SimpleNamespace(
            stop_reason="tool_use",
            usage=SimpleNamespace(input_tokens=10, output_tokens=5),
            content=[
                SimpleNamespace(type="text", text="Let me look."),
                SimpleNamespace(type="tool_use", id="t1", name="search_flights", input={"origin": "IST"}),
            ],
        )
        provider = self._make_provider(response)
        tools = provider.convert_tools([FakeTool("search_flights")])

        message, tool_use_blocks, stop_reason = asyncio.run(
            provider.chat("m", 100, 0.5, "sys", [{"role": "user", "content": "hi"}], tools)
        )

        self.assertEqual("assistant", message["role"])
        self.assertEqual("tool_use", stop_reason)
        self.assertEqual(1, len(tool_use_blocks))
        self.assertEqual("search_flights", tool_use_blocks[0]["name"])
        self.assertEqual({"origin": "IST"}, tool_use_blocks[0]["input"])
        self.assertEqual(tools, provider._client.messages.calls[0]["tools"])
        self.assertEqual("sys", provider._client.messages.calls[0]["system"])

    def test_chat_text_only_omits_tools(self) -> None:
        response = SimpleNamespace(
            stop_reason="end_turn",
            usage=SimpleNamespace(input_tokens=3, output_tokens=2),
            content=[SimpleNamespace(type="text", text="Done")],
        )
        provider = self._make_provider(response)

        message, tool_use_blocks, stop_reason = asyncio.run(
            provider.chat("m", 100, 0.1, "sys", [{"role": "user", "content": "hi"}], [])
        )

        self.assertEqual("end_turn", stop_reason)
        self.assertEqual([], tool_use_blocks)
        self.assertEqual("Done", message["content"][0]["text"])
        self.assertNotIn("tools", provider._client.messages.calls[0])

    def test_create_message(self) -> None:
        response = SimpleNamespace(
            usage=SimpleNamespace(input_tokens=5, output_tokens=3),
            content=[SimpleNamespace(type="text", text="Paris Getaway")],
        )
        provider = self._make_provider(response)

        result = asyncio.run(provider.create_message("m", 32, 0.3, [{"role": "user", "content": "title"}]))
        self.assertEqual("Paris Getaway", result)


if __name__ == "__main__":
    unittest.main()
