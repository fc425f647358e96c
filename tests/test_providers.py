"""Unit tests for provider message/tool conversion and provider resolution."""
from __future__ import annotations

import json
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from src.agent_orchestrator import llm
from src.agent_orchestrator.errors import UpstreamError
from src.agent_orchestrator.models import Message
from src.agent_orchestrator.providers import (
    AnthropicProvider,
    LLMProvider,
    OllamaProvider,
    OpenAIProvider,
)
from src.agent_orchestrator.tools import TOOLS


class TestAnthropicConversion(unittest.TestCase):
    def test_system_is_lifted_and_tool_results_grouped(self) -> None:
        messages = [
            Message(role="system", content="be brief"),
            Message(role="user", content="hi"),
            Message(
                role="assistant",
                content="checking",
                tool_calls=[
                    {"id": "t1", "name": "get_stats", "params": {}},
                    {"id": "t2", "name": "retrieve_conversations", "params": {"limit": 2}},
                ],
            ),
            Message(role="tool", content='{"success": true}', tool_call_id="t1", name="get_stats"),
            Message(role="tool", content='{"success": false}', tool_call_id="t2", name="retrieve_conversations", is_error=True),
        ]
        out, system = AnthropicProvider._to_anthropic_messages(messages)
        self.assertEqual(system, "be brief")
        self.assertEqual([m["role"] for m in out], ["user", "assistant", "user"])
        assistant_blocks = out[1]["content"]
        self.assertEqual(assistant_blocks[0], {"type": "text", "text": "checking"})
        self.assertEqual(assistant_blocks[2]["input"], {"limit": 2})
        results = out[2]["content"]
        self.assertEqual([b["tool_use_id"] for b in results], ["t1", "t2"])
        self.assertTrue(results[1]["is_error"])
        self.assertNotIn("is_error", results[0])

    def test_tools_use_input_schema(self) -> None:
        tools = AnthropicProvider._to_anthropic_tools([t.to_tool_schema() for t in TOOLS])
        self.assertEqual([t["name"] for t in tools], [t.name for t in TOOLS])
        self.assertEqual(tools[0]["input_schema"]["required"], ["role", "content", "timestamp"])

    def test_parse_content(self) -> None:
        content = [
            SimpleNamespace(type="text", text="one"),
            SimpleNamespace(type="tool_use", id="toolu_9", name="get_stats", input={}),
            SimpleNamespace(type="text", text="two"),
        ]
        text, calls = AnthropicProvider._parse_content(content)
        self.assertEqual(text, "one\ntwo")
        self.assertEqual(calls, [{"id": "toolu_9", "name": "get_stats", "params": {}}])


class TestAnthropicChat(unittest.IsolatedAsyncioTestCase):
    async def test_chat_sends_system_and_tools(self) -> None:
        provider = AnthropicProvider(api_key="test")
        fake_client = MagicMock()
        fake_client.messages.create = AsyncMock(
            return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text="hello")])
        )
        provider._client = fake_client
        text, calls = await provider.chat(
            [Message(role="system", content="sys"), Message(role="user", content="hi")],
            model="claude-test",
            tools=[TOOLS[2].to_tool_schema()],
        )
        self.assertEqual((text, calls), ("hello", []))
        kwargs = fake_client.messages.create.await_args.kwargs
        self.assertEqual(kwargs["model"], "claude-test")
        self.assertEqual(kwargs["system"], "sys")
        self.assertEqual(kwargs["max_tokens"], 4096)
        self.assertEqual(kwargs["tools"][0]["name"], "get_stats")


class TestOpenAIConversion(unittest.TestCase):
    def test_tool_calls_round_trip_shapes(self) -> None:
        out = OpenAIProvider._to_openai_messages(
            [
                Message(role="assistant", content="", tool_calls=[{"id": "c1", "name": "get_stats", "params": {}}]),
                Message(role="tool", content="{}", tool_call_id="c1", name="get_stats"),
            ]
        )
        self.assertEqual(out[0]["tool_calls"][0]["function"], {"name": "get_stats", "arguments": "{}"})
        self.assertEqual(out[1]["tool_call_id"], "c1")

    def test_nameless_call_keeps_its_id(self) -> None:
        out = OpenAIProvider._to_openai_messages(
            [
                Message(role="assistant", content="", tool_calls=[{"id": "c9", "name": "", "params": {}}]),
                Message(role="tool", content="{}", tool_call_id="c9", name="", is_error=True),
            ]
        )
        self.assertEqual([tc["id"] for tc in out[0]["tool_calls"]], ["c9"])
        self.assertEqual(out[1]["tool_call_id"], "c9")


    def test_parse_tool_calls(self) -> None:
        choice = SimpleNamespace(
            tool_calls=[
                SimpleNamespace(id="c1", function=SimpleNamespace(name="retrieve_conversations", arguments='{"limit": 3}')),
            ]
        )
        self.assertEqual(
            OpenAIProvider._parse_tool_calls(choice),
            [{"id": "c1", "name": "retrieve_conversations", "params": {"limit": 3}}],
        )


class TestOllamaParse(unittest.TestCase):
    def test_ids_are_generated(self) -> None:
        msg = SimpleNamespace(
            tool_calls=[SimpleNamespace(function=SimpleNamespace(name="get_stats", arguments={}))]
        )
        (call,) = OllamaProvider._parse_tool_calls(msg)
        self.assertEqual(call["name"], "get_stats")
        self.assertTrue(call["id"])
        self.assertEqual(json.dumps(call["params"]), "{}")


class TestProviderResolution(unittest.IsolatedAsyncioTestCase):
    def tearDown(self) -> None:
        llm._provider_cache.clear()

    def test_prefixes(self) -> None:
        provider, model = llm._get_provider_for_model("anthropic:claude-x")
        self.assertIsInstance(provider, AnthropicProvider)
        self.assertEqual(model, "claude-x")
        provider, model = llm._get_provider_for_model("openai:gpt-4.1-nano")
        self.assertIsInstance(provider, OpenAIProvider)
        provider, model = llm._get_provider_for_model("llama3.2")
        self.assertIsInstance(provider, OllamaProvider)
        self.assertEqual(model, "llama3.2")

    def test_unknown_provider(self) -> None:
        with self.assertRaises(UpstreamError):
            llm._get_provider_for_model("nope:model")

    async def test_provider_errors_become_upstream_errors(self) -> None:
        provider = MagicMock(spec=LLMProvider)
        provider.chat = AsyncMock(side_effect=TimeoutError("slow"))
        with self.assertRaises(UpstreamError):
            await llm.chat([Message(role="user", content="hi")], provider=provider)


if __name__ == "__main__":
    unittest.main()
