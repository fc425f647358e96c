"""HTTP tests for the chat and tools routers."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from main import create_app
from src.agent_orchestrator.providers import LLMProvider
from src.conversation_memory import ConversationStore


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = ConversationStore(Path(self._tmp.name) / "conversations.db")
        self.provider = MagicMock(spec=LLMProvider)
        self.provider.chat = AsyncMock(return_value=("Hi, I remember you.", []))
        self.client = TestClient(create_app(store=self.store, llm_provider=self.provider))
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)
        self.store.close()
        self._tmp.cleanup()


class TestToolsRouter(ApiTestCase):
    def test_list_tools(self) -> None:
        resp = self.client.get("/tools")
        self.assertEqual(resp.status_code, 200)
        tools = resp.json()["tools"]
        self.assertEqual(
            [t["name"] for t in tools],
            ["store_conversation", "retrieve_conversations", "get_stats"],
        )
        self.assertIn("input_schema", tools[0])

    def test_call_store_then_retrieve(self) -> None:
        stored = self.client.post(
            "/tools/call",
            json={
                "name": "store_conversation",
                "arguments": {"role": "user", "content": "hello", "timestamp": "2024-01-01T00:00:00Z"},
            },
        ).json()
        self.assertTrue(stored["success"])
        found = self.client.post(
            "/tools/call", json={"name": "retrieve_conversations", "arguments": {"keyword": "HELLO"}}
        ).json()
        self.assertEqual(found["count"], 1)
        self.assertEqual(found["conversations"][0]["id"], stored["id"])

    def test_failures_are_envelopes(self) -> None:
        resp = self.client.post("/tools/call", json={"name": "nope", "arguments": {}})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": False, "error": "Unknown tool: nope"})


class TestChatRouter(ApiTestCase):
    def test_chat_replies_and_stores_turn(self) -> None:
        resp = self.client.post("/chat", json={"message": "hello again"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["reply"], "Hi, I remember you.")
        self.assertEqual(body["rounds"], 0)
        # background task runs before TestClient returns
        stats = self.store.stats()
        self.assertEqual((stats.user_messages, stats.assistant_messages), (1, 1))

    def test_history_is_forwarded(self) -> None:
        self.client.post(
            "/chat",
            json={"message": "and now?", "history": [{"role": "user", "content": "before"}]},
        )
        sent = self.provider.chat.await_args.args[0]
        self.assertEqual([m.content for m in sent[1:]], ["before", "and now?"])

    def test_blank_message_rejected(self) -> None:
        self.assertEqual(self.client.post("/chat", json={"message": ""}).status_code, 422)
        self.assertEqual(self.client.post("/chat", json={"message": "   "}).status_code, 422)
        self.assertEqual(self.store.stats().total, 0)

    def test_upstream_failure_is_502(self) -> None:
        self.provider.chat = AsyncMock(side_effect=ConnectionError("down"))
        resp = self.client.post("/chat", json={"message": "hello"})
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(self.store.stats().total, 0)


if __name__ == "__main__":
    unittest.main()
