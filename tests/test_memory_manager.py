import asyncio
import json
import pytest

from models import ConversationTurn, LongTermRecord
from core.database_manager import InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore
from core.exceptions import StoreError
from core.memory_manager import MemoryStore, TTL, CONVERSATION, LONG_TERM, format_memories_for_context


class BrokenStore(KeyValueStore):
    async def get(self, key):
        raise StoreError("backend down")

    async def put(self, key, value, expiration_ttl=None):
        raise StoreError("backend down")


class SlowStore(InMemoryKeyValueStore):
    """Yields to the event loop between read and write"""

    async def get(self, key):
        value = await super().get(key)
        await asyncio.sleep(0)
        return value


@pytest.mark.asyncio
async def test_conversation_round_trip(memory):
    await memory.store_conversation("farcaster:1", ConversationTurn(role="user", content="first"))
    await memory.store_conversation("farcaster:1", ConversationTurn(role="assistant", content="second"))

    conversations = await memory.get_conversations("farcaster:1")

    assert [c["content"] for c in conversations] == ["first", "second"]
    assert conversations[-1]["role"] == "assistant"


@pytest.mark.asyncio
async def test_conversation_expires_after_ttl(memory, clock):
    await memory.store_conversation("farcaster:1", ConversationTurn(role="user", content="hi"))

    clock.advance(TTL[CONVERSATION] + 1)

    assert await memory.get_conversations("farcaster:1") == []


@pytest.mark.asyncio
async def test_append_refreshes_ttl(memory, clock):
    await memory.store_conversation("u", ConversationTurn(role="user", content="one"))
    clock.advance(TTL[CONVERSATION] - 10)
    await memory.store_conversation("u", ConversationTurn(role="user", content="two"))
    clock.advance(20)

    assert len(await memory.get_conversations("u")) == 2


@pytest.mark.asyncio
async def test_long_term_outlives_conversations(memory, clock):
    await memory.store_conversation("u", ConversationTurn(role="user", content="hi"))
    await memory.store_long_term("u", LongTermRecord(type="action", action="help"))

    clock.advance(TTL[CONVERSATION] + 1)
    memories = await memory.get_all("u")

    assert memories["conversations"] == []
    assert memories["long_term"][0]["action"] == "help"

    clock.advance(TTL[LONG_TERM])
    assert await memory.get_long_term("u") == []


@pytest.mark.asyncio
async def test_unavailable_store_reads_empty_and_ignores_writes():
    memory = MemoryStore(None)

    await memory.store_conversation("u", ConversationTurn(role="user", content="hi"))

    assert memory.is_available is False
    assert await memory.get_all("u") == {"conversations": [], "long_term": []}


@pytest.mark.asyncio
async def test_backend_errors_degrade_silently():
    memory = MemoryStore(BrokenStore())

    await memory.store_conversation("u", ConversationTurn(role="user", content="hi"))
    await memory.store_long_term("u", {"type": "action", "action": "help"})

    assert await memory.get_conversations("u") == []
    assert await memory.get_long_term("u") == []


@pytest.mark.asyncio
async def test_corrupt_value_reads_empty(clock):
    backend = InMemoryKeyValueStore(clock=clock)
    await backend.put("conversation:u", "{not json", expiration_ttl=60)

    assert await MemoryStore(backend).get_conversations("u") == []


@pytest.mark.asyncio
async def test_concurrent_appends_can_lose_an_update(clock):
    memory = MemoryStore(SlowStore(clock=clock))

    await asyncio.gather(
        memory.store_conversation("u", ConversationTurn(role="user", content="a")),
        memory.store_conversation("u", ConversationTurn(role="user", content="b")),
    )

    conversations = await memory.get_conversations("u")
    assert len(conversations) == 1
    assert conversations[0]["content"] in ("a", "b")


@pytest.mark.asyncio
async def test_sqlite_backend_persists_and_expires(tmp_path, clock):
    backend = SQLiteKeyValueStore(str(tmp_path / "memory.db"), clock=clock)
    memory = MemoryStore(backend)

    await memory.store_conversation("telegram:9", ConversationTurn(role="user", content="hello"))
    reopened = MemoryStore(SQLiteKeyValueStore(str(tmp_path / "memory.db"), clock=clock))
    assert (await reopened.get_conversations("telegram:9"))[0]["content"] == "hello"

    clock.advance(TTL[CONVERSATION] + 1)
    assert await reopened.get_conversations("telegram:9") == []
    assert backend.purge_expired() == 1


@pytest.mark.asyncio
async def test_values_are_json_lists(clock):
    backend = InMemoryKeyValueStore(clock=clock)
    await MemoryStore(backend).store_long_term("u", LongTermRecord(type="note", content="likes tea"))

    stored = json.loads(await backend.get("long_term:u"))

    assert stored[0]["type"] == "note"
    assert stored[0]["content"] == "likes tea"
    assert "action" not in stored[0]


def test_format_memories_for_context():
    conversations = [{"role": "user", "content": f"m{i}"} for i in range(7)]
    long_term = [{"type": "action", "action": "help"}, {"type": "note", "content": "likes tea"}]

    context = format_memories_for_context(conversations, long_term)

    assert context.startswith("Recent conversations:\nuser: m2")
    assert "user: m1" not in context
    assert "Previous action: help" in context
    assert "Previous note: likes tea" in context


def test_format_memories_empty():
    assert format_memories_for_context([], []) == ""
