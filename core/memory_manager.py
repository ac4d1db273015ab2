import asyncio
import json
import logging
from typing import Dict, List, Optional, Union

from models import ConversationTurn, LongTermRecord
from core.database_manager import KeyValueStore

logger = logging.getLogger(__name__)

CONVERSATION = "conversation"
LONG_TERM = "long_term"

TTL = {
    CONVERSATION: 60 * 60 * 24,       # 24 hours
    LONG_TERM: 60 * 60 * 24 * 30      # 30 days
}


class MemoryStore:
    """Per-user conversation and long-term records on top of a TTL key-value store

    Storage errors never reach the caller: reads come back empty and writes
    become no-ops. Appends are read-modify-write of the whole list, so two
    concurrent writers for the same user can lose one of the updates.
    """

    def __init__(self, backend: Optional[KeyValueStore]):
        self.backend = backend
        self.is_available = backend is not None
        if not self.is_available:
            logger.warning("No key-value backend configured, memory is disabled")

    def _key(self, record_type: str, user_id: str) -> str:
        return f"{record_type}:{user_id}"

    async def _read(self, record_type: str, user_id: str) -> List[Dict]:
        if not self.is_available:
            return []
        try:
            data = await self.backend.get(self._key(record_type, user_id))
            return json.loads(data) if data else []
        except Exception as e:
            logger.error(f"Failed to get {record_type} memories for {user_id}: {str(e)}")
            return []

    async def _append(self, record_type: str, user_id: str, item: Dict) -> None:
        if not self.is_available:
            return
        try:
            existing = await self._read(record_type, user_id)
            await self.backend.put(
                self._key(record_type, user_id),
                json.dumps(existing + [item]),
                expiration_ttl=TTL[record_type]
            )
        except Exception as e:
            logger.error(f"Failed to store {record_type} memory for {user_id}: {str(e)}")

    async def store_conversation(self, user_id: str, turn: Union[ConversationTurn, Dict]) -> None:
        item = turn.to_dict() if isinstance(turn, ConversationTurn) else turn
        await self._append(CONVERSATION, user_id, item)

    async def store_long_term(self, user_id: str, record: Union[LongTermRecord, Dict]) -> None:
        item = record.to_dict() if isinstance(record, LongTermRecord) else record
        await self._append(LONG_TERM, user_id, item)

    async def get_conversations(self, user_id: str) -> List[Dict]:
        return await self._read(CONVERSATION, user_id)

    async def get_long_term(self, user_id: str) -> List[Dict]:
        return await self._read(LONG_TERM, user_id)

    async def get_all(self, user_id: str) -> Dict[str, List[Dict]]:
        """Get both record kinds for a user"""
        conversations, long_term = await asyncio.gather(
            self.get_conversations(user_id),
            self.get_long_term(user_id)
        )
        return {"conversations": conversations, "long_term": long_term}


def format_memories_for_context(conversations: List[Dict], long_term: List[Dict],
                                conversation_limit: int = 5, long_term_limit: int = 3) -> str:
    """Render recent turns and long-term records as a context block

    Returns an empty string when there is nothing to remember.
    """
    if not conversations and not long_term:
        return ""

    recent = "\n".join(
        f"{m.get('role')}: {m.get('content')}" for m in conversations[-conversation_limit:]
    )
    relevant = "\n".join(
        f"Previous {m.get('type')}: {m.get('action') or m.get('content')}"
        for m in long_term[-long_term_limit:]
    )
    return f"Recent conversations:\n{recent}\n\nRelevant history:\n{relevant}"
