from .models import (
    Platform,
    Author,
    Message,
    ConversationTurn,
    LongTermRecord,
    ActionResult,
    conversation_key
)
from .personality_models import Character
from .config import AgentConfig

__all__ = [
    'Platform',
    'Author',
    'Message',
    'ConversationTurn',
    'LongTermRecord',
    'ActionResult',
    'conversation_key',
    'Character',
    'AgentConfig'
]
