from dataclasses import dataclass
from typing import Dict, List, Optional
import logging

from models import AgentConfig, ActionResult, Author, Character, LongTermRecord, Message, conversation_key
from core.memory_manager import MemoryStore, format_memories_for_context

logger = logging.getLogger(__name__)

ACTION_FAILED_TEXT = "Sorry, that action failed"


@dataclass
class ActionEnvironment:
    """Shared capabilities handed to every action once at startup"""
    config: AgentConfig
    memory: MemoryStore
    character: Character


@dataclass
class ActionInput:
    text: str
    author: Author
    platform: Optional[str] = None


class Action:
    name: str = "action"
    description: str = ""

    def __init__(self):
        self.env: Optional[ActionEnvironment] = None

    def set_env(self, env: ActionEnvironment) -> "Action":
        self.env = env
        return self

    def should_execute(self, text: str) -> bool:
        return False

    async def execute(self, action_input: ActionInput) -> ActionResult:
        raise NotImplementedError(f"Action {self.name} must implement execute")


class HelpAction(Action):
    name = "help"
    description = "/help - list what I can do"

    def __init__(self, commands: Optional[Dict[str, str]] = None):
        super().__init__()
        self.commands = commands or {}

    def should_execute(self, text: str) -> bool:
        return text.strip().lower().startswith("/help")

    async def execute(self, action_input: ActionInput) -> ActionResult:
        lines = [f"Hi {action_input.author.username}, here is what I can do:"]
        lines.extend(self.commands.values())
        return ActionResult(text="\n".join(lines), should_send_message=True)


class RecallAction(Action):
    name = "recall"
    description = "/recall - tell you what I remember about you"

    TRIGGERS = ("/recall", "what do you remember about me", "what do you know about me")

    def should_execute(self, text: str) -> bool:
        normalized = " ".join(text.lower().split())
        return any(normalized.startswith(t) if t.startswith("/") else t in normalized
                   for t in self.TRIGGERS)

    async def execute(self, action_input: ActionInput) -> ActionResult:
        user_id = conversation_key(action_input.platform, action_input.author.id)
        memories = await self.env.memory.get_all(user_id)
        remembered = format_memories_for_context(
            memories["conversations"], memories["long_term"], conversation_limit=10, long_term_limit=5
        ) or "Nothing yet, this is our first conversation."

        context = (
            f"{self.env.character.get_system_prompt()}\n\n"
            f"Summarize briefly and kindly what you remember about {action_input.author.username}.\n\n"
            f"{remembered}"
        )
        return ActionResult(text=action_input.text, context=context)


class ActionDispatcher:
    """Runs the first registered action whose trigger matches the message"""

    def __init__(self, actions: List[Action], memory: MemoryStore):
        self.actions = actions
        self.memory = memory

    async def dispatch(self, message: Message, user_id: str) -> Optional[ActionResult]:
        for action in self.actions:
            if not action.should_execute(message.text):
                continue

            logger.info(f"Executing action: {action.name}")
            try:
                result = await action.execute(ActionInput(
                    text=message.text,
                    author=message.author,
                    platform=message.platform
                ))
            except Exception as e:
                logger.error(f"Action {action.name} failed: {str(e)}", exc_info=True)
                return ActionResult(text=ACTION_FAILED_TEXT, should_send_message=True)

            await self.memory.store_long_term(user_id, LongTermRecord(type="action", action=action.name))
            return result

        return None


class ActionRegistry:
    """Ordered builder for the action list; registration order is dispatch order"""

    def __init__(self):
        self._actions: List[Action] = []

    def register(self, action: Action) -> "ActionRegistry":
        self._actions.append(action)
        return self

    def build(self, env: ActionEnvironment) -> ActionDispatcher:
        actions = [action.set_env(env) for action in self._actions]
        logger.info(f"Registered actions: {[a.name for a in actions]}")
        return ActionDispatcher(actions, env.memory)


def default_registry() -> ActionRegistry:
    recall = RecallAction()
    help_action = HelpAction()
    help_action.commands = {a.name: a.description for a in (help_action, recall)}
    return ActionRegistry().register(help_action).register(recall)
