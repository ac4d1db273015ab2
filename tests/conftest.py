import pytest
from typing import Dict, List, Optional

from models import AgentConfig, Author, Character, Message
from core.action_manager import ActionEnvironment, default_registry
from core.database_manager import InMemoryKeyValueStore
from core.memory_manager import MemoryStore
from core.message_processor import MessageProcessor
from core.rate_limiter import RateLimiter
from core.response_generator import ResponseGenerator
from core.retry import RetryExecutor
from platforms.client_base import PlatformClient
from utils.llm_cache import ResponseCache


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleep:
    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeLLM:
    """Completion backend that records prompts and answers from a script"""

    def __init__(self, replies: Optional[List[str]] = None):
        self.replies = list(replies or [])
        self.calls: List[List[Dict]] = []

    async def complete(self, messages: List[Dict]) -> str:
        self.calls.append(messages)
        if self.replies:
            return self.replies.pop(0)
        return f"reply to: {messages[-1]['content']}"


class FakePlatformClient(PlatformClient):
    platform = "farcaster"
    character_limit = 280

    def __init__(self):
        super().__init__(http_client=None)
        self.published: List[Dict] = []

    def transform_webhook(self, raw: Dict) -> Optional[Message]:
        if not raw.get('text'):
            return None
        return Message(
            platform=self.platform,
            text=raw['text'],
            author=Author(id=raw['fid'], username=raw['username']),
            raw=raw,
            parent_id=raw.get('hash')
        )

    async def publish(self, text, parent_id=None, embeds=None, channel_id=None) -> Dict:
        self.published.append({"text": text, "parent_id": parent_id, "embeds": embeds})
        return {"success": True}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def character():
    return Character(name="Tester", system_prompt="You are a test persona.")


@pytest.fixture
def memory(clock):
    return MemoryStore(InMemoryKeyValueStore(clock=clock))


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def platform_client():
    return FakePlatformClient()


@pytest.fixture
def processor(memory, llm, platform_client, character, clock, fake_sleep):
    env = ActionEnvironment(config=AgentConfig(), memory=memory, character=character)
    return MessageProcessor(
        clients={"farcaster": platform_client},
        memory=memory,
        action_dispatcher=default_registry().build(env),
        response_generator=ResponseGenerator(llm, character),
        retry=RetryExecutor(RateLimiter(clock=clock), sleep=fake_sleep),
        response_cache=ResponseCache(bucket_seconds=60, clock=clock)
    )


def make_message(text: str = "hello", author_id=1, username: str = "a", platform: str = "farcaster") -> Message:
    return Message(platform=platform, text=text, author=Author(id=author_id, username=username))
