from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, List, Any
from datetime import datetime, timezone


class Platform(str, Enum):
    FARCASTER = "farcaster"
    TELEGRAM = "telegram"
    TWITTER = "twitter"


@dataclass
class Author:
    id: Any
    username: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional["Author"]:
        if not data:
            return None
        return cls(
            id=data.get('id', data.get('fid')),
            username=data.get('username')
        )


@dataclass
class Message:
    platform: Optional[str]
    text: Any
    author: Optional[Author]
    raw: Any = None
    parent_id: Optional[str] = None
    channel_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "Message":
        """Build a Message from the webhook `data` object"""
        return cls(
            platform=data.get('platform'),
            text=data.get('text'),
            author=Author.from_dict(data.get('author')),
            raw=data.get('raw'),
            parent_id=data.get('parent_id', data.get('hash')),
            channel_id=data.get('channel_id')
        )

    @property
    def user_key(self) -> str:
        return conversation_key(self.platform, self.author.id)


def conversation_key(platform: str, author_id: Any) -> str:
    """Memory key shared by conversation and long-term records of one user"""
    platform_value = platform.value if isinstance(platform, Platform) else platform
    return f"{platform_value}:{author_id}"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ConversationTurn:
    role: str
    content: str
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class LongTermRecord:
    type: str
    action: Optional[str] = None
    content: Optional[str] = None
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ActionResult:
    text: str
    should_send_message: bool = False
    context: Optional[str] = None
    embeds: Optional[List[Dict]] = None

    def to_dict(self) -> Dict:
        data = {"text": self.text, "shouldSendMessage": self.should_send_message}
        if self.context:
            data["context"] = self.context
        if self.embeds:
            data["embeds"] = self.embeds
        return data
