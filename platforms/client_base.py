from typing import Dict, List, Optional
import logging
from abc import ABC, abstractmethod

import httpx

from models import Message
from core.exceptions import TransformError, UpstreamError

logger = logging.getLogger(__name__)


def trim_to_limit(text: str, limit: int) -> str:
    """Trim text to `limit` characters, cutting at the last sentence when possible"""
    if len(text) <= limit:
        return text

    trimmed = text[:limit]
    last_period = trimmed.rfind('.')
    if last_period > 0:
        trimmed = trimmed[:last_period + 1]
    return trimmed


class PlatformClient(ABC):
    platform: str = ""
    character_limit: int = 280

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.http_client = http_client or httpx.AsyncClient(timeout=30.0)

    @abstractmethod
    def transform_webhook(self, raw: Dict) -> Optional[Message]:
        """Create a Message object from the platform's raw webhook payload"""
        pass

    @abstractmethod
    async def publish(self, text: str, parent_id: Optional[str] = None,
                      embeds: Optional[List[Dict]] = None, channel_id: Optional[str] = None) -> Dict:
        """Publish a post or reply and return the platform's acknowledgement"""
        pass

    def transform(self, message: Message) -> Message:
        """Normalize an inbound message; messages without a raw payload are already normalized"""
        if message.raw is None:
            return message
        if not isinstance(message.raw, dict):
            raise TransformError(self.platform, "Raw payload is not an object")

        try:
            transformed = self.transform_webhook(message.raw)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to transform {self.platform} payload: {str(e)}")
            transformed = None

        if transformed is None:
            raise TransformError(self.platform, "Failed to transform message")
        return transformed

    async def send_reply(self, text: str, message: Message, embeds: Optional[List[Dict]] = None) -> Dict:
        return await self.publish(
            trim_to_limit(text, self.character_limit),
            parent_id=message.parent_id,
            embeds=embeds,
            channel_id=message.channel_id
        )

    async def _post_json(self, url: str, body: Dict, headers: Optional[Dict] = None) -> Dict:
        response = await self.http_client.post(url, json=body, headers=headers)
        logger.info(f"{self.platform} publish status: {response.status_code}")

        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            detail = payload.get('message') or payload.get('description') if isinstance(payload, dict) else None
            raise UpstreamError(
                f"Failed to publish to {self.platform}: {detail or 'Unknown error'} (Status: {response.status_code})",
                status_code=response.status_code
            )
        return response.json()

    async def aclose(self) -> None:
        await self.http_client.aclose()
