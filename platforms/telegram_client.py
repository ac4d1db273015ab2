import logging
from typing import Dict, List, Optional

import httpx

from models import Author, Message, Platform
from platforms.client_base import PlatformClient, trim_to_limit

logger = logging.getLogger(__name__)


class TelegramClient(PlatformClient):
    platform = Platform.TELEGRAM.value
    character_limit = 4096

    def __init__(self, bot_token: str, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(http_client)
        self.api_url = f"https://api.telegram.org/bot{bot_token}"

    def transform_webhook(self, raw: Dict) -> Optional[Message]:
        """Create a Message from a Telegram update"""
        update = raw.get('message') or raw.get('edited_message')
        if not update or not update.get('text'):
            return None

        sender = update.get('from') or {}
        return Message(
            platform=self.platform,
            text=update['text'],
            author=Author(id=sender.get('id'), username=sender.get('username') or sender.get('first_name')),
            raw=raw,
            parent_id=str(update['message_id']),
            channel_id=str(update['chat']['id'])
        )

    async def publish(self, text: str, parent_id: Optional[str] = None,
                      embeds: Optional[List[Dict]] = None, channel_id: Optional[str] = None) -> Dict:
        body = {"chat_id": channel_id, "text": text}
        if parent_id:
            body["reply_to_message_id"] = int(parent_id)
        # Telegram has no embeds; links are appended so previews still render
        if embeds:
            links = "\n".join(e["url"] for e in embeds if e.get("url"))
            if links:
                room = max(0, self.character_limit - len(links) - 1)
                body["text"] = trim_to_limit(f"{trim_to_limit(text, room)}\n{links}", self.character_limit)
        return await self._post_json(f"{self.api_url}/sendMessage", body)
