import uuid
import logging
from typing import Dict, List, Optional

import httpx

from models import Author, Message, Platform
from platforms.client_base import PlatformClient

logger = logging.getLogger(__name__)

NEYNAR_CAST_URL = "https://api.neynar.com/v2/farcaster/cast"


class FarcasterClient(PlatformClient):
    platform = Platform.FARCASTER.value
    character_limit = 280

    def __init__(self, api_key: str, signer_uuid: str, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(http_client)
        self.api_key = api_key
        self.signer_uuid = signer_uuid

    def transform_webhook(self, raw: Dict) -> Optional[Message]:
        """Create a Message from a Neynar `cast.created` webhook"""
        cast = raw.get('data', raw)
        author = cast.get('author') or {}
        if not cast.get('text') or author.get('fid') is None:
            return None

        channel = cast.get('channel') or {}
        return Message(
            platform=self.platform,
            text=cast['text'],
            author=Author(id=author['fid'], username=author.get('username')),
            raw=raw,
            parent_id=cast.get('hash'),
            channel_id=channel.get('id')
        )

    async def publish(self, text: str, parent_id: Optional[str] = None,
                      embeds: Optional[List[Dict]] = None, channel_id: Optional[str] = None) -> Dict:
        body = {
            "signer_uuid": self.signer_uuid,
            "text": text,
            "parent": parent_id,
            "idem": uuid.uuid4().hex[:16]
        }
        if embeds:
            body["embeds"] = embeds
        if channel_id:
            body["channel_id"] = channel_id

        headers = {
            "accept": "application/json",
            "x-api-key": self.api_key
        }
        return await self._post_json(NEYNAR_CAST_URL, body, headers=headers)
