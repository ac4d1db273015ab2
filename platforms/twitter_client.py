import logging
from typing import Dict, List, Optional

import httpx

from models import Author, Message, Platform
from platforms.client_base import PlatformClient

logger = logging.getLogger(__name__)

TWEETS_URL = "https://api.twitter.com/2/tweets"


class TwitterClient(PlatformClient):
    platform = Platform.TWITTER.value
    character_limit = 280

    def __init__(self, bearer_token: str, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(http_client)
        self.bearer_token = bearer_token

    def transform_webhook(self, raw: Dict) -> Optional[Message]:
        """Create a Message from an Account Activity `tweet_create_events` payload"""
        events = raw.get('tweet_create_events') or []
        if not events:
            return None

        tweet = events[0]
        user = tweet.get('user') or {}
        text = tweet.get('full_text') or tweet.get('text')
        if not text:
            return None

        return Message(
            platform=self.platform,
            text=text,
            author=Author(id=user.get('id_str'), username=user.get('screen_name')),
            raw=raw,
            parent_id=tweet.get('id_str')
        )

    async def publish(self, text: str, parent_id: Optional[str] = None,
                      embeds: Optional[List[Dict]] = None, channel_id: Optional[str] = None) -> Dict:
        body = {"text": text}
        if parent_id:
            body["reply"] = {"in_reply_to_tweet_id": parent_id}
        headers = {"Authorization": f"Bearer {self.bearer_token}"}
        return await self._post_json(TWEETS_URL, body, headers=headers)
