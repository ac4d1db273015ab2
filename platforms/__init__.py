from typing import Dict

from models import AgentConfig
from .client_base import PlatformClient, trim_to_limit
from .farcaster_client import FarcasterClient
from .telegram_client import TelegramClient
from .twitter_client import TwitterClient


def build_platform_clients(config: AgentConfig) -> Dict[str, PlatformClient]:
    """Create a client for every platform whose credentials are configured"""
    clients: Dict[str, PlatformClient] = {}
    if config.farcaster_neynar_api_key and config.farcaster_neynar_signer_uuid:
        clients[FarcasterClient.platform] = FarcasterClient(
            config.farcaster_neynar_api_key, config.farcaster_neynar_signer_uuid
        )
    if config.telegram_bot_token:
        clients[TelegramClient.platform] = TelegramClient(config.telegram_bot_token)
    if config.twitter_bearer_token:
        clients[TwitterClient.platform] = TwitterClient(config.twitter_bearer_token)
    return clients


__all__ = [
    'PlatformClient',
    'FarcasterClient',
    'TelegramClient',
    'TwitterClient',
    'trim_to_limit',
    'build_platform_clients'
]
