from pydantic import BaseModel
from typing import Optional


class AgentConfig(BaseModel):
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    llm_model: str = "openai/gpt-3.5-turbo"
    app_title: str = "Ragent"

    farcaster_neynar_api_key: Optional[str] = None
    farcaster_neynar_signer_uuid: Optional[str] = None
    telegram_bot_token: Optional[str] = None
    twitter_bearer_token: Optional[str] = None

    memory_backend: str = "sqlite"
    memory_db_path: str = "data/agent_memory.db"
    character_file: str = "config/character.json"

    rate_limit_max_requests: int = 50
    rate_limit_window_seconds: float = 60.0
    retry_max_retries: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 5.0
    response_cache_bucket_seconds: int = 60

    log_level: str = "INFO"

    @classmethod
    def from_env(cls):
        import os
        from dotenv import load_dotenv

        load_dotenv()

        return cls(
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY", ""),
            openrouter_base_url=os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"),
            llm_model=os.getenv("LLM_MODEL", "openai/gpt-3.5-turbo"),
            farcaster_neynar_api_key=os.getenv("FARCASTER_NEYNAR_API_KEY"),
            farcaster_neynar_signer_uuid=os.getenv("FARCASTER_NEYNAR_SIGNER_UUID"),
            telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN"),
            twitter_bearer_token=os.getenv("TWITTER_BEARER_TOKEN"),
            memory_backend=os.getenv("MEMORY_BACKEND", "sqlite"),
            memory_db_path=os.getenv("MEMORY_DB_PATH", "data/agent_memory.db"),
            character_file=os.getenv("CHARACTER_FILE", "config/character.json"),
            rate_limit_max_requests=int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "50")),
            rate_limit_window_seconds=float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60")),
            retry_max_retries=int(os.getenv("RETRY_MAX_RETRIES", "3")),
            retry_base_delay=float(os.getenv("RETRY_BASE_DELAY", "1.0")),
            retry_max_delay=float(os.getenv("RETRY_MAX_DELAY", "5.0")),
            response_cache_bucket_seconds=int(os.getenv("RESPONSE_CACHE_BUCKET_SECONDS", "60")),
            log_level=os.getenv("LOG_LEVEL", "INFO")
        )
