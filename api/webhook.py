import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel

from models import AgentConfig, Message
from core.action_manager import ActionEnvironment, default_registry
from core.database_manager import InMemoryKeyValueStore, SQLiteKeyValueStore
from core.memory_manager import MemoryStore
from core.message_processor import MessageProcessor
from core.personality import get_character
from core.rate_limiter import RateLimiter
from core.response_generator import LLMClient, ResponseGenerator
from core.retry import RetryExecutor
from platforms import build_platform_clients
from utils.llm_cache import ResponseCache

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": "Content-Type",
}


class WebhookPayload(BaseModel):
    data: Dict[str, Any]


def build_memory_store(config: AgentConfig) -> MemoryStore:
    if config.memory_backend == "sqlite":
        return MemoryStore(SQLiteKeyValueStore(config.memory_db_path))
    if config.memory_backend == "memory":
        return MemoryStore(InMemoryKeyValueStore())
    return MemoryStore(None)


def build_processor(config: AgentConfig) -> MessageProcessor:
    """Wire the message pipeline from configuration"""
    character = get_character(config.character_file)
    memory = build_memory_store(config)
    dispatcher = default_registry().build(ActionEnvironment(config=config, memory=memory, character=character))
    rate_limiter = RateLimiter(config.rate_limit_max_requests, config.rate_limit_window_seconds)

    return MessageProcessor(
        clients=build_platform_clients(config),
        memory=memory,
        action_dispatcher=dispatcher,
        response_generator=ResponseGenerator(LLMClient(config), character),
        retry=RetryExecutor(
            rate_limiter,
            max_retries=config.retry_max_retries,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay
        ),
        response_cache=ResponseCache(config.response_cache_bucket_seconds)
    )


def create_app(processor: Optional[MessageProcessor] = None, config: Optional[AgentConfig] = None) -> FastAPI:
    if processor is None:
        processor = build_processor(config or AgentConfig.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        for client in processor.clients.values():
            await client.aclose()

    app = FastAPI(title="Ragent webhook", lifespan=lifespan)
    app.state.processor = processor

    @app.options("/")
    async def preflight() -> Response:
        return Response(status_code=204, headers=CORS_HEADERS)

    @app.api_route("/", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "TRACE"])
    async def method_not_allowed() -> Response:
        return PlainTextResponse("Method not allowed", status_code=405)

    @app.post("/")
    async def webhook(request: Request) -> Response:
        try:
            payload = WebhookPayload(**(await request.json()))
            message = Message.from_dict(payload.data)
            result = await app.state.processor.process_message(message)
            return JSONResponse(result.to_dict())
        except Exception as e:
            logger.error(f"Error processing request: {str(e)}", exc_info=True)
            return JSONResponse({"error": "Internal server error"}, status_code=500)

    return app
