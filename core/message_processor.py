import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from models import ActionResult, ConversationTurn, Message
from core.action_manager import ActionDispatcher
from core.exceptions import TransformError
from core.memory_manager import MemoryStore
from core.message_validator import validate_message
from core.response_generator import ResponseGenerator
from core.retry import RetryExecutor
from platforms.client_base import PlatformClient
from utils.llm_cache import ResponseCache

logger = logging.getLogger(__name__)

LLM_RESOURCE_KEY = "llm-api"
QUEUED_TEXT = "Message queued for processing"


class MessageProcessor:
    """Single-consumer FIFO queue feeding the per-message reply pipeline

    Only one drain loop runs at a time. A call that arrives while another call
    is draining enqueues its message and returns a "queued" acknowledgement;
    the draining call processes it and returns the result of the last message
    it drained.
    """

    def __init__(self, clients: Dict[str, PlatformClient], memory: MemoryStore,
                 action_dispatcher: ActionDispatcher, response_generator: ResponseGenerator,
                 retry: RetryExecutor, response_cache: ResponseCache):
        self.clients = clients
        self.memory = memory
        self.action_dispatcher = action_dispatcher
        self.response_generator = response_generator
        self.retry = retry
        self.response_cache = response_cache

        self.message_queue: Deque[Message] = deque()
        self.draining = False
        self.memory_cache: Dict[str, List[Dict]] = {}
        self.processed_count = 0

    async def process_message(self, message: Message) -> ActionResult:
        """Validate and enqueue a message, draining the queue unless a drain is already running"""
        validate_message(message)
        self.message_queue.append(message)

        if self.draining:
            logger.info(f"Drain in progress, queued message ({len(self.message_queue)} waiting)")
            return ActionResult(text=QUEUED_TEXT, should_send_message=False)

        return await self._process_message_queue()

    async def _process_message_queue(self) -> ActionResult:
        self.draining = True
        result = ActionResult(text="", should_send_message=False)

        try:
            while self.message_queue:
                message = self.message_queue.popleft()
                result = await self.process_message_internal(message)
                self.processed_count += 1
        finally:
            self.draining = False
            self.memory_cache.clear()

        return result

    async def process_message_internal(self, message: Message) -> ActionResult:
        try:
            logger.info(f"Processing message: platform={message.platform}, text={message.text[:50]}")

            # Step 1: Resolve the platform client and normalize the message
            client = self.clients.get(message.platform)
            if client is None:
                raise TransformError(message.platform, "Client not initialized")
            transformed = client.transform(message)
            if transformed is not message:
                validate_message(transformed)

            user_id = transformed.user_key

            # Step 2: Check the response cache
            cache_key = self.response_cache.get_cache_key(user_id, transformed.text)
            cached = self.response_cache.get(cache_key)
            if cached is not None:
                return cached

            # Step 3: Run actions
            action_result = await self.action_dispatcher.dispatch(transformed, user_id)
            if action_result:
                self._invalidate(user_id)
                return await self._handle_action_result(action_result, transformed, client)

            # Step 4: Gather context and generate
            history = await self._get_history(user_id)
            long_term = await self._get_long_term_context(user_id)

            response = await self.retry.with_retry(
                lambda: self.response_generator.generate_response(transformed.text, history, long_term),
                LLM_RESOURCE_KEY
            )
            result = ActionResult(text=response, should_send_message=True)

            # Step 5: Save both turns
            await self.memory.store_conversation(user_id, ConversationTurn(role="user", content=transformed.text))
            await self.memory.store_conversation(user_id, ConversationTurn(role="assistant", content=response))
            self._invalidate(user_id)

            # Step 6: Reply, then cache; a failed publish must not answer redeliveries
            await self._send_reply(client, response, transformed)
            self.response_cache.set(cache_key, result)
            return result

        except Exception as e:
            logger.error(f"Error processing message: {str(e)}", exc_info=True)
            raise

    async def _handle_action_result(self, action_result: ActionResult, message: Message,
                                    client: PlatformClient) -> ActionResult:
        if action_result.context:
            response = await self.retry.with_retry(
                lambda: self.response_generator.generate_from_context(action_result.context, action_result.text),
                LLM_RESOURCE_KEY
            )
            await self._send_reply(client, response, message)
            return ActionResult(text=response, should_send_message=True)

        await self._send_reply(client, action_result.text, message, action_result.embeds)
        return action_result

    async def _send_reply(self, client: PlatformClient, text: str, message: Message,
                          embeds: Optional[List[Dict]] = None) -> Any:
        return await self.retry.with_retry(
            lambda: client.send_reply(text, message, embeds),
            f"{client.platform}-api"
        )

    async def _get_history(self, user_id: str) -> List[Dict]:
        cache_key = f"history_{user_id}"
        if cache_key not in self.memory_cache:
            self.memory_cache[cache_key] = await self.memory.get_conversations(user_id)
        return self.memory_cache[cache_key]

    async def _get_long_term_context(self, user_id: str) -> List[Dict]:
        cache_key = f"long_term_{user_id}"
        if cache_key not in self.memory_cache:
            self.memory_cache[cache_key] = await self.memory.get_long_term(user_id)
        return self.memory_cache[cache_key]

    def _invalidate(self, user_id: str) -> None:
        self.memory_cache.pop(f"history_{user_id}", None)
        self.memory_cache.pop(f"long_term_{user_id}", None)
