import logging
from typing import Dict, List, Optional

import httpx
from openai import AsyncOpenAI, APIStatusError

from models import AgentConfig, Character
from core.exceptions import PipelineError, UpstreamError
from core.memory_manager import format_memories_for_context

logger = logging.getLogger(__name__)


class LLMClient:
    """Chat completion client for an OpenAI-compatible endpoint (OpenRouter by default)"""

    def __init__(self, config: AgentConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.model = config.llm_model
        self.http_client = http_client
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        """SDK client, created on first use so wiring works before an API key is set"""
        if self._client is None:
            # Retries are owned by RetryExecutor, not the SDK
            self._client = AsyncOpenAI(
                api_key=self.config.openrouter_api_key,
                base_url=self.config.openrouter_base_url,
                max_retries=0,
                default_headers={"X-Title": self.config.app_title},
                http_client=self.http_client
            )
        return self._client

    async def complete(self, messages: List[Dict]) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages
            )
        except APIStatusError as e:
            raise UpstreamError(f"LLM API error: {e.status_code}", status_code=e.status_code) from e

        if not response.choices or not response.choices[0].message.content:
            raise PipelineError("LLM API returned an empty completion")
        return response.choices[0].message.content


class ResponseGenerator:
    def __init__(self, llm_client, character: Character):
        self.llm_client = llm_client
        self.character = character

    def build_messages(self, text: str, history: List[Dict], long_term: List[Dict]) -> List[Dict]:
        """Assemble the persona prompt, memory context and the user's text"""
        messages = [{"role": "system", "content": self.character.get_system_prompt()}]

        context = format_memories_for_context(history, long_term)
        if context:
            messages.append({"role": "system", "content": context})

        messages.append({"role": "user", "content": text})
        return messages

    async def generate_response(self, text: str, history: List[Dict], long_term: List[Dict]) -> str:
        """Generate a reply with the full conversation context"""
        messages = self.build_messages(text, history, long_term)
        logger.debug(f"Generating response with {len(messages)} prompt messages")
        return await self.llm_client.complete(messages)

    async def generate_from_context(self, context: str, text: str) -> str:
        """Generate a reply from context supplied by an action"""
        return await self.llm_client.complete([
            {"role": "system", "content": context},
            {"role": "user", "content": text}
        ])
