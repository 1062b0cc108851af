"""Anthropic Messages API provider. System instruction goes in the top-level ``system`` field."""

import logging

from writing_buddy.core.config import settings
from writing_buddy.core.errors import ProviderError
from writing_buddy.services.llm.base import HTTPLLMProvider, Message, conversation_turns

logger = logging.getLogger(__name__)

API_VERSION = "2023-06-01"


class AnthropicProvider(HTTPLLMProvider):
    name = "anthropic"

    def __init__(self, **kwargs):
        kwargs.setdefault("model", settings.anthropic_model)
        kwargs.setdefault("base_url", settings.anthropic_base_url)
        kwargs.setdefault("api_key", settings.anthropic_api_key)
        super().__init__(**kwargs)

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "anthropic-version": API_VERSION,
            "Content-Type": "application/json",
        }

    def build_messages(self, history: list[Message]) -> list[dict]:
        return [{"role": m.role, "content": m.content} for m in conversation_turns(history)]

    async def generate_reply(
        self, system_instruction: str, history: list[Message], max_output_tokens: int
    ) -> str:
        messages = self.build_messages(history)
        logger.info(f"Anthropic call: model={self.model} messages={len(messages)} max_tokens={max_output_tokens}")

        data = await self._post(
            "/messages",
            {
                "model": self.model,
                "system": system_instruction,
                "messages": messages,
                "temperature": self.temperature,
                "max_tokens": max_output_tokens,
            },
        )

        blocks = data.get("content") or []
        text = "".join(b.get("text", "") for b in blocks if b.get("type") == "text")
        if not text or not text.strip():
            raise ProviderError(502, "Anthropic response had no text content")
        return text
