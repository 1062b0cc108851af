"""OpenAI Chat Completions provider. Flat role list with the system turn inline."""

import logging

from writing_buddy.core.config import settings
from writing_buddy.core.errors import ProviderError
from writing_buddy.services.llm.base import HTTPLLMProvider, Message

logger = logging.getLogger(__name__)


class OpenAIProvider(HTTPLLMProvider):
    name = "openai"

    def __init__(self, **kwargs):
        kwargs.setdefault("model", settings.openai_model)
        kwargs.setdefault("base_url", settings.openai_base_url)
        kwargs.setdefault("api_key", settings.openai_api_key)
        super().__init__(**kwargs)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def build_messages(self, system_instruction: str, history: list[Message]) -> list[dict]:
        return [{"role": "system", "content": system_instruction}] + [
            {"role": m.role, "content": m.content} for m in history
        ]

    async def generate_reply(
        self, system_instruction: str, history: list[Message], max_output_tokens: int
    ) -> str:
        messages = self.build_messages(system_instruction, history)
        logger.info(f"OpenAI call: model={self.model} messages={len(messages)} max_tokens={max_output_tokens}")

        data = await self._post(
            "/chat/completions",
            {
                "model": self.model,
                "messages": messages,
                "temperature": self.temperature,
                "max_tokens": max_output_tokens,
            },
        )

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not content or not content.strip():
            raise ProviderError(502, "OpenAI response had no message content")
        return content
