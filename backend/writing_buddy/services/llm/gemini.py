"""Google Gemini LLM provider."""

import logging

import httpx
from google import genai
from google.genai import errors, types

from writing_buddy.core.config import settings
from writing_buddy.core.errors import ProviderError
from writing_buddy.services.llm.base import ERROR_BODY_LIMIT, BaseLLMProvider, Message, conversation_turns

logger = logging.getLogger(__name__)

# Gemini calls the assistant side of the conversation "model"
ROLE_LABELS = {"user": "user", "assistant": "model"}


class GeminiProvider(BaseLLMProvider):
    name = "gemini"

    def __init__(self, client: genai.Client | None = None, model: str | None = None):
        self.client = client or genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(timeout=int(settings.provider_timeout_seconds * 1000)),
        )
        self.model = model or settings.gemini_model

    def build_contents(self, history: list[Message]) -> list[dict]:
        return [
            {"role": ROLE_LABELS[m.role], "parts": [{"text": m.content}]}
            for m in conversation_turns(history)
        ]

    async def generate_reply(
        self, system_instruction: str, history: list[Message], max_output_tokens: int
    ) -> str:
        contents = self.build_contents(history)
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=max_output_tokens,
            temperature=settings.temperature,
        )
        logger.info(f"Gemini call: model={self.model} contents={len(contents)} max_tokens={max_output_tokens}")

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except errors.APIError as e:
            message = str(e.message or e)[:ERROR_BODY_LIMIT]
            logger.error(f"Gemini returned {e.code}: {message}")
            raise ProviderError(e.code, message) from e
        except httpx.TimeoutException as e:
            logger.error(f"Gemini request timed out: {e}")
            raise ProviderError(504, "timeout") from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise ProviderError(None, str(e)) from e

        usage = response.usage_metadata
        if usage:
            logger.debug(
                f"Gemini usage: prompt={usage.prompt_token_count} "
                f"response={usage.candidates_token_count} total={usage.total_token_count}"
            )

        if not response.text or not response.text.strip():
            raise ProviderError(502, "Gemini response had no text")
        return response.text
