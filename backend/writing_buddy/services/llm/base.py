"""Abstract LLM provider interface. All providers must implement this."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable

import httpx

from writing_buddy.core.config import settings
from writing_buddy.core.errors import ProviderError

logger = logging.getLogger(__name__)

# Enough of an error body to diagnose, not enough to flood the logs
ERROR_BODY_LIMIT = 500


@dataclass
class Message:
    role: str  # "user" | "assistant" | "system"
    content: str


def conversation_turns(history: Iterable[Message]) -> list[Message]:
    """user/assistant turns only, original order kept. For providers with a system slot."""
    return [m for m in history if m.role in ("user", "assistant")]


class BaseLLMProvider(ABC):
    name: str = "base"

    @abstractmethod
    async def generate_reply(
        self, system_instruction: str, history: list[Message], max_output_tokens: int
    ) -> str:
        """Send the instruction plus history and return the reply text.

        Raises ProviderError on any non-success response or network failure.
        Never retries.
        """
        ...


class HTTPLLMProvider(BaseLLMProvider):
    """Shared plumbing for providers reached over a plain JSON REST API."""

    def __init__(
        self,
        model: str,
        base_url: str,
        api_key: str,
        timeout: float | None = None,
        temperature: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds
        self.temperature = temperature if temperature is not None else settings.temperature
        self._transport = transport

    @abstractmethod
    def _headers(self) -> dict[str, str]:
        ...

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(url, headers=self._headers(), json=payload, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.error(f"{self.name} request timed out after {self.timeout}s: {e}")
            raise ProviderError(504, f"timeout after {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.error(f"{self.name} request failed: {e}")
            raise ProviderError(None, str(e)) from e

        if resp.status_code < 200 or resp.status_code >= 300:
            body = resp.text[:ERROR_BODY_LIMIT]
            logger.error(f"{self.name} returned {resp.status_code}: {body}")
            raise ProviderError(resp.status_code, body)

        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(resp.status_code, "response body is not JSON") from e
