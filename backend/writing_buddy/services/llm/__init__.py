"""LLM provider factory."""

from writing_buddy.core.config import settings
from writing_buddy.services.llm.base import BaseLLMProvider, Message


def get_llm_provider(name: str | None = None) -> BaseLLMProvider:
    """Factory function that returns the configured LLM provider."""
    name = name or settings.llm_provider
    if name == "openai":
        from writing_buddy.services.llm.openai import OpenAIProvider
        return OpenAIProvider()
    elif name == "gemini":
        from writing_buddy.services.llm.gemini import GeminiProvider
        return GeminiProvider()
    elif name == "anthropic":
        from writing_buddy.services.llm.anthropic import AnthropicProvider
        return AnthropicProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {name}")


__all__ = ["BaseLLMProvider", "Message", "get_llm_provider"]
