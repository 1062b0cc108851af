from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Writing Buddy"
    debug: bool = False

    # Storage
    database_url: str = f"sqlite:///{Path(__file__).resolve().parent.parent.parent / 'writing-buddy.db'}"

    # LLM
    llm_provider: str = "openai"  # openai | gemini | anthropic
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash-lite"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-5-haiku-latest"
    anthropic_base_url: str = "https://api.anthropic.com/v1"
    temperature: float = 0.7
    provider_timeout_seconds: float = 60.0

    # Token budgets
    turn_max_tokens: int = 1000
    finish_max_tokens: int = 1500

    # Identity injected by the upstream auth layer
    owner_header: str = "X-Owner-Id"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "WRITING_BUDDY_",
    }

    def provider_key_configured(self) -> bool:
        keys = {
            "openai": self.openai_api_key,
            "gemini": self.gemini_api_key,
            "anthropic": self.anthropic_api_key,
        }
        return bool(keys.get(self.llm_provider))


settings = Settings()
