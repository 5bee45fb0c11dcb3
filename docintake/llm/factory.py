from typing import ClassVar

from docintake.config.settings import Settings
from docintake.llm.client_base import BaseCompletionClient
from docintake.llm.example_client_adapter import ExampleClientAdapter
from docintake.llm.openai_client_adapter import OpenAIClientAdapter
from docintake.llm.retry import RetryConfig


class CompletionClientFactory:
    """Creates the configured chat completion client."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseCompletionClient:
        """Create a completion client from application settings."""
        provider = settings.llm_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.llm_api_key,
            timeout_seconds=settings.llm_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
            retry_config=RetryConfig(
                max_attempts=settings.llm_max_attempts,
                initial_delay_seconds=settings.llm_retry_initial_delay_seconds,
            ),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return settings.llm_base_url.strip() or None
        if provider == "openai_compatible":
            url = settings.llm_base_url.strip()
            if not url:
                raise ValueError(
                    "llm_base_url is required for llm_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return settings.llm_base_url.strip() or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown LLM provider '{provider}'. Choose from: {supported}")
