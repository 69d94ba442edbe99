from typing import ClassVar

from ledgerlens.config.settings import Settings
from ledgerlens.vision.client_base import BaseVisionClient
from ledgerlens.vision.example_client_adapter import ExampleClientAdapter
from ledgerlens.vision.openai_client_adapter import OpenAIClientAdapter


class VisionClientFactory:
    """Creates the vision client for the configured provider."""

    DEFAULT_BASE_URLS: ClassVar[dict[str, str]] = {
        "ollama": "http://localhost:11434/v1",
        "openrouter": "https://openrouter.ai/api/v1",
        "together": "https://api.together.xyz/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseVisionClient:
        provider = settings.vision_provider.strip().lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            model=settings.vision_model_name,
            timeout_seconds=settings.vision_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        configured = settings.vision_base_url.strip()
        if provider == "openai":
            return configured or None
        if provider == "openai_compatible":
            if not configured:
                raise ValueError(
                    "vision_base_url is required for vision_provider=openai_compatible"
                )
            return configured
        default_base_url = cls.DEFAULT_BASE_URLS.get(provider)
        if default_base_url is not None:
            return configured or default_base_url
        supported = ["example", "openai", "openai_compatible", *sorted(cls.DEFAULT_BASE_URLS)]
        raise ValueError(f"Unknown vision provider '{provider}'. Choose from: {supported}")

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        # Ollama ignores the key but the OpenAI client refuses an empty one.
        if provider == "ollama" and not settings.vision_api_key:
            return "ollama"
        return settings.vision_api_key
