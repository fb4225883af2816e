from typing import Any, ClassVar

from docvault.config.settings import Settings
from docvault.generation.client_base import BaseGenerationClient
from docvault.generation.example_client_adapter import ExampleClientAdapter
from docvault.generation.exceptions import ProviderConfigError
from docvault.generation.openai_client_adapter import OpenAIClientAdapter


class GenerationClientFactory:
    """Creates the single generation client used by every pipeline run."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "anthropic": "https://api.anthropic.com/v1/",
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    # Providers that run without an API key.
    KEYLESS_PROVIDERS: ClassVar[frozenset[str]] = frozenset({"ollama", "openai_compatible"})

    @classmethod
    def supported_providers(cls) -> list[str]:
        return ["example", "openai", "openai_compatible", *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS)]

    @classmethod
    def create(cls, settings: Settings) -> BaseGenerationClient:
        """Create the configured generation client from application settings.

        Raises:
            ProviderConfigError: for unknown providers or missing credentials.
        """
        provider = settings.generation_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        base_url = cls._resolve_base_url(provider, settings)
        api_key = cls._provider_setting(provider, "api_key", settings)
        if not api_key and provider not in cls.KEYLESS_PROVIDERS:
            raise ProviderConfigError(
                f"generation_{provider}_api_key is required for generation_provider={provider}"
            )
        return OpenAIClientAdapter(
            api_key=api_key or "unused",
            model=cls._provider_setting(provider, "model_name", settings),
            timeout_seconds=cls._provider_setting(provider, "timeout_seconds", settings) or 120,
            temperature=settings.generation_temperature,
            base_url=base_url,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.generation_openai_compatible_base_url or "").strip()
            if not url:
                raise ProviderConfigError(
                    "generation_openai_compatible_base_url is required for "
                    "generation_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        raise ProviderConfigError(
            f"Unknown generation provider '{provider}'. Choose from: {cls.supported_providers()}"
        )

    @staticmethod
    def _provider_setting(provider: str, name: str, settings: Settings) -> Any:
        return getattr(settings, f"generation_{provider}_{name}")
