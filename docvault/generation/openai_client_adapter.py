import httpx
import openai

from docvault.generation.client_base import BaseGenerationClient
from docvault.generation.exceptions import (
    GenerationError,
    GenerationNetworkError,
    GenerationRateLimitedError,
    GenerationTimeoutError,
    InvalidResponseError,
    ProviderConfigError,
)


class OpenAIClientAdapter(BaseGenerationClient):
    """Generation client built on the OpenAI-compatible chat completions API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        temperature: float = 0.7,
        base_url: str | None = None,
    ) -> None:
        if not model:
            raise ProviderConfigError("A model name is required for the generation provider")
        self._model = model
        self._temperature = temperature
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def generate(self, prompt: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=self._temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise GenerationTimeoutError(f"AI provider timed out: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise GenerationNetworkError(f"AI provider network error: {exc}") from exc
        except openai.RateLimitError as exc:
            raise GenerationRateLimitedError(f"AI provider rate limited: {exc}") from exc
        except (
            openai.AuthenticationError,
            openai.PermissionDeniedError,
            openai.NotFoundError,
        ) as exc:
            raise ProviderConfigError(f"AI provider rejected configuration: {exc}") from exc
        except openai.APIError as exc:
            raise GenerationError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise InvalidResponseError("AI returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise InvalidResponseError("AI returned empty response")
        return content
