from abc import ABC, abstractmethod


class BaseGenerationClient(ABC):
    """Contract for provider-specific text generation clients."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return the provider's text response for a single user prompt.

        Raises:
            GenerationError: subclass describing why the call failed.
        """
