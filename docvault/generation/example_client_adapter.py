"""Example generation client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseGenerationClient and register the provider in GenerationClientFactory.
"""

from docvault.generation.client_base import BaseGenerationClient


class ExampleClientAdapter(BaseGenerationClient):
    """Offline adapter that answers every prompt with a fixed, deterministic text.

    No network calls. Useful for local development and tests.
    """

    RESPONSE_TEMPLATE = "Example response for a prompt of {length} characters."

    def generate(self, prompt: str) -> str:
        return self.RESPONSE_TEMPLATE.format(length=len(prompt))
