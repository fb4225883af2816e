class GenerationError(Exception):
    """Raised when the text generation backend cannot produce a response."""


class GenerationTimeoutError(GenerationError):
    """Raised when a generation call exceeds its own timeout."""


class GenerationRateLimitedError(GenerationError):
    """Raised when the provider rejects a call due to rate limiting."""


class InvalidResponseError(GenerationError):
    """Raised when the provider returns an empty or unusable response."""


class ProviderConfigError(GenerationError):
    """Raised when the provider is misconfigured (credentials, model, base URL)."""


class GenerationNetworkError(GenerationError):
    """Raised when the provider cannot be reached."""
