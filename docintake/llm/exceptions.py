class LlmError(Exception):
    """Raised when a language-model call fails."""


class LlmEmptyResponseError(LlmError):
    """Raised when the provider answers without any content."""


class LlmNetworkError(LlmError):
    """Raised when the provider call fails due to network/infrastructure issues."""


class LlmRequestError(LlmError):
    """Raised when the provider rejects the request itself (auth, bad input, unknown model)."""
