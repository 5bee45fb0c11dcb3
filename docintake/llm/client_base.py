from abc import ABC, abstractmethod

from docintake.llm.models import CompletionResponse, ImageInput


class BaseCompletionClient(ABC):
    """Contract for provider-specific chat completion clients."""

    @abstractmethod
    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
        image: ImageInput | None = None,
    ) -> CompletionResponse:
        """Return the provider's JSON answer as text, with token usage.

        Raises:
            LlmEmptyResponseError: if the provider returned no content.
            LlmNetworkError: on connection failures, timeouts, rate limits or 5xx answers.
            LlmRequestError: when the provider rejects the request.
        """
