from typing import Any

import httpx
import openai

from docintake.llm.client_base import BaseCompletionClient
from docintake.llm.exceptions import LlmEmptyResponseError, LlmNetworkError, LlmRequestError
from docintake.llm.models import CompletionResponse, ImageInput
from docintake.llm.retry import RetryConfig, retry_async
from docintake.processor.models import TokenUsage

TRANSIENT_STATUS_CODES = frozenset({408, 409, 429})


class OpenAIClientAdapter(BaseCompletionClient):
    """Chat completion client built on the OpenAI-compatible async API.

    Connection failures, rate limits and 5xx answers are retried with
    exponential backoff. Other API errors are raised at once as
    LlmRequestError. Each logical call still returns exactly one response.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )
        self._retry_config = retry_config or RetryConfig()

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
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": self._user_content(user_prompt, image)},
        ]

        async def call() -> Any:
            try:
                return await self._client.chat.completions.create(
                    model=model,
                    temperature=temperature,
                    max_completion_tokens=max_tokens,
                    response_format={"type": "json_object"},
                    messages=messages,  # type: ignore[arg-type]
                )
            except (openai.APIConnectionError, httpx.TransportError) as exc:
                raise LlmNetworkError(f"AI provider network error: {exc}") from exc
            except openai.APIStatusError as exc:
                if exc.status_code in TRANSIENT_STATUS_CODES or exc.status_code >= 500:
                    raise LlmNetworkError(f"AI provider API error: {exc}") from exc
                raise LlmRequestError(f"AI provider rejected the request: {exc}") from exc
            except openai.APIError as exc:
                raise LlmRequestError(f"AI provider API error: {exc}") from exc

        response = await retry_async(call, self._retry_config, (LlmNetworkError,))

        if not response.choices:
            raise LlmEmptyResponseError("AI returned no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise LlmEmptyResponseError("AI returned empty response")
        return CompletionResponse(content=content, usage=self._usage(response))

    @staticmethod
    def _user_content(user_prompt: str, image: ImageInput | None) -> Any:
        if image is None:
            return user_prompt
        return [
            {"type": "text", "text": user_prompt},
            {"type": "image_url", "image_url": {"url": image.data_url, "detail": image.detail}},
        ]

    @staticmethod
    def _usage(response: Any) -> TokenUsage:
        usage = getattr(response, "usage", None)
        if usage is None:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
        )
