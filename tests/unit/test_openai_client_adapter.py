from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from docintake.llm.exceptions import LlmEmptyResponseError, LlmNetworkError, LlmRequestError
from docintake.llm.models import ImageInput
from docintake.llm.openai_client_adapter import OpenAIClientAdapter
from docintake.llm.retry import RetryConfig

NO_WAIT = RetryConfig(max_attempts=3, initial_delay_seconds=0.0)


def _make_mock_response(
    content: str | None,
    prompt_tokens: int | None = 12,
    completion_tokens: int | None = 5,
) -> MagicMock:
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    response.usage.prompt_tokens = prompt_tokens
    response.usage.completion_tokens = completion_tokens
    return response


def _make_adapter(mock_client: MagicMock, retry_config: RetryConfig = NO_WAIT) -> OpenAIClientAdapter:
    with patch(
        "docintake.llm.openai_client_adapter.openai.AsyncOpenAI",
        return_value=mock_client,
    ):
        return OpenAIClientAdapter(api_key="k", timeout_seconds=30, retry_config=retry_config)


def _mock_client(**create_kwargs: object) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(**create_kwargs)
    return client


def _status_error(error_cls: type[openai.APIStatusError], status_code: int) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    return error_cls(f"HTTP {status_code}", response=response, body=None)


async def _complete(adapter: OpenAIClientAdapter, image: ImageInput | None = None):  # type: ignore[no-untyped-def]
    return await adapter.create_chat_completion(
        model="m",
        temperature=0.3,
        max_tokens=2000,
        system_prompt="system",
        user_prompt="user",
        image=image,
    )


class TestOpenAIClientAdapter:
    def test_builds_client_without_sdk_retries(self) -> None:
        with patch("docintake.llm.openai_client_adapter.openai.AsyncOpenAI") as mock_cls:
            OpenAIClientAdapter(api_key="k", timeout_seconds=42, base_url="http://x/v1")
        mock_cls.assert_called_once_with(
            api_key="k", timeout=42, base_url="http://x/v1", max_retries=0
        )

    async def test_returns_content_and_usage(self) -> None:
        client = _mock_client(return_value=_make_mock_response('{"ok": true}'))
        response = await _complete(_make_adapter(client))
        assert response.content == '{"ok": true}'
        assert response.usage.prompt_tokens == 12
        assert response.usage.completion_tokens == 5

    async def test_requests_json_object_with_token_cap(self) -> None:
        client = _mock_client(return_value=_make_mock_response("{}"))
        await _complete(_make_adapter(client))
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["max_completion_tokens"] == 2000
        assert kwargs["temperature"] == 0.3
        assert kwargs["messages"][0] == {"role": "system", "content": "system"}
        assert kwargs["messages"][1] == {"role": "user", "content": "user"}

    async def test_sends_image_as_data_url(self) -> None:
        client = _mock_client(return_value=_make_mock_response("{}"))
        image = ImageInput(base64_data="QUJD", mime_type="image/jpeg")
        await _complete(_make_adapter(client), image=image)
        content = client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        assert content[0] == {"type": "text", "text": "user"}
        assert content[1] == {
            "type": "image_url",
            "image_url": {"url": "data:image/jpeg;base64,QUJD", "detail": "high"},
        }

    async def test_raises_error_for_empty_content(self) -> None:
        client = _mock_client(return_value=_make_mock_response(None))
        with pytest.raises(LlmEmptyResponseError, match="empty response"):
            await _complete(_make_adapter(client))

    async def test_raises_error_for_no_choices(self) -> None:
        response = _make_mock_response("{}")
        response.choices = []
        client = _mock_client(return_value=response)
        with pytest.raises(LlmEmptyResponseError):
            await _complete(_make_adapter(client))

    async def test_retries_connection_failure_then_succeeds(self) -> None:
        client = _mock_client(
            side_effect=[
                openai.APIConnectionError(request=MagicMock()),
                _make_mock_response('{"ok": true}'),
            ]
        )
        response = await _complete(_make_adapter(client))
        assert response.content == '{"ok": true}'
        assert client.chat.completions.create.await_count == 2

    async def test_raises_network_error_after_exhausting_attempts(self) -> None:
        client = _mock_client(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(LlmNetworkError, match="network error"):
            await _complete(_make_adapter(client))
        assert client.chat.completions.create.await_count == 3

    async def test_retries_server_error_then_succeeds(self) -> None:
        client = _mock_client(
            side_effect=[
                _status_error(openai.InternalServerError, 503),
                _make_mock_response("{}"),
            ]
        )
        await _complete(_make_adapter(client))
        assert client.chat.completions.create.await_count == 2

    async def test_retries_rate_limit(self) -> None:
        client = _mock_client(side_effect=_status_error(openai.RateLimitError, 429))
        with pytest.raises(LlmNetworkError):
            await _complete(_make_adapter(client))
        assert client.chat.completions.create.await_count == 3

    @pytest.mark.parametrize(
        ("error_cls", "status_code"),
        [
            (openai.AuthenticationError, 401),
            (openai.BadRequestError, 400),
            (openai.NotFoundError, 404),
        ],
    )
    async def test_rejected_request_is_not_retried(
        self, error_cls: type[openai.APIStatusError], status_code: int
    ) -> None:
        client = _mock_client(side_effect=_status_error(error_cls, status_code))
        with pytest.raises(LlmRequestError, match="rejected"):
            await _complete(_make_adapter(client))
        assert client.chat.completions.create.await_count == 1

    async def test_does_not_retry_empty_response(self) -> None:
        client = _mock_client(return_value=_make_mock_response(""))
        with pytest.raises(LlmEmptyResponseError):
            await _complete(_make_adapter(client))
        assert client.chat.completions.create.await_count == 1

    async def test_missing_usage_yields_unknown_tokens(self) -> None:
        response = _make_mock_response("{}")
        response.usage = None
        client = _mock_client(return_value=response)
        result = await _complete(_make_adapter(client))
        assert result.usage.prompt_tokens is None
        assert result.usage.completion_tokens is None
