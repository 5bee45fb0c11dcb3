from unittest.mock import AsyncMock, patch

import pytest

from docintake.llm.exceptions import LlmNetworkError
from docintake.llm.retry import RetryConfig, retry_async


class TestRetryAsync:
    async def test_returns_first_success(self) -> None:
        func = AsyncMock(return_value="ok")
        assert await retry_async(func, RetryConfig(), (LlmNetworkError,)) == "ok"
        assert func.await_count == 1

    async def test_backs_off_exponentially_up_to_cap(self) -> None:
        func = AsyncMock(side_effect=[LlmNetworkError("a")] * 4 + ["ok"])
        config = RetryConfig(
            max_attempts=5, initial_delay_seconds=3.0, max_delay_seconds=10.0, backoff_multiplier=2.0
        )
        with patch("docintake.llm.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            assert await retry_async(func, config, (LlmNetworkError,)) == "ok"
        assert [c.args[0] for c in sleep.await_args_list] == [3.0, 6.0, 10.0, 10.0]

    async def test_reraises_last_error_when_attempts_run_out(self) -> None:
        func = AsyncMock(side_effect=LlmNetworkError("down"))
        with patch("docintake.llm.retry.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(LlmNetworkError, match="down"):
                await retry_async(func, RetryConfig(max_attempts=2), (LlmNetworkError,))
        assert func.await_count == 2

    async def test_does_not_retry_other_errors(self) -> None:
        func = AsyncMock(side_effect=ValueError("bad"))
        with pytest.raises(ValueError):
            await retry_async(func, RetryConfig(), (LlmNetworkError,))
        assert func.await_count == 1
