"""Example completion client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseCompletionClient and register the provider in CompletionClientFactory.
"""

import json
from collections import deque
from collections.abc import Iterable
from typing import ClassVar

from docintake.llm.client_base import BaseCompletionClient
from docintake.llm.exceptions import LlmEmptyResponseError
from docintake.llm.models import CompletionResponse, ImageInput
from docintake.processor.models import TokenUsage


class ExampleClientAdapter(BaseCompletionClient):
    """Adapter that answers from a script instead of the network.

    Without a script every call returns an empty JSON object, which is a
    valid record for every bundled schema. With a script, each call pops the
    next response; ``""`` simulates an empty provider answer. Every request
    is kept in ``calls`` for inspection.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {}

    def __init__(self, responses: Iterable[str] | None = None) -> None:
        self._responses: deque[str] = deque(responses or [])
        self.calls: list[dict[str, object]] = []

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
        self.calls.append(
            {
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "image": image,
            }
        )
        content = self._responses.popleft() if self._responses else json.dumps(self.DEFAULT_RESPONSE)
        if not content:
            raise LlmEmptyResponseError("AI returned empty response")
        return CompletionResponse(
            content=content,
            usage=TokenUsage(prompt_tokens=len(system_prompt) // 4, completion_tokens=len(content) // 4),
        )
