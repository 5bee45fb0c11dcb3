"""Language-model structuring of plain text with one corrective retry."""

import json
from typing import Any

from docintake.llm.client_base import BaseCompletionClient
from docintake.llm.exceptions import LlmEmptyResponseError
from docintake.llm.models import CompletionResponse
from docintake.llm.prompt_builder import build_correction_prompt, build_system_prompt
from docintake.llm.prompt_loader import CORRECTION_PROMPT, SYSTEM_PROMPT, load_prompt_template
from docintake.logging.logger import Log
from docintake.processor.exceptions import NoModelResponseError, SchemaValidationError
from docintake.processor.models import ExtractedRecord, TokenUsage
from docintake.schemas.models import FieldError, TargetSchema
from docintake.schemas.validator import format_errors, strip_nulls, validate, validate_strict


def parse_json_response(raw: str) -> Any:
    """Parse a model answer, tolerating markdown code fences.

    Raises:
        ValueError: if the content is not JSON.
    """
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON response: {exc}") from exc


class SchemaValidatingExtractor:
    """Prompts the model for a schema-conformant record and validates it.

    Round 1 is validated leniently; if it fails, the validation errors are fed
    back in a corrective prompt. The last round (round 2 by default) is
    validated strictly and its failure is raised to the caller. The model is
    never called more than ``1 + max_validation_retries`` times.
    """

    def __init__(
        self,
        *,
        client: BaseCompletionClient,
        model: str,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        max_validation_retries: int = 1,
        system_template: str | None = None,
        correction_template: str | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._rounds = 1 + max(0, max_validation_retries)
        self._system_template = system_template or load_prompt_template(SYSTEM_PROMPT)
        self._correction_template = correction_template or load_prompt_template(
            CORRECTION_PROMPT
        )

    @property
    def model(self) -> str:
        return self._model

    async def extract_and_validate(self, text: str, schema: TargetSchema) -> ExtractedRecord:
        """Structure *text* according to *schema*.

        Raises:
            NoModelResponseError: if the final round got no content.
            SchemaValidationError: if the final round's output is still invalid.
            LlmNetworkError: if the provider is unreachable.
        """
        system_prompt = build_system_prompt(schema, self._system_template)
        Log.debug(f"{schema.name} system prompt:\n{system_prompt}")
        prompt = system_prompt
        usage = TokenUsage()

        for round_number in range(1, self._rounds + 1):
            final = round_number == self._rounds
            response = await self._call(prompt, text, schema, round_number)
            if response is None:
                if final:
                    break
                errors: tuple[FieldError, ...] = (FieldError("", "empty response"),)
            else:
                usage = usage + response.usage
                data, errors = self._check(response.content, schema, strict=final)
                if data is not None:
                    Log.info(
                        f"{schema.name} structured in {round_number} round(s): "
                        f"{len(data)} field(s)"
                    )
                    return ExtractedRecord(
                        data=data,
                        usage=usage,
                        entity_type=schema.entity_type,
                        source="text",
                        model=self._model,
                    )

            Log.warning(
                f"{schema.name} validation failed: {format_errors(errors)}. Retrying..."
            )
            prompt = build_correction_prompt(
                system_prompt, errors, schema, self._correction_template
            )

        raise NoModelResponseError(f"No response from language model for {schema.name}")

    async def _call(
        self,
        prompt: str,
        text: str,
        schema: TargetSchema,
        round_number: int,
    ) -> CompletionResponse | None:
        try:
            response = await self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                system_prompt=prompt,
                user_prompt=text,
            )
        except LlmEmptyResponseError as exc:
            Log.warning(f"{schema.name} round {round_number}: {exc}")
            return None
        Log.debug(f"{schema.name} round {round_number} raw response:\n{response.content}")
        return response

    @staticmethod
    def _check(
        content: str,
        schema: TargetSchema,
        *,
        strict: bool,
    ) -> tuple[dict[str, Any] | None, tuple[FieldError, ...]]:
        try:
            parsed = parse_json_response(content)
        except ValueError as exc:
            if strict:
                raise SchemaValidationError(
                    f"{schema.name} validation failed: {exc}",
                    errors=(FieldError("", str(exc)),),
                ) from exc
            return None, (FieldError("", str(exc)),)

        normalized = strip_nulls(parsed)
        if strict:
            return validate_strict(normalized, schema), ()
        outcome = validate(normalized, schema)
        return outcome.data, outcome.errors
