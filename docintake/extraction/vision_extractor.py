"""Last-resort structuring of a single image with a multimodal model."""

import base64
import time

from docintake.extraction.schema_extractor import parse_json_response
from docintake.llm.client_base import BaseCompletionClient
from docintake.llm.exceptions import LlmEmptyResponseError
from docintake.llm.models import ImageInput
from docintake.llm.prompt_builder import build_system_prompt
from docintake.llm.prompt_loader import SYSTEM_PROMPT, VISION_INSTRUCTION, load_prompt_template
from docintake.logging.logger import Log
from docintake.processor.exceptions import NoModelResponseError, SchemaValidationError
from docintake.processor.models import ExtractedRecord, RasterPage, TokenUsage
from docintake.schemas.models import FieldError, TargetSchema
from docintake.schemas.validator import format_errors, restrict_to_schema, strip_nulls, validate
from docintake.usage.base import BaseUsageLogger
from docintake.usage.models import CostRates, UsageEvent


class VisionExtractor:
    """Sends one page image straight to the vision model.

    Vision calls are not retried on validation failure: the null-stripped
    object, limited to declared fields, is returned with ``best_effort=True``.
    One usage event is recorded per call.
    """

    def __init__(
        self,
        *,
        client: BaseCompletionClient,
        model: str,
        usage_logger: BaseUsageLogger,
        cost_rates: CostRates | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        system_template: str | None = None,
        instruction: str | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._usage_logger = usage_logger
        self._cost_rates = cost_rates or CostRates()
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._system_template = system_template or load_prompt_template(SYSTEM_PROMPT)
        self._instruction = (instruction or load_prompt_template(VISION_INSTRUCTION)).strip()

    @property
    def model(self) -> str:
        return self._model

    async def extract_structured(
        self,
        image: RasterPage | bytes,
        mime_type: str,
        schema: TargetSchema,
    ) -> ExtractedRecord:
        """Extract a record from one image.

        Raises:
            NoModelResponseError: if the model returned no content.
            SchemaValidationError: if the content is not a JSON object.
            LlmNetworkError: if the provider is unreachable.
        """
        image_bytes = image.image_bytes if isinstance(image, RasterPage) else image
        encoded = base64.b64encode(image_bytes).decode("ascii")
        started = time.monotonic()
        usage = TokenUsage()
        try:
            response = await self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                system_prompt=build_system_prompt(schema, self._system_template),
                user_prompt=self._instruction,
                image=ImageInput(base64_data=encoded, mime_type=mime_type),
            )
            usage = response.usage
            record = self._build_record(response.content, schema, usage)
        except LlmEmptyResponseError as exc:
            await self._record(schema, len(encoded), started, usage, error=str(exc))
            raise NoModelResponseError(
                f"No response from vision model for {schema.name}"
            ) from exc
        except Exception as exc:
            await self._record(schema, len(encoded), started, usage, error=str(exc))
            raise

        await self._record(schema, len(encoded), started, usage)
        return record

    async def record_timeout(
        self, image: RasterPage | bytes, schema: TargetSchema, started: float
    ) -> None:
        """Record the usage event of a call cancelled by the caller's timeout."""
        image_bytes = image.image_bytes if isinstance(image, RasterPage) else image
        encoded_size = 4 * ((len(image_bytes) + 2) // 3)
        await self._record(schema, encoded_size, started, TokenUsage(), error="vision timed out")

    def _build_record(
        self, content: str, schema: TargetSchema, usage: TokenUsage
    ) -> ExtractedRecord:
        try:
            parsed = parse_json_response(content)
        except ValueError as exc:
            raise SchemaValidationError(
                f"{schema.name} vision output is not JSON: {exc}",
                errors=(FieldError("", str(exc)),),
            ) from exc
        if not isinstance(parsed, dict):
            raise SchemaValidationError(
                f"{schema.name} vision output must be a JSON object",
                errors=(FieldError("", "Expected object"),),
            )

        normalized = strip_nulls(parsed)
        outcome = validate(normalized, schema)
        if outcome.valid and outcome.data is not None:
            data, best_effort = outcome.data, False
        else:
            Log.warning(
                f"{schema.name} vision validation failed: {format_errors(outcome.errors)}. "
                "Returning best-effort data"
            )
            data, best_effort = restrict_to_schema(normalized, schema), True
        return ExtractedRecord(
            data=data,
            usage=usage,
            entity_type=schema.entity_type,
            source="vision",
            model=self._model,
            best_effort=best_effort,
        )

    async def _record(
        self,
        schema: TargetSchema,
        input_size: int,
        started: float,
        usage: TokenUsage,
        error: str | None = None,
    ) -> None:
        await self._usage_logger.record(
            UsageEvent(
                entity_type=schema.entity_type,
                input_type="vision",
                input_size_chars=input_size,
                model=self._model,
                status="error" if error else "success",
                duration_ms=int((time.monotonic() - started) * 1000),
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                cost_estimate=self._cost_rates.estimate(usage),
                error_message=error,
            )
        )
