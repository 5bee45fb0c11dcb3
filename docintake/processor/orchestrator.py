"""Fallback cascade: native text -> OCR -> vision, then structuring."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TypeVar

from docintake.extraction.schema_extractor import SchemaValidatingExtractor
from docintake.extraction.vision_extractor import VisionExtractor
from docintake.llm.exceptions import LlmError
from docintake.logging.logger import Log
from docintake.ocr.engine import OcrEngine
from docintake.processor.exceptions import (
    ErrorKind,
    ExtractionError,
    NoModelResponseError,
    UnprocessableDocumentError,
)
from docintake.processor.models import (
    AttemptStatus,
    DocumentInput,
    ExtractedRecord,
    ExtractionAttempt,
    MimeType,
    RasterPage,
    Stage,
    StageResult,
)
from docintake.raster.base import BaseRasterizer
from docintake.schemas.models import TargetSchema
from docintake.text.extractor import TextExtractor
from docintake.text.quality import is_meaningful
from docintake.usage.base import BaseUsageLogger
from docintake.usage.models import CostRates, UsageEvent

T = TypeVar("T")


class CascadeState(str, Enum):
    NATIVE_TEXT = "native_text"
    QUALITY_CHECK = "quality_check"
    RASTERIZE = "rasterize"
    OCR = "ocr"
    QUALITY_CHECK_OCR = "quality_check_ocr"
    STRUCTURE_TEXT = "structure_text"
    VISION = "vision"
    FAILED = "failed"


TERMINAL_STATES = frozenset(
    {CascadeState.STRUCTURE_TEXT, CascadeState.VISION, CascadeState.FAILED}
)


@dataclass(slots=True)
class CascadeContext:
    """Per-document state threaded through the cascade."""

    document: DocumentInput
    schema: TargetSchema
    text: str = ""
    text_source: str = ""
    pages: list[RasterPage] = field(default_factory=list)
    attempts: list[ExtractionAttempt] = field(default_factory=list)


@dataclass(frozen=True)
class CascadeLimits:
    max_ocr_pages: int = 5
    raster_scale: float = 2.0
    ocr_languages: str = "fra+eng"
    stage_timeout_seconds: float | None = 60.0


def initial_state(context: CascadeContext) -> CascadeState:
    if context.document.mime_type.is_image:
        return CascadeState.OCR
    return CascadeState.NATIVE_TEXT


def next_state(state: CascadeState, context: CascadeContext) -> CascadeState:
    """Pure transition table over the outcome recorded in *context*."""
    if state is CascadeState.NATIVE_TEXT:
        return CascadeState.QUALITY_CHECK
    if state is CascadeState.QUALITY_CHECK:
        if is_meaningful(context.text):
            return CascadeState.STRUCTURE_TEXT
        if context.document.mime_type is MimeType.PDF:
            return CascadeState.RASTERIZE
        return CascadeState.OCR if context.pages else CascadeState.FAILED
    if state is CascadeState.RASTERIZE:
        return CascadeState.OCR
    if state is CascadeState.OCR:
        return CascadeState.QUALITY_CHECK_OCR
    if state is CascadeState.QUALITY_CHECK_OCR:
        if is_meaningful(context.text):
            return CascadeState.STRUCTURE_TEXT
        return CascadeState.VISION if context.pages else CascadeState.FAILED
    raise ValueError(f"No transition out of terminal state {state.value}")


class ExtractionOrchestrator:
    """Runs the extraction cascade for one document at a time.

    Stage failures (parser errors, empty rasterization, OCR errors, timeouts)
    are converted into StageResult failures and only advance the cascade.
    Exhausting every strategy raises UnprocessableDocumentError. Errors from
    the final structuring call are terminal and propagate.
    """

    def __init__(
        self,
        *,
        text_extractor: TextExtractor,
        rasterizer: BaseRasterizer,
        ocr_engine: OcrEngine,
        schema_extractor: SchemaValidatingExtractor,
        vision_extractor: VisionExtractor,
        usage_logger: BaseUsageLogger,
        limits: CascadeLimits | None = None,
        cost_rates: CostRates | None = None,
    ) -> None:
        self._text_extractor = text_extractor
        self._rasterizer = rasterizer
        self._ocr_engine = ocr_engine
        self._schema_extractor = schema_extractor
        self._vision_extractor = vision_extractor
        self._usage_logger = usage_logger
        self._limits = limits or CascadeLimits()
        self._cost_rates = cost_rates or CostRates()

    async def run(self, document: DocumentInput, schema: TargetSchema) -> ExtractedRecord:
        context = CascadeContext(document=document, schema=schema)
        if document.mime_type.is_image:
            context.pages = [
                RasterPage(index=0, image_bytes=document.data, mime_type=document.mime_type.value)
            ]

        state = initial_state(context)
        Log.info(
            f"Extracting {schema.name} from {document.mime_type.input_type} "
            f"({document.size_bytes} bytes)"
        )
        while state not in TERMINAL_STATES:
            await self._enter(state, context)
            state = next_state(state, context)
            Log.debug(f"Cascade -> {state.value}")

        if state is CascadeState.STRUCTURE_TEXT:
            return await self._structure_text(
                schema, context.text, context.text_source, context.attempts
            )
        if state is CascadeState.VISION:
            return await self._structure_vision(context)
        return await self._fail(context)

    async def run_text(self, text: str, schema: TargetSchema) -> ExtractedRecord:
        """Structure text the caller already has, skipping the cascade."""
        return await self._structure_text(schema, text, "text", [])

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _enter(self, state: CascadeState, context: CascadeContext) -> None:
        if state is CascadeState.NATIVE_TEXT:
            result = await self._run_stage(
                Stage.NATIVE_TEXT,
                context,
                lambda: self._text_extractor.extract(
                    context.document.data, context.document.mime_type
                ),
            )
            if result.ok and result.value is not None:
                context.text = result.value
                context.text_source = context.document.mime_type.input_type
        elif state is CascadeState.RASTERIZE:
            context.pages = await self._rasterize(context)
        elif state is CascadeState.OCR:
            result = await self._run_stage(
                Stage.OCR,
                context,
                lambda: self._ocr(context.pages),
                timeout=self._ocr_budget(len(context.pages)),
            )
            if result.ok and result.value:
                context.text = result.value
                context.text_source = context.document.mime_type.input_type

    async def _rasterize(self, context: CascadeContext) -> list[RasterPage]:
        try:
            pages = await asyncio.wait_for(
                asyncio.to_thread(
                    self._rasterizer.to_images,
                    context.document.data,
                    self._limits.raster_scale,
                    self._limits.max_ocr_pages,
                ),
                timeout=self._limits.stage_timeout_seconds,
            )
        except TimeoutError:
            Log.warning("Rasterization timed out")
            return []
        except Exception:
            Log.exception("Rasterization failed")
            return []
        # The cap also holds for rasterizers that ignore max_pages.
        return list(pages[: self._limits.max_ocr_pages])

    def _ocr_budget(self, page_count: int) -> float | None:
        """Each page gets the full stage timeout, so slow pages never void earlier ones."""
        if self._limits.stage_timeout_seconds is None:
            return None
        return self._limits.stage_timeout_seconds * max(1, page_count)

    async def _ocr(self, pages: list[RasterPage]) -> StageResult[str]:
        if not pages:
            return StageResult.failure(ErrorKind.UNPROCESSABLE, "No page images for OCR")
        text = await self._ocr_engine.recognize(pages, self._limits.ocr_languages)
        return StageResult.success(text)

    async def _run_stage(
        self,
        stage: Stage,
        context: CascadeContext,
        call: Callable[[], Awaitable[StageResult[T]]],
        timeout: float | None = None,
    ) -> StageResult[T]:
        started_at = datetime.now(timezone.utc)
        started = time.monotonic()
        if timeout is None:
            timeout = self._limits.stage_timeout_seconds
        try:
            result = await asyncio.wait_for(call(), timeout=timeout)
        except TimeoutError:
            result = StageResult.failure(ErrorKind.UNPROCESSABLE, f"{stage.value} timed out")
        except Exception as exc:
            Log.exception(f"Stage {stage.value} raised")
            result = StageResult.failure(
                ErrorKind.UNPROCESSABLE, f"{stage.value} failed: {type(exc).__name__}: {exc}"
            )

        text = result.value if isinstance(result.value, str) else ""
        char_count = len(text)
        if not result.ok:
            status = AttemptStatus.ERROR
        elif is_meaningful(text):
            status = AttemptStatus.SUCCESS
        else:
            status = AttemptStatus.EMPTY
        attempt = ExtractionAttempt(
            stage=stage,
            started_at=started_at,
            duration_ms=int((time.monotonic() - started) * 1000),
            status=status,
            char_count=char_count,
            error_message=result.error.message if result.error else None,
        )
        context.attempts.append(attempt)
        Log.info(
            f"Stage {stage.value}: {status.value} ({char_count} chars, {attempt.duration_ms} ms)"
            + (f" - {attempt.error_message}" if attempt.error_message else "")
        )
        return result

    # ------------------------------------------------------------------
    # Terminal states
    # ------------------------------------------------------------------

    async def _structure_text(
        self,
        schema: TargetSchema,
        text: str,
        source: str,
        attempts: list[ExtractionAttempt],
    ) -> ExtractedRecord:
        started = time.monotonic()
        try:
            record = await asyncio.wait_for(
                self._schema_extractor.extract_and_validate(text, schema),
                timeout=self._limits.stage_timeout_seconds,
            )
        except TimeoutError as exc:
            error: ExtractionError = NoModelResponseError(
                f"Language model timed out while structuring {schema.name}"
            )
            await self._record_text_usage(schema, text, source, started, error=error.message)
            raise error from exc
        except LlmError as exc:
            error = NoModelResponseError(f"Language model call failed: {exc}")
            await self._record_text_usage(schema, text, source, started, error=error.message)
            raise error from exc
        except ExtractionError as exc:
            await self._record_text_usage(schema, text, source, started, error=exc.message)
            raise

        await self._record_text_usage(schema, text, source, started, record=record)
        return replace(record, source=source, attempts=tuple(attempts))

    async def _structure_vision(self, context: CascadeContext) -> ExtractedRecord:
        page = context.pages[0]
        mime_type = page.mime_type or "image/png"
        started_at = datetime.now(timezone.utc)
        started = time.monotonic()
        try:
            record = await asyncio.wait_for(
                self._vision_extractor.extract_structured(page, mime_type, context.schema),
                timeout=self._limits.stage_timeout_seconds,
            )
        except TimeoutError as exc:
            self._append_vision_attempt(context, started_at, started, "vision timed out")
            # The cancelled call never reaches its own usage record.
            await self._vision_extractor.record_timeout(page, context.schema, started)
            raise NoModelResponseError("Vision model timed out") from exc
        except LlmError as exc:
            self._append_vision_attempt(context, started_at, started, str(exc))
            raise NoModelResponseError(f"Vision model call failed: {exc}") from exc
        except ExtractionError as exc:
            self._append_vision_attempt(context, started_at, started, exc.message)
            raise

        self._append_vision_attempt(context, started_at, started, None)
        return replace(record, attempts=tuple(context.attempts))

    def _append_vision_attempt(
        self,
        context: CascadeContext,
        started_at: datetime,
        started: float,
        error: str | None,
    ) -> None:
        context.attempts.append(
            ExtractionAttempt(
                stage=Stage.VISION,
                started_at=started_at,
                duration_ms=int((time.monotonic() - started) * 1000),
                status=AttemptStatus.ERROR if error else AttemptStatus.SUCCESS,
                error_message=error,
            )
        )

    async def _fail(self, context: CascadeContext) -> ExtractedRecord:
        message = (
            "Could not extract text from the document after trying every strategy; "
            "the file looks corrupted or unsupported"
        )
        Log.error(f"{context.schema.name}: {message}")
        await self._usage_logger.record(
            UsageEvent(
                entity_type=context.schema.entity_type,
                input_type=context.document.mime_type.input_type,
                input_size_chars=len(context.text),
                model=self._schema_extractor.model,
                status="error",
                duration_ms=sum(a.duration_ms for a in context.attempts),
                error_message=message,
            )
        )
        raise UnprocessableDocumentError(message)

    async def _record_text_usage(
        self,
        schema: TargetSchema,
        text: str,
        source: str,
        started: float,
        record: ExtractedRecord | None = None,
        error: str | None = None,
    ) -> None:
        usage = record.usage if record is not None else None
        await self._usage_logger.record(
            UsageEvent(
                entity_type=schema.entity_type,
                input_type=source,
                input_size_chars=len(text),
                model=self._schema_extractor.model,
                status="error" if error else "success",
                duration_ms=int((time.monotonic() - started) * 1000),
                prompt_tokens=usage.prompt_tokens if usage else None,
                completion_tokens=usage.completion_tokens if usage else None,
                cost_estimate=self._cost_rates.estimate(usage) if usage else None,
                error_message=error,
            )
        )
