import asyncio
from collections.abc import Sequence

from docintake.config.settings import Settings
from docintake.extraction.schema_extractor import SchemaValidatingExtractor
from docintake.extraction.vision_extractor import VisionExtractor
from docintake.llm.factory import CompletionClientFactory
from docintake.logging.logger import Log
from docintake.ocr.engine import OcrEngine
from docintake.ocr.tesseract_adapter import TesseractAdapter
from docintake.processor.document_loader import DocumentLoader
from docintake.processor.exceptions import DocumentRejectedError, ErrorKind
from docintake.processor.models import ExtractedRecord
from docintake.processor.orchestrator import CascadeLimits, ExtractionOrchestrator
from docintake.raster.pymupdf_rasterizer import PyMuPdfRasterizer
from docintake.schemas.registry import get_schema
from docintake.text.factory import TextExtractorFactory
from docintake.usage.base import BaseUsageLogger
from docintake.usage.log_usage_logger import LogUsageLogger
from docintake.usage.models import CostRates


class DocumentProcessor:
    """Entry point: validate the upload, then run the extraction cascade.

    Pipeline: load -> native text -> OCR -> vision -> structured record.
    """

    def __init__(self, loader: DocumentLoader, orchestrator: ExtractionOrchestrator) -> None:
        self._loader = loader
        self._orchestrator = orchestrator

    async def process(self, data: bytes, mime_type: str, entity: str) -> ExtractedRecord:
        """Extract a structured record of kind *entity* from a document.

        Raises:
            ValueError: if *entity* is not a known schema.
            ExtractionError: see ``docintake.processor.exceptions``.
        """
        schema = get_schema(entity)
        document = self._loader.load(data, mime_type)
        record = await self._orchestrator.run(document, schema)
        Log.info(
            f"Extracted {schema.name} via {record.source}: {len(record.data)} field(s)"
            + (" (best effort)" if record.best_effort else "")
        )
        return record

    async def process_text(self, text: str, entity: str) -> ExtractedRecord:
        """Structure already-plain text, bypassing file extraction."""
        schema = get_schema(entity)
        if not text.strip():
            raise DocumentRejectedError(ErrorKind.MALFORMED_INPUT, "Text is empty")
        return await self._orchestrator.run_text(text, schema)

    async def process_many(
        self, documents: Sequence[tuple[bytes, str, str]]
    ) -> list[ExtractedRecord | BaseException]:
        """Process several ``(data, mime_type, entity)`` documents concurrently.

        Each slot holds either the record or the exception that document raised.
        """
        return await asyncio.gather(
            *(self.process(data, mime_type, entity) for data, mime_type, entity in documents),
            return_exceptions=True,
        )


def build_processor(
    settings: Settings,
    usage_logger: BaseUsageLogger | None = None,
) -> DocumentProcessor:
    """Build a DocumentProcessor with all required adapters."""
    usage_logger = usage_logger or LogUsageLogger()
    cost_rates = CostRates(
        prompt_per_1k=settings.prompt_cost_per_1k_tokens,
        completion_per_1k=settings.completion_cost_per_1k_tokens,
    )
    client = CompletionClientFactory.create(settings)

    text_extractor = TextExtractorFactory.build(settings)
    ocr_engine = OcrEngine(
        TesseractAdapter(),
        concurrency=settings.ocr_concurrency,
        page_timeout_seconds=settings.stage_timeout_seconds,
    )
    schema_extractor = SchemaValidatingExtractor(
        client=client,
        model=settings.llm_text_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        max_validation_retries=settings.max_validation_retries,
    )
    vision_extractor = VisionExtractor(
        client=client,
        model=settings.llm_vision_model,
        usage_logger=usage_logger,
        cost_rates=cost_rates,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
    orchestrator = ExtractionOrchestrator(
        text_extractor=text_extractor,
        rasterizer=PyMuPdfRasterizer(),
        ocr_engine=ocr_engine,
        schema_extractor=schema_extractor,
        vision_extractor=vision_extractor,
        usage_logger=usage_logger,
        limits=CascadeLimits(
            max_ocr_pages=settings.max_ocr_pages,
            raster_scale=settings.raster_scale,
            ocr_languages=settings.ocr_languages,
            stage_timeout_seconds=settings.stage_timeout_seconds,
        ),
        cost_rates=cost_rates,
    )
    return DocumentProcessor(
        loader=DocumentLoader(settings.max_file_size_bytes),
        orchestrator=orchestrator,
    )
