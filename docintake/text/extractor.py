import asyncio

from docintake.logging.logger import Log
from docintake.processor.exceptions import ErrorKind
from docintake.processor.models import MimeType, StageResult
from docintake.text.base import BaseTextExtractor
from docintake.text.exceptions import TextExtractionError


class TextExtractor:
    """Routes a document buffer to the native text adapter for its format."""

    def __init__(self, pdf_extractor: BaseTextExtractor, docx_extractor: BaseTextExtractor) -> None:
        self._adapters: dict[MimeType, BaseTextExtractor] = {
            MimeType.PDF: pdf_extractor,
            MimeType.DOCX: docx_extractor,
        }

    async def extract(self, data: bytes, mime_type: MimeType) -> StageResult[str]:
        """Return the native text of a PDF/DOCX, or a typed failure.

        Images are not handled here and yield an ``unsupported`` failure.
        Parser errors are reported as ``malformed_input`` instead of raised.
        """
        adapter = self._adapters.get(mime_type)
        if adapter is None:
            return StageResult.failure(
                ErrorKind.UNSUPPORTED, f"No native text layer for {mime_type.value}"
            )
        try:
            text = await asyncio.to_thread(adapter.extract, data)
        except TextExtractionError as exc:
            Log.warning(f"Native text extraction failed: {exc}")
            return StageResult.failure(ErrorKind.MALFORMED_INPUT, str(exc))
        return StageResult.success(text)
