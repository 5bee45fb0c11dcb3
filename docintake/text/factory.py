from docintake.config.settings import Settings
from docintake.processor.models import MimeType
from docintake.text.base import BaseTextExtractor
from docintake.text.docx_adapter import DocxAdapter
from docintake.text.extractor import TextExtractor
from docintake.text.pdfplumber_adapter import PdfPlumberAdapter
from docintake.text.pymupdf_adapter import PyMuPdfAdapter


class TextExtractorFactory:
    """Picks the native text adapter for each document format.

    PDFs use the engine named by ``pdf_engine``. DOCX always goes through
    python-docx. Images have no text layer and no adapter.
    """

    PDF_ADAPTERS: dict[str, type[BaseTextExtractor]] = {
        PdfPlumberAdapter.engine: PdfPlumberAdapter,
        PyMuPdfAdapter.engine: PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings, mime_type: MimeType) -> BaseTextExtractor:
        if mime_type is MimeType.DOCX:
            return DocxAdapter()
        if mime_type is not MimeType.PDF:
            raise ValueError(f"No native text adapter for {mime_type.value}")
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.PDF_ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PDF_ADAPTERS)}"
            )
        return adapter_cls()

    @classmethod
    def build(cls, settings: Settings) -> TextExtractor:
        return TextExtractor(
            pdf_extractor=cls.create(settings, MimeType.PDF),
            docx_extractor=cls.create(settings, MimeType.DOCX),
        )
