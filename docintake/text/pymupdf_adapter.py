import pymupdf

from docintake.text.base import BaseTextExtractor, join_pages
from docintake.text.exceptions import TextExtractionError


class PyMuPdfAdapter(BaseTextExtractor):
    """Reads the PDF text layer with PyMuPDF, blocks sorted top-to-bottom."""

    engine = "pymupdf"

    def extract(self, data: bytes) -> str:
        try:
            with pymupdf.open(stream=data, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                if doc.needs_pass:
                    raise TextExtractionError("PDF is password-protected")
                pages = [page.get_text("text", sort=True) for page in doc]
        except TextExtractionError:
            raise
        except Exception as exc:
            raise TextExtractionError(f"{self.engine} could not read the PDF: {exc}") from exc
        return join_pages(pages)
