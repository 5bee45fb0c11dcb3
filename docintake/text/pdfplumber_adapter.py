import io

import pdfplumber

from docintake.text.base import BaseTextExtractor, join_pages
from docintake.text.exceptions import TextExtractionError


class PdfPlumberAdapter(BaseTextExtractor):
    """Reads the PDF text layer with pdfplumber.

    Overlapping duplicate glyphs (fake bold in many CV templates) are removed
    before extraction.
    """

    engine = "pdfplumber"

    def extract(self, data: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                pages = [page.dedupe_chars().extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise TextExtractionError(f"{self.engine} could not read the PDF: {exc}") from exc
        return join_pages(pages)
