import io

import docx

from docintake.text.base import BaseTextExtractor
from docintake.text.exceptions import TextExtractionError


class DocxAdapter(BaseTextExtractor):
    """Extracts the raw text body of a DOCX file using python-docx.

    Paragraph text comes first, then table cells row by row. Styling,
    headers and embedded objects are ignored.
    """

    engine = "python-docx"

    def extract(self, data: bytes) -> str:
        try:
            document = docx.Document(io.BytesIO(data))
            lines = [p.text for p in document.paragraphs]
            for table in document.tables:
                for row in table.rows:
                    cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                    if cells:
                        lines.append(" | ".join(cells))
        except Exception as exc:
            raise TextExtractionError(f"{self.engine} could not read the DOCX: {exc}") from exc
        return "\n".join(line for line in lines if line.strip()).strip()
