from abc import ABC, abstractmethod
from collections.abc import Iterable


def join_pages(pages: Iterable[str]) -> str:
    """Join per-page text, dropping blank pages and trailing spaces on each line."""
    cleaned = []
    for page in pages:
        lines = [line.rstrip() for line in page.splitlines()]
        text = "\n".join(lines).strip()
        if text:
            cleaned.append(text)
    return "\n\n".join(cleaned)


class BaseTextExtractor(ABC):
    """Contract for all native text extraction adapters."""

    engine: str = ""

    @abstractmethod
    def extract(self, data: bytes) -> str:
        """Extract plain text from a document buffer.

        Args:
            data: Raw file content.

        Returns:
            Extracted text as a single stripped string (may be empty).

        Raises:
            TextExtractionError: if the document cannot be parsed.
        """
