from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from itertools import islice

from docintake.logging.logger import Log
from docintake.processor.models import RasterPage


def take(pages: Iterable[RasterPage], max_pages: int) -> list[RasterPage]:
    """Materialize at most *max_pages* items; the rest are never produced."""
    return list(islice(pages, max(0, max_pages)))


class BaseRasterizer(ABC):
    """Contract for PDF page rendering adapters."""

    @abstractmethod
    def iter_pages(self, pdf_bytes: bytes, scale: float) -> Iterator[RasterPage]:
        """Lazily render pages in document order.

        The iterator is single-use; each page is rendered only when requested.

        Raises:
            RasterError: if the document cannot be opened or a page cannot be rendered.
        """

    def to_images(self, pdf_bytes: bytes, scale: float, max_pages: int) -> list[RasterPage]:
        """Render up to *max_pages* pages. Any failure yields an empty list."""
        try:
            pages = take(self.iter_pages(pdf_bytes, scale), max_pages)
        except Exception:
            Log.exception("PDF to image conversion failed")
            return []
        Log.info(f"Rendered {len(pages)} page(s) at scale {scale}")
        return pages
