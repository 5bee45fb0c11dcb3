from collections.abc import Iterator

import pymupdf

from docintake.processor.models import RasterPage
from docintake.raster.base import BaseRasterizer
from docintake.raster.exceptions import RasterError


class PyMuPdfRasterizer(BaseRasterizer):
    """Renders PDF pages to PNG with PyMuPDF."""

    def iter_pages(self, pdf_bytes: bytes, scale: float) -> Iterator[RasterPage]:
        try:
            doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise RasterError(f"pymupdf could not open document: {exc}") from exc

        # Closing the generator early (islice) runs the with-exit and releases the doc.
        with doc:
            matrix = pymupdf.Matrix(scale, scale)
            for index, page in enumerate(doc):
                try:
                    pixmap = page.get_pixmap(matrix=matrix)
                    image_bytes = pixmap.tobytes("png")
                except Exception as exc:
                    raise RasterError(f"pymupdf could not render page {index + 1}: {exc}") from exc
                yield RasterPage(index=index, image_bytes=image_bytes, mime_type="image/png")
