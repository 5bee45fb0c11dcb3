import io
import shutil

import pytest
from PIL import Image

from docintake.ocr.engine import OcrEngine
from docintake.ocr.exceptions import OcrError
from docintake.ocr.tesseract_adapter import TesseractAdapter
from docintake.processor.models import RasterPage
from docintake.raster.pymupdf_rasterizer import PyMuPdfRasterizer

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

requires_tesseract = pytest.mark.skipif(
    shutil.which("tesseract") is None, reason="tesseract binary not installed"
)


@pytest.mark.integration
class TestPyMuPdfRasterizer:
    def test_renders_png_pages(self, multi_page_pdf_bytes: bytes) -> None:
        pages = PyMuPdfRasterizer().to_images(multi_page_pdf_bytes, scale=1.0, max_pages=5)
        assert [p.index for p in pages] == [0, 1]
        assert all(p.image_bytes.startswith(PNG_SIGNATURE) for p in pages)
        assert all(p.mime_type == "image/png" for p in pages)

    def test_caps_twenty_page_pdf_at_five(self, twenty_page_pdf_bytes: bytes) -> None:
        pages = PyMuPdfRasterizer().to_images(twenty_page_pdf_bytes, scale=1.0, max_pages=5)
        assert len(pages) == 5

    def test_scale_multiplies_resolution(self, blank_pdf_bytes: bytes) -> None:
        small = PyMuPdfRasterizer().to_images(blank_pdf_bytes, scale=1.0, max_pages=1)
        large = PyMuPdfRasterizer().to_images(blank_pdf_bytes, scale=2.0, max_pages=1)
        with Image.open(io.BytesIO(small[0].image_bytes)) as a, Image.open(
            io.BytesIO(large[0].image_bytes)
        ) as b:
            assert abs(b.width - 2 * a.width) <= 1
            assert abs(b.height - 2 * a.height) <= 1

    def test_corrupted_pdf_yields_no_pages(self) -> None:
        assert PyMuPdfRasterizer().to_images(b"%PDF-garbage", scale=2.0, max_pages=5) == []


@pytest.mark.integration
@requires_tesseract
class TestTesseractAdapter:
    def test_recognizes_rendered_text(self, resume_pdf_bytes: bytes) -> None:
        pages = PyMuPdfRasterizer().to_images(resume_pdf_bytes, scale=2.0, max_pages=1)
        text = TesseractAdapter().image_to_text(pages[0].image_bytes, "eng")
        assert "Jeanne" in text

    def test_blank_image_yields_no_text(self, blank_png_bytes: bytes) -> None:
        assert TesseractAdapter().image_to_text(blank_png_bytes, "eng").strip() == ""

    def test_invalid_image_raises(self) -> None:
        with pytest.raises(OcrError):
            TesseractAdapter().image_to_text(b"not an image", "eng")

    async def test_engine_skips_unreadable_page(self, resume_pdf_bytes: bytes) -> None:
        rendered = PyMuPdfRasterizer().to_images(resume_pdf_bytes, scale=2.0, max_pages=1)
        pages = [RasterPage(index=0, image_bytes=b"broken"), rendered[0]]
        text = await OcrEngine(TesseractAdapter()).recognize(pages, "eng")
        assert "Jeanne" in text
