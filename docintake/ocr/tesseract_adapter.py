import io

import pytesseract
from PIL import Image

from docintake.ocr.base import BaseOcrAdapter
from docintake.ocr.exceptions import OcrError


class TesseractAdapter(BaseOcrAdapter):
    """Runs Tesseract through pytesseract on a Pillow image."""

    def __init__(self, oem: int = 1, psm: int = 3) -> None:
        self._config = f"--oem {oem} --psm {psm}"

    def image_to_text(self, image_bytes: bytes, languages: str) -> str:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                return pytesseract.image_to_string(
                    image.convert("RGB"), lang=languages, config=self._config
                )
        except Exception as exc:
            raise OcrError(f"tesseract OCR failed: {exc}") from exc
