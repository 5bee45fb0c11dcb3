from abc import ABC, abstractmethod


class BaseOcrAdapter(ABC):
    """Contract for single-image OCR adapters."""

    @abstractmethod
    def image_to_text(self, image_bytes: bytes, languages: str) -> str:
        """Recognize text on one image.

        Args:
            image_bytes: Encoded image (PNG/JPEG).
            languages: Tesseract-style language set, e.g. ``"fra+eng"``.

        Raises:
            OcrError: on any recognition failure.
        """
