class OcrError(Exception):
    """Raised when OCR fails on an image."""
