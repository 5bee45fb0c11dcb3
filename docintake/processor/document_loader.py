import mimetypes
from pathlib import Path

from docintake.processor.exceptions import DocumentRejectedError, ErrorKind
from docintake.processor.models import DocumentInput, MimeType

_EXTENSION_MIME_TYPES: dict[str, MimeType] = {
    ".pdf": MimeType.PDF,
    ".docx": MimeType.DOCX,
    ".jpg": MimeType.JPEG,
    ".jpeg": MimeType.JPEG,
    ".png": MimeType.PNG,
}


def guess_mime_type(path: Path) -> str:
    """Guess a declared MIME type from the file extension."""
    known = _EXTENSION_MIME_TYPES.get(path.suffix.lower())
    if known is not None:
        return known.value
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


class DocumentLoader:
    """Builds a DocumentInput and enforces the entry preconditions."""

    def __init__(self, max_size_bytes: int) -> None:
        self._max_size_bytes = max_size_bytes

    def load(self, data: bytes, mime_type: str) -> DocumentInput:
        """Validate raw bytes and declared MIME type.

        Raises:
            DocumentRejectedError: if the MIME type is not accepted, the buffer
                is empty, or the buffer exceeds the configured size cap.
        """
        try:
            declared = MimeType(mime_type.strip().lower())
        except ValueError as exc:
            accepted = [m.value for m in MimeType]
            raise DocumentRejectedError(
                ErrorKind.MALFORMED_INPUT,
                f"MIME type '{mime_type}' is not accepted. Choose from: {accepted}",
            ) from exc

        size = len(data)
        if size == 0:
            raise DocumentRejectedError(ErrorKind.MALFORMED_INPUT, "Document is empty")
        if size > self._max_size_bytes:
            raise DocumentRejectedError(
                ErrorKind.SIZE_EXCEEDED,
                f"Document is {size} bytes, limit is {self._max_size_bytes}",
            )
        return DocumentInput(data=data, mime_type=declared, size_bytes=size)

    def load_path(self, path: Path, mime_type: str | None = None) -> DocumentInput:
        """Read a document from disk.

        Raises:
            FileNotFoundError: if the file does not exist.
            DocumentRejectedError: see :meth:`load`.
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        size = path.stat().st_size
        if size > self._max_size_bytes:
            raise DocumentRejectedError(
                ErrorKind.SIZE_EXCEEDED,
                f"Document is {size} bytes, limit is {self._max_size_bytes}",
            )
        return self.load(path.read_bytes(), mime_type or guess_mime_type(path))
