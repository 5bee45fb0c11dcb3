from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from docintake.processor.exceptions import ErrorKind, ExtractionError

T = TypeVar("T")


class MimeType(str, Enum):
    PDF = "application/pdf"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    JPEG = "image/jpeg"
    PNG = "image/png"

    @property
    def is_image(self) -> bool:
        return self in (MimeType.JPEG, MimeType.PNG)

    @property
    def input_type(self) -> str:
        """Short label used in usage events."""
        if self is MimeType.PDF:
            return "pdf"
        if self is MimeType.DOCX:
            return "docx"
        return "image"


class Stage(str, Enum):
    NATIVE_TEXT = "native_text"
    OCR = "ocr"
    VISION = "vision"


class AttemptStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class DocumentInput:
    """One uploaded document, immutable for the duration of a pipeline run."""

    data: bytes
    mime_type: MimeType
    size_bytes: int


@dataclass(frozen=True)
class RasterPage:
    """A single page image handed from rasterization to OCR or vision."""

    index: int
    image_bytes: bytes
    mime_type: str = "image/png"


@dataclass(frozen=True)
class ExtractionAttempt:
    """Trace of one stage invocation."""

    stage: Stage
    started_at: datetime
    duration_ms: int
    status: AttemptStatus
    char_count: int = 0
    error_message: str | None = None


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int | None = None
    completion_tokens: int | None = None

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=_add_optional(self.prompt_tokens, other.prompt_tokens),
            completion_tokens=_add_optional(self.completion_tokens, other.completion_tokens),
        )


def _add_optional(a: int | None, b: int | None) -> int | None:
    if a is None and b is None:
        return None
    return (a or 0) + (b or 0)


@dataclass(frozen=True)
class ExtractedRecord:
    """Terminal output of the pipeline.

    ``data`` only holds fields declared by the target schema and never holds
    ``None``: an absent key means the value was not found.
    """

    data: dict[str, Any]
    usage: TokenUsage
    entity_type: str
    source: str
    model: str
    best_effort: bool = False
    attempts: tuple[ExtractionAttempt, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Outcome of a stage: either a value or the error that stopped it."""

    value: T | None = None
    error: ExtractionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "StageResult[T]":
        return cls(error=ExtractionError(kind, message))
