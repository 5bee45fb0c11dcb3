from enum import Enum


class ErrorKind(str, Enum):
    MALFORMED_INPUT = "malformed_input"
    UNPROCESSABLE = "unprocessable"
    NO_MODEL_RESPONSE = "no_model_response"
    SIZE_EXCEEDED = "size_exceeded"
    UNSUPPORTED = "unsupported"
    INVALID_MODEL_OUTPUT = "invalid_model_output"


class ExtractionError(Exception):
    """Base exception for all pipeline failures surfaced to the caller."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class DocumentRejectedError(ExtractionError):
    """Raised when a document fails a precondition before any stage runs."""


class UnprocessableDocumentError(ExtractionError):
    """Raised when every applicable extraction strategy has been exhausted."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.UNPROCESSABLE, message)


class NoModelResponseError(ExtractionError):
    """Raised when the language model returns no content at all."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.NO_MODEL_RESPONSE, message)


class SchemaValidationError(ExtractionError):
    """Raised when model output still violates the target schema after correction."""

    def __init__(self, message: str, errors: tuple[object, ...] = ()) -> None:
        super().__init__(ErrorKind.INVALID_MODEL_OUTPUT, message)
        self.errors = errors
