from dataclasses import dataclass, field

from docintake.processor.models import TokenUsage


@dataclass(frozen=True)
class ImageInput:
    """Base64-encoded image attached to a vision request."""

    base64_data: str
    mime_type: str
    detail: str = "high"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_data}"


@dataclass(frozen=True)
class CompletionResponse:
    content: str
    usage: TokenUsage = field(default_factory=TokenUsage)
