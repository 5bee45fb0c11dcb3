from docintake.llm.client_base import BaseCompletionClient
from docintake.llm.factory import CompletionClientFactory
from docintake.llm.models import CompletionResponse, ImageInput

__all__ = ["BaseCompletionClient", "CompletionClientFactory", "CompletionResponse", "ImageInput"]
