from dataclasses import dataclass

from docintake.processor.models import TokenUsage


@dataclass(frozen=True)
class UsageEvent:
    """One attempt's metadata, handed to the persistence collaborator."""

    entity_type: str
    input_type: str
    input_size_chars: int
    model: str
    status: str
    duration_ms: int
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    cost_estimate: float | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class CostRates:
    """Price per 1000 tokens."""

    prompt_per_1k: float = 0.01
    completion_per_1k: float = 0.03

    def estimate(self, usage: TokenUsage) -> float | None:
        if usage.prompt_tokens is None and usage.completion_tokens is None:
            return None
        return (usage.prompt_tokens or 0) * self.prompt_per_1k / 1000 + (
            usage.completion_tokens or 0
        ) * self.completion_per_1k / 1000
