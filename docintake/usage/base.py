from abc import ABC, abstractmethod

from docintake.usage.models import UsageEvent


class BaseUsageLogger(ABC):
    """Contract for the collaborator that stores usage events."""

    @abstractmethod
    async def record(self, event: UsageEvent) -> None:
        """Store one usage event. Implementations must not raise for storage errors."""
