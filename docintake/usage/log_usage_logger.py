from dataclasses import asdict

from docintake.logging.logger import Log
from docintake.usage.base import BaseUsageLogger
from docintake.usage.models import UsageEvent


class LogUsageLogger(BaseUsageLogger):
    """Writes usage events to the application log."""

    async def record(self, event: UsageEvent) -> None:
        fields = {k: v for k, v in asdict(event).items() if v is not None}
        message = " ".join(f"{k}={v}" for k, v in fields.items())
        if event.status == "error":
            Log.warning(f"AI usage {message}")
        else:
            Log.info(f"AI usage {message}")
