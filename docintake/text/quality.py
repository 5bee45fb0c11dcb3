"""Quality gate deciding whether extracted text is worth structuring."""

import re

MIN_MEANINGFUL_CHARS = 50

# Bare page counters such as "1 of 12" or "- 3 -" with nothing else around them.
_NOISE_RE = re.compile(r"^[\s\-0-9ofOf]+$")


def is_meaningful(text: str | None) -> bool:
    """Return True when *text* is long enough and not just page markers."""
    cleaned = (text or "").strip()
    if len(cleaned) < MIN_MEANINGFUL_CHARS:
        return False
    return _NOISE_RE.match(cleaned) is None
