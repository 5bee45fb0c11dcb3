from pathlib import Path

from docintake.llm.exceptions import LlmError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

SYSTEM_PROMPT = "extraction_system_prompt.txt"
CORRECTION_PROMPT = "correction_prompt.txt"
VISION_INSTRUCTION = "vision_instruction.txt"


def load_prompt_template(name: str, path: Path | None = None) -> str:
    """Load a prompt template.

    Args:
        name: File name inside the bundled prompts directory.
        path: Explicit file to read instead of the bundled one.

    Returns:
        The raw template string with placeholders.

    Raises:
        LlmError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LlmError(f"Failed to load prompt template: {exc}") from exc
