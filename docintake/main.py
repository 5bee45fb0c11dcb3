import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

from docintake.config.settings import Settings
from docintake.logging.logger import Log
from docintake.processor.document_loader import guess_mime_type
from docintake.processor.exceptions import ExtractionError
from docintake.processor.models import ExtractedRecord
from docintake.processor.processor import build_processor
from docintake.schemas.registry import SCHEMAS


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="docintake",
        description="Extract a structured resume or job offer from a PDF, DOCX or image.",
    )
    parser.add_argument("file", type=Path, help="document to extract")
    parser.add_argument("--entity", choices=sorted(SCHEMAS), default="resume")
    parser.add_argument(
        "--mime-type",
        help="declared MIME type; guessed from the file extension when omitted",
    )
    return parser.parse_args(argv)


def _to_json(record: ExtractedRecord) -> str:
    payload = asdict(record)
    for attempt in payload["attempts"]:
        attempt["started_at"] = attempt["started_at"].isoformat()
    return json.dumps(payload, ensure_ascii=False, indent=2, default=str)


async def _run(args: argparse.Namespace, settings: Settings) -> ExtractedRecord:
    processor = build_processor(settings)
    path: Path = args.file
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    mime_type = args.mime_type or guess_mime_type(path)
    return await processor.process(path.read_bytes(), mime_type, args.entity)


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse args -> build dependencies -> extract -> print JSON."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    try:
        record = asyncio.run(_run(args, settings))
    except FileNotFoundError as exc:
        Log.error(str(exc))
        return 2
    except ExtractionError as exc:
        Log.error(f"Extraction failed ({exc.kind.value}): {exc.message}")
        return 1
    print(_to_json(record))
    return 0


if __name__ == "__main__":
    sys.exit(main())
