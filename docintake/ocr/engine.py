import asyncio
from collections.abc import Sequence

from docintake.logging.logger import Log
from docintake.ocr.base import BaseOcrAdapter
from docintake.ocr.exceptions import OcrError
from docintake.processor.models import RasterPage

PAGE_SEPARATOR = "\n\n"


class OcrEngine:
    """Runs OCR over a batch of page images and joins the results in page order.

    A page that fails or times out is logged and skipped; the remaining pages
    still contribute. Pages may be recognized concurrently up to
    ``concurrency`` at a time, but the output order always follows the input.
    """

    def __init__(
        self,
        adapter: BaseOcrAdapter,
        *,
        concurrency: int = 1,
        page_timeout_seconds: float | None = None,
    ) -> None:
        self._adapter = adapter
        self._concurrency = max(1, concurrency)
        self._page_timeout_seconds = page_timeout_seconds

    async def recognize(self, pages: Sequence[RasterPage], languages: str) -> str:
        if not pages:
            return ""
        semaphore = asyncio.Semaphore(self._concurrency)

        async def run(page: RasterPage) -> str | None:
            async with semaphore:
                return await self._recognize_page(page, languages)

        texts = await asyncio.gather(*(run(page) for page in pages))
        recognized = [text for text in texts if text]
        Log.info(f"OCR recognized text on {len(recognized)}/{len(pages)} page(s)")
        return PAGE_SEPARATOR.join(recognized)

    async def _recognize_page(self, page: RasterPage, languages: str) -> str | None:
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self._adapter.image_to_text, page.image_bytes, languages),
                timeout=self._page_timeout_seconds,
            )
        except TimeoutError:
            Log.warning(f"OCR timed out for page {page.index + 1}")
            return None
        except OcrError as exc:
            Log.warning(f"OCR failed for page {page.index + 1}: {exc}")
            return None
        except Exception:
            Log.exception(f"OCR crashed on page {page.index + 1}")
            return None
        return text.strip() or None
