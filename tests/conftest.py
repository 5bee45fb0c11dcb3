import io
import logging

import docx
import pytest
from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

RESUME_LINES = (
    "Jeanne Martin",
    "06 12 34 56 78 - jeanne.martin@example.com",
    "HEC Paris, Master Finance (bac+5)",
    "Recherche un stage de 6 mois a Paris ou Lyon a partir de janvier 2025",
    "Competences : Python, Excel, modelisation financiere, anglais courant",
)


@pytest.fixture(autouse=True)
def _isolate_docintake_logger():
    """Undo Log.configure() side effects (handlers, propagate, level) between tests."""
    logger = logging.getLogger("docintake")
    handlers, propagate, level = list(logger.handlers), logger.propagate, logger.level
    yield
    logger.handlers[:] = handlers
    logger.propagate = propagate
    logger.setLevel(level)


def _pdf(pages: list[list[str]]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    for lines in pages:
        y = 780
        for line in lines:
            c.drawString(72, y, line)
            y -= 18
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def resume_text() -> str:
    return "\n".join(RESUME_LINES)


@pytest.fixture()
def resume_pdf_bytes() -> bytes:
    """Single-page PDF whose text layer holds a short résumé."""
    return _pdf([list(RESUME_LINES)])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    return _pdf([["Page one content"], ["Page two content"]])


@pytest.fixture()
def blank_pdf_bytes() -> bytes:
    """Valid PDF with a single page and no text layer."""
    return _pdf([[]])


@pytest.fixture()
def twenty_page_pdf_bytes() -> bytes:
    return _pdf([[f"Page {n}"] for n in range(1, 21)])


@pytest.fixture()
def resume_docx_bytes() -> bytes:
    document = docx.Document()
    for line in RESUME_LINES:
        document.add_paragraph(line)
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Langues"
    table.rows[0].cells[1].text = "Anglais, Espagnol"
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


@pytest.fixture()
def blank_png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (200, 200), "white").save(buf, format="PNG")
    return buf.getvalue()
