"""
Paginated PDF export with ReportLab.

Records are laid out top to bottom, one text block each. Before a block is
drawn, a new page is started when the remaining height is below the
threshold (or too small for the block). Text is drawn with an embedded
TrueType face so Persian and Arabic fields render.
"""

import zlib
from pathlib import Path
from typing import Optional, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from gold_ledger.models import TransactionRecord
from gold_ledger.queries import require_history
from gold_ledger.services.render.fonts import resolve_font_path, visual_text
from gold_ledger.services.render.formatting import LedgerFormatter, record_lines


MARGIN = 50
LINE_HEIGHT = 16
BLOCK_GAP = 14
TITLE_SIZE = 16
BODY_SIZE = 11


def _register_font(font_path: Optional[Path]) -> str:
    """Register (once) and return the name of the embedded TrueType face."""
    path = resolve_font_path(font_path)
    name = f"Ledger-{path.stem}-{zlib.crc32(str(path).encode('utf-8')):08x}"
    if name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(name, str(path)))
    return name


def render_pdf(
    history: Sequence[TransactionRecord],
    output_path: Path,
    formatter: LedgerFormatter,
    font_path: Optional[Path] = None,
    page_break_threshold: float = 120.0,
) -> tuple[Path, int]:
    """
    Write the history as a PDF.

    Returns:
        (output_path, page_count)

    Raises:
        NoDataError: the history is empty
    """
    require_history(history)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    font = _register_font(font_path)
    pdf = canvas.Canvas(str(output_path), pagesize=A4)
    pdf.setTitle("Transactions")
    _, page_height = A4
    pages = 1

    y = page_height - MARGIN
    pdf.setFont(font, TITLE_SIZE)
    pdf.drawString(MARGIN, y, formatter.localize(f"Transactions ({len(history)})"))
    y -= LINE_HEIGHT * 2

    for index, record in enumerate(history, start=1):
        lines = record_lines(record, formatter)
        block_height = LINE_HEIGHT * (len(lines) + 1) + BLOCK_GAP
        if y < page_break_threshold or y - block_height < MARGIN:
            pdf.showPage()
            pages += 1
            y = page_height - MARGIN

        pdf.setFont(font, BODY_SIZE + 1)
        pdf.drawString(MARGIN, y, formatter.localize(f"#{index}"))
        y -= LINE_HEIGHT
        pdf.setFont(font, BODY_SIZE)
        for label, value in lines:
            pdf.drawString(MARGIN + 12, y, visual_text(f"{label}: {value}"))
            y -= LINE_HEIGHT
        y -= BLOCK_GAP

    pdf.save()
    return output_path, pages
