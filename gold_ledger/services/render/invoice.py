"""
Invoice image rendering with PIL.

A fixed-width receipt: light background, bordered frame, a title and one
line per persisted field of the record.
"""

from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from gold_ledger.models import TransactionRecord
from gold_ledger.services.render.fonts import resolve_font_path, visual_text
from gold_ledger.services.render.formatting import LedgerFormatter, record_lines


CANVAS_WIDTH = 600
MARGIN = 40
TITLE_HEIGHT = 90
LINE_HEIGHT = 40
BACKGROUND = "#f5f5f5"
INK = "#333333"


def _load_font(font_path: Optional[Path], size: int):
    return ImageFont.truetype(str(resolve_font_path(font_path)), size)


def render_invoice(
    record: TransactionRecord,
    output_path: Path,
    formatter: LedgerFormatter,
    font_path: Optional[Path] = None,
) -> Path:
    """Draw `record` as a PNG receipt at `output_path`."""
    lines = record_lines(record, formatter)
    height = TITLE_HEIGHT + LINE_HEIGHT * len(lines) + MARGIN

    image = Image.new("RGB", (CANVAS_WIDTH, height), BACKGROUND)
    draw = ImageDraw.Draw(image)
    draw.rectangle(
        [(10, 10), (CANVAS_WIDTH - 10, height - 10)],
        outline=INK,
        width=3,
    )

    title_font = _load_font(font_path, 28)
    body_font = _load_font(font_path, 20)

    title = f"{record.item_kind.value.title()} Invoice"
    title_width = draw.textlength(title, font=title_font)
    draw.text(((CANVAS_WIDTH - title_width) / 2, 35), title, fill=INK, font=title_font)

    y = TITLE_HEIGHT
    for label, value in lines:
        draw.text((MARGIN, y), visual_text(f"{label}: {value}"), fill=INK, font=body_font)
        y += LINE_HEIGHT

    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(output_path, format="PNG")
    return output_path
