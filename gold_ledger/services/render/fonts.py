"""
Typeface resolution and right-to-left shaping.

Invoices and PDFs always draw with a TrueType font that covers Latin,
Arabic and Persian script: the configured `font_path` when set, otherwise
the DejaVu Sans face that ships with matplotlib. Persian/Arabic runs are
reshaped into their joined presentation forms and reordered for display,
since neither Pillow's basic layout nor the ReportLab canvas does that.
"""

import re
from pathlib import Path
from typing import Optional

import arabic_reshaper
import matplotlib
from bidi.algorithm import get_display


BUNDLED_FONT = "DejaVuSans.ttf"

_RTL_CHARS = re.compile("[\u0590-\u08ff\ufb1d-\ufdff\ufe70-\ufefc]")


def default_font_path() -> Path:
    """The Unicode TrueType face bundled with matplotlib."""
    return Path(matplotlib.get_data_path()) / "fonts" / "ttf" / BUNDLED_FONT


def resolve_font_path(font_path: Optional[Path] = None) -> Path:
    return Path(font_path) if font_path else default_font_path()


def has_rtl(text: str) -> bool:
    return bool(_RTL_CHARS.search(text))


def visual_text(text: str) -> str:
    """Shape and reorder `text` for left-to-right drawing APIs."""
    if not has_rtl(text):
        return text
    return get_display(arabic_reshaper.reshape(text))
