"""Artifact rendering package."""

from gold_ledger.services.render.fonts import default_font_path, has_rtl, visual_text
from gold_ledger.services.render.formatting import (
    EXPORT_COLUMNS,
    LedgerFormatter,
    describe_details,
    export_row,
    record_lines,
)
from gold_ledger.services.render.renderer import (
    Artifact,
    ArtifactFormat,
    ArtifactRenderer,
    EXPORT_CAPTIONS,
    RenderError,
)

__all__ = [
    "default_font_path",
    "has_rtl",
    "visual_text",
    "EXPORT_COLUMNS",
    "LedgerFormatter",
    "describe_details",
    "export_row",
    "record_lines",
    "Artifact",
    "ArtifactFormat",
    "ArtifactRenderer",
    "EXPORT_CAPTIONS",
    "RenderError",
]
