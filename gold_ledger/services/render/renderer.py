"""
Artifact Renderer

Single entry point for everything rendered from persisted data: the
invoice image of one record and the CSV/XLSX/PDF exports of a history.
Renderers are read-only with respect to the history and write exactly one
file each; file names carry the identity and a generation timestamp.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from pydantic import BaseModel
from reportlab.pdfbase.ttfonts import TTFError

from gold_ledger.config import RenderSettings, get_settings
from gold_ledger.models import TransactionRecord
from gold_ledger.services.render.document import render_pdf
from gold_ledger.services.render.formatting import LedgerFormatter
from gold_ledger.services.render.invoice import render_invoice
from gold_ledger.services.render.tables import render_csv, render_xlsx
from gold_ledger.services.storage import identity_slug


class RenderError(Exception):
    """An artifact could not be encoded or written."""
    pass


class ArtifactFormat(str, Enum):
    PNG = "png"
    CSV = "csv"
    XLSX = "xlsx"
    PDF = "pdf"


EXPORT_CAPTIONS = {
    ArtifactFormat.CSV: "📄 Transactions (CSV)",
    ArtifactFormat.XLSX: "📊 Transactions (spreadsheet)",
    ArtifactFormat.PDF: "📑 Transactions (PDF)",
}


class Artifact(BaseModel):
    """A rendered file and what went into it."""

    path: Path
    format: ArtifactFormat
    entry_count: int
    page_count: int = 1


class ArtifactRenderer:
    """
    Renders invoices and exports into the export directory.
    """

    def __init__(
        self,
        export_dir: Optional[Path] = None,
        settings: Optional[RenderSettings] = None,
    ):
        self._export_dir = Path(export_dir or get_settings().storage.export_dir)
        self._settings = settings or get_settings().render
        self._formatter = LedgerFormatter(
            locale=self._settings.number_locale,
            currency_label=self._settings.currency_label,
            weight_label=self._settings.weight_label,
        )

    @property
    def formatter(self) -> LedgerFormatter:
        return self._formatter

    @property
    def enabled_formats(self) -> list[str]:
        return self._settings.export_formats_list

    def _output_path(self, prefix: str, identity: str, fmt: ArtifactFormat) -> Path:
        stamp = datetime.now().strftime("%Y%m%d%H%M%S%f")
        return self._export_dir / f"{prefix}_{identity_slug(identity)}_{stamp}.{fmt.value}"

    def render_invoice(self, identity: str, record: TransactionRecord) -> Artifact:
        """
        PNG receipt for one record.

        Raises:
            RenderError: the image could not be drawn or written
        """
        try:
            path = render_invoice(
                record,
                self._output_path("invoice", identity, ArtifactFormat.PNG),
                self._formatter,
                font_path=self._settings.font_path,
            )
        except OSError as e:
            raise RenderError(f"Invoice for {identity} could not be rendered: {e}")
        return Artifact(path=path, format=ArtifactFormat.PNG, entry_count=1)

    def export(
        self,
        identity: str,
        history: Sequence[TransactionRecord],
        fmt: ArtifactFormat,
    ) -> Artifact:
        """
        Export a full history.

        Raises:
            NoDataError: the history is empty
            ValueError: the format is not an export format
            RenderError: the file could not be encoded or written
        """
        if fmt not in EXPORT_CAPTIONS:
            raise ValueError(f"Not an export format: {fmt.value}")

        path = self._output_path("transactions", identity, fmt)
        pages = 1
        try:
            if fmt == ArtifactFormat.CSV:
                render_csv(history, path, self._formatter)
            elif fmt == ArtifactFormat.XLSX:
                render_xlsx(history, path, self._formatter)
            else:
                path, pages = render_pdf(
                    history,
                    path,
                    self._formatter,
                    font_path=self._settings.font_path,
                    page_break_threshold=self._settings.page_break_threshold_pt,
                )
        except (OSError, TTFError) as e:
            raise RenderError(f"{fmt.value} export for {identity} failed: {e}")

        return Artifact(path=path, format=fmt, entry_count=len(history), page_count=pages)
