"""Tests for invoice and export rendering."""

import csv
import re
from decimal import Decimal

import pytest
from openpyxl import load_workbook
from PIL import Image
from pypdf import PdfReader

from gold_ledger.config import RenderSettings
from gold_ledger.conversation import DIRECTION_LABELS
from gold_ledger.models import Direction, GoldDetails, TransactionRecord
from gold_ledger.queries import NoDataError, summarize
from gold_ledger.services.render import (
    EXPORT_COLUMNS,
    ArtifactFormat,
    ArtifactRenderer,
    LedgerFormatter,
    RenderError,
    default_font_path,
    export_row,
    has_rtl,
    record_lines,
    visual_text,
)


@pytest.fixture
def renderer(tmp_path):
    return ArtifactRenderer(export_dir=tmp_path, settings=RenderSettings())


def many_records(count):
    return [
        TransactionRecord(
            direction=Direction.BUY if index % 2 else Direction.SELL,
            details=GoldDetails(
                unit_price=Decimal("123000"),
                total_amount=Decimal(1000 * (index + 1)),
                weight_grams=Decimal("0.035"),
            ),
            counterparty_name=f"Customer {index}",
        )
        for index in range(count)
    ]


class TestFormatter:
    """Tests for LedgerFormatter."""

    def test_grouped_amount(self):
        formatter = LedgerFormatter()
        assert formatter.amount(Decimal("1234567")) == "1,234,567"
        assert formatter.money(Decimal("50000")) == "50,000 Toman"

    def test_fractional_amount(self):
        assert LedgerFormatter().amount(Decimal("1234.5")) == "1,234.5"

    def test_exponent_amounts_are_written_out(self):
        formatter = LedgerFormatter()
        assert formatter.amount(Decimal("1E+20")) == "100,000,000,000,000,000,000"
        assert formatter.amount(Decimal("5E+4")) == "50,000"
        assert formatter.amount(Decimal("50000.0")) == "50,000"
        assert formatter.amount(Decimal("1E-6")) == "0.000001"

    def test_weight_has_three_decimals(self):
        formatter = LedgerFormatter()
        assert formatter.weight(Decimal("1.761")) == "1.761 g"
        assert formatter.weight(Decimal("2")) == "2.000 g"

    def test_persian_digits(self):
        formatter = LedgerFormatter(locale="fa", currency_label="تومان")
        assert formatter.amount(Decimal("1234567")) == "۱٬۲۳۴٬۵۶۷"
        assert formatter.money(Decimal("5")) == "۵ تومان"

    def test_record_lines_cover_every_field(self, coin_sale):
        labels = [label for label, _ in record_lines(coin_sale, LedgerFormatter())]
        assert labels == [
            "Date",
            "Transaction",
            "Counterparty",
            "Item",
            "Unit price",
            "Quantity",
            "Total amount",
            "Note",
        ]

    def test_gold_lines_show_weight(self, gold_purchase):
        lines = dict(record_lines(gold_purchase, LedgerFormatter()))
        assert lines["Approx. weight"] == "1.761 g"
        assert lines["Total amount"] == "50,000 Toman"
        assert lines["Transaction"] == "Purchase"

    def test_export_row_columns(self, currency_purchase):
        row = export_row(currency_purchase, LedgerFormatter())
        assert list(row) == EXPORT_COLUMNS
        assert row["details"] == "USD"
        assert row["quantity"] == "100"
        assert row["weight"] == ""


class TestInvoice:
    """Tests for the invoice image."""

    @pytest.mark.parametrize("fixture", ["gold_purchase", "coin_sale", "currency_purchase"])
    def test_renders_png(self, renderer, request, fixture):
        record = request.getfixturevalue(fixture)
        artifact = renderer.render_invoice("42", record)

        assert artifact.format == ArtifactFormat.PNG
        assert artifact.path.name.startswith("invoice_42_")
        with Image.open(artifact.path) as image:
            assert image.format == "PNG"
            assert image.width == 600


class TestExports:
    """Tests for CSV, XLSX and PDF exports."""

    def test_csv_has_one_row_per_record(self, renderer, history):
        artifact = renderer.export("42", history, ArtifactFormat.CSV)

        with artifact.path.open(encoding="utf-8-sig", newline="") as handle:
            rows = list(csv.DictReader(handle))

        assert artifact.entry_count == len(history)
        assert len(rows) == len(history)
        assert list(rows[0]) == EXPORT_COLUMNS
        assert rows[0]["total_amount"] == "50,000 Toman"
        assert rows[1]["type"] == "Sale"
        assert rows[1]["note"] == "paid in cash"

    def test_xlsx_has_one_row_per_record(self, renderer, history):
        artifact = renderer.export("42", history, ArtifactFormat.XLSX)

        sheet = load_workbook(artifact.path).active
        rows = list(sheet.iter_rows(min_row=2, values_only=True))

        assert sheet.title == "Transactions"
        assert len(rows) == len(history)
        assert rows[1][7] == 90000000
        assert sheet.cell(row=2, column=9).number_format == "0.000"

    def test_pdf_single_page(self, renderer, history):
        artifact = renderer.export("42", history, ArtifactFormat.PDF)

        assert artifact.path.read_bytes().startswith(b"%PDF")
        assert artifact.page_count == 1
        assert artifact.entry_count == 3

    def test_pdf_paginates(self, renderer):
        records = many_records(40)
        artifact = renderer.export("42", records, ArtifactFormat.PDF)
        assert artifact.page_count > 1
        assert artifact.entry_count == 40

    @pytest.mark.parametrize("fmt", [ArtifactFormat.CSV, ArtifactFormat.XLSX, ArtifactFormat.PDF])
    def test_empty_history_produces_no_file(self, renderer, tmp_path, fmt):
        with pytest.raises(NoDataError):
            renderer.export("42", [], fmt)
        assert list(tmp_path.iterdir()) == []

    def test_png_is_not_an_export(self, renderer, history):
        with pytest.raises(ValueError):
            renderer.export("42", history, ArtifactFormat.PNG)

    def test_exports_do_not_modify_history(self, renderer, history):
        snapshot = [record.model_copy() for record in history]
        renderer.export("42", history, ArtifactFormat.CSV)
        assert history == snapshot

    def test_file_names(self, renderer, history):
        artifact = renderer.export("user 7", history, ArtifactFormat.XLSX)
        assert artifact.path.name.startswith("transactions_user_207_")
        assert artifact.path.suffix == ".xlsx"


def csv_entries(path):
    with path.open(encoding="utf-8-sig", newline="") as handle:
        return [
            (row["type"], Decimal(re.sub(r"[^\d.]", "", row["total_amount"])))
            for row in csv.DictReader(handle)
        ]


def xlsx_entries(path):
    sheet = load_workbook(path).active
    return [
        (row[1], Decimal(str(row[7])))
        for row in sheet.iter_rows(min_row=2, values_only=True)
    ]


def pdf_entries(path):
    text = "\n".join(page.extract_text() for page in PdfReader(str(path)).pages)
    types = re.findall(r"Transaction:\s*(Purchase|Sale)", text)
    totals = re.findall(r"Total amount:\s*([\d,]+)", text)
    assert len(types) == len(totals)
    return [(kind, Decimal(total.replace(",", ""))) for kind, total in zip(types, totals)]


ENTRY_READERS = {
    ArtifactFormat.CSV: csv_entries,
    ArtifactFormat.XLSX: xlsx_entries,
    ArtifactFormat.PDF: pdf_entries,
}


class TestExportParity:
    """Every export format carries the same entries as the summary."""

    @pytest.mark.parametrize("fmt", list(ENTRY_READERS))
    def test_entries_match_summary(self, renderer, history, fmt):
        artifact = renderer.export("42", history, fmt)
        entries = ENTRY_READERS[fmt](artifact.path)
        summary = summarize(history)

        assert len(entries) == artifact.entry_count == len(history)
        buy_label = DIRECTION_LABELS[Direction.BUY]
        sell_label = DIRECTION_LABELS[Direction.SELL]
        assert [kind for kind, _ in entries].count(buy_label) == summary.buy_count
        assert [kind for kind, _ in entries].count(sell_label) == summary.sell_count
        assert sum(total for kind, total in entries if kind == buy_label) == summary.total_buy
        assert sum(total for kind, total in entries if kind == sell_label) == summary.total_sell

    @pytest.mark.parametrize("fmt", list(ENTRY_READERS))
    def test_paginated_history_keeps_every_entry(self, renderer, fmt):
        records = many_records(40)
        artifact = renderer.export("42", records, fmt)
        entries = ENTRY_READERS[fmt](artifact.path)

        assert len(entries) == 40
        assert sum(total for _, total in entries) == sum(
            record.details.total_amount for record in records
        )


@pytest.fixture
def persian_sale():
    return TransactionRecord(
        direction=Direction.SELL,
        details=GoldDetails(
            unit_price=Decimal("123000"),
            total_amount=Decimal("50000"),
            weight_grams=Decimal("1.761"),
        ),
        counterparty_name="علی رضایی",
        note="پرداخت نقدی",
    )


class TestPersianText:
    """Persian names and notes are drawn with an embedded Unicode face."""

    def test_default_font_is_bundled(self):
        assert default_font_path().is_file()
        assert default_font_path().suffix == ".ttf"

    def test_shaping_leaves_latin_alone(self):
        assert not has_rtl("Ali 50,000")
        assert visual_text("Ali 50,000") == "Ali 50,000"

    def test_shaping_joins_persian_letters(self):
        assert has_rtl("علی")
        shaped = visual_text("علی")
        assert shaped != "علی"
        assert len(shaped) == 3

    def test_invoice(self, tmp_path, persian_sale):
        renderer = ArtifactRenderer(
            export_dir=tmp_path,
            settings=RenderSettings(number_locale="fa", currency_label="تومان"),
        )
        artifact = renderer.render_invoice("42", persian_sale)
        with Image.open(artifact.path) as image:
            assert image.format == "PNG"

    def test_pdf_embeds_font(self, tmp_path, persian_sale):
        renderer = ArtifactRenderer(
            export_dir=tmp_path,
            settings=RenderSettings(number_locale="fa", currency_label="تومان"),
        )
        artifact = renderer.export("42", [persian_sale], ArtifactFormat.PDF)

        content = artifact.path.read_bytes()
        assert content.startswith(b"%PDF")
        assert b"/FontFile2" in content


class TestRenderFailures:
    """Unreadable fonts surface as RenderError."""

    @pytest.fixture
    def broken_renderer(self, tmp_path):
        settings = RenderSettings(font_path=tmp_path / "missing.ttf")
        return ArtifactRenderer(export_dir=tmp_path / "exports", settings=settings)

    def test_invoice(self, broken_renderer, gold_purchase):
        with pytest.raises(RenderError):
            broken_renderer.render_invoice("42", gold_purchase)

    def test_pdf(self, broken_renderer, history):
        with pytest.raises(RenderError):
            broken_renderer.export("42", history, ArtifactFormat.PDF)

    def test_tables_do_not_need_the_font(self, broken_renderer, history):
        artifact = broken_renderer.export("42", history, ArtifactFormat.CSV)
        assert artifact.path.exists()
