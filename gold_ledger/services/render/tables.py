"""
Tabular exports: CSV and XLSX.

Both carry one row per record under the same columns. The CSV holds the
formatted strings exactly as the invoice shows them; the spreadsheet keeps
numbers numeric and applies grouping through cell number formats.
"""

import csv
from pathlib import Path
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font

from gold_ledger.models import CoinDetails, CurrencyDetails, GoldDetails, TransactionRecord
from gold_ledger.queries import require_history
from gold_ledger.services.render.formatting import (
    EXPORT_COLUMNS,
    LedgerFormatter,
    describe_details,
    export_row,
)


GROUPED_FORMAT = "#,##0.##"
WEIGHT_FORMAT = "0.000"


def render_csv(
    history: Sequence[TransactionRecord],
    output_path: Path,
    formatter: LedgerFormatter,
) -> Path:
    """
    Write the history as CSV.

    Raises:
        NoDataError: the history is empty
    """
    require_history(history)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # utf-8-sig so spreadsheet apps detect the encoding
    with output_path.open("w", encoding="utf-8-sig", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        for record in history:
            writer.writerow(export_row(record, formatter))
    return output_path


def render_xlsx(
    history: Sequence[TransactionRecord],
    output_path: Path,
    formatter: LedgerFormatter,
) -> Path:
    """
    Write the history as a single-sheet workbook.

    Raises:
        NoDataError: the history is empty
    """
    require_history(history)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Transactions"

    headers = [
        "Date",
        "Type",
        "Item",
        "Details",
        "Counterparty",
        f"Unit price ({formatter.currency_label})",
        "Quantity",
        f"Total amount ({formatter.currency_label})",
        f"Weight ({formatter.weight_label})",
        "Note",
    ]
    sheet.append(headers)
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    for record in history:
        details = record.details
        quantity = None
        weight = None
        if isinstance(details, GoldDetails):
            weight = details.weight_grams
        elif isinstance(details, (CoinDetails, CurrencyDetails)):
            quantity = details.quantity
        else:
            raise TypeError(f"Unsupported record details: {type(details).__name__}")

        sheet.append([
            record.recorded_at,
            formatter.direction(record),
            record.item_kind.value,
            describe_details(record),
            record.counterparty_name or "",
            details.unit_price,
            quantity,
            details.total_amount,
            weight,
            record.note,
        ])

        row = sheet.max_row
        sheet.cell(row=row, column=1).number_format = "yyyy-mm-dd hh:mm"
        for column in (6, 7, 8):
            sheet.cell(row=row, column=column).number_format = GROUPED_FORMAT
        sheet.cell(row=row, column=9).number_format = WEIGHT_FORMAT

    for column, width in zip("ABCDEFGHIJ", (18, 10, 10, 14, 20, 18, 10, 20, 12, 30)):
        sheet.column_dimensions[column].width = width

    output_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output_path)
    return output_path
