"""
Menu commands, choice sets and the prompt shown for every dialog step.
"""

from enum import Enum
from typing import Optional

from gold_ledger.models import (
    CoinType,
    CurrencyCode,
    Direction,
    ItemKind,
    Prompt,
    Session,
    SessionStep,
)
from gold_ledger.validation import plain_label


class Command(str, Enum):
    """Menu commands understood outside a dialog."""
    START = "start"
    RECORD_PURCHASE = "record_purchase"
    RECORD_SALE = "record_sale"
    SHOW_SUMMARY = "show_summary"
    EXPORT_CSV = "export_csv"
    EXPORT_XLSX = "export_xlsx"
    EXPORT_PDF = "export_pdf"


COMMAND_LABELS = {
    Command.RECORD_PURCHASE: "🟢 Record purchase",
    Command.RECORD_SALE: "🔴 Record sale",
    Command.SHOW_SUMMARY: "📈 Show summary",
    Command.EXPORT_CSV: "📤 Export CSV",
    Command.EXPORT_XLSX: "📤 Export spreadsheet",
    Command.EXPORT_PDF: "📤 Export document",
}

# Extra spellings accepted for commands
_COMMAND_ALIASES = {
    "/start": Command.START,
    "export xlsx": Command.EXPORT_XLSX,
    "export excel": Command.EXPORT_XLSX,
    "export pdf": Command.EXPORT_PDF,
}

EXPORT_COMMANDS = {
    Command.EXPORT_CSV: "csv",
    Command.EXPORT_XLSX: "xlsx",
    Command.EXPORT_PDF: "pdf",
}

START_COMMANDS = {
    Command.RECORD_PURCHASE: Direction.BUY,
    Command.RECORD_SALE: Direction.SELL,
}

ITEM_KIND_OPTIONS = {
    "🟡 Gold": ItemKind.GOLD,
    "🪙 Coin": ItemKind.COIN,
    "💵 Currency": ItemKind.CURRENCY,
}

COIN_OPTIONS = {
    "Full coin": CoinType.FULL,
    "Half coin": CoinType.HALF,
    "Quarter coin": CoinType.QUARTER,
    "Gram coin": CoinType.GRAM,
}

CURRENCY_OPTIONS = {
    "USD": CurrencyCode.USD,
    "EUR": CurrencyCode.EUR,
    "GBP": CurrencyCode.GBP,
    "AED": CurrencyCode.AED,
    "TRY": CurrencyCode.TRY,
}

DIRECTION_LABELS = {
    Direction.BUY: "Purchase",
    Direction.SELL: "Sale",
}

NOTE_SKIP_LABEL = "-"


def parse_command(text: Optional[str]) -> Optional[Command]:
    """Map a menu label (or one of its aliases) to a Command."""
    if not text:
        return None
    candidate = text.strip()
    if candidate in _COMMAND_ALIASES:
        return _COMMAND_ALIASES[candidate]

    plain = plain_label(candidate)
    if plain in _COMMAND_ALIASES:
        return _COMMAND_ALIASES[plain]
    for command, label in COMMAND_LABELS.items():
        if candidate == label or plain == plain_label(label):
            return command
    return None


def main_menu(export_formats: list[str]) -> Prompt:
    """The main menu keyboard with only the enabled export formats."""
    exports = [
        COMMAND_LABELS[command]
        for command, fmt in EXPORT_COMMANDS.items()
        if fmt in export_formats
    ]
    keyboard = [
        [COMMAND_LABELS[Command.RECORD_PURCHASE], COMMAND_LABELS[Command.RECORD_SALE]],
        [COMMAND_LABELS[Command.SHOW_SUMMARY]],
    ]
    if exports:
        keyboard.append(exports)
    return Prompt(text="📊 Please choose an option:", keyboard=keyboard)


def _keyboard(options: dict, per_row: int = 3) -> list[list[str]]:
    labels = list(options)
    return [labels[i:i + per_row] for i in range(0, len(labels), per_row)]


def step_prompt(session: Session, currency_label: str = "Toman") -> Prompt:
    """Prompt asking for the field the session's current step needs."""
    step = session.step
    action = "buy" if session.direction == Direction.BUY else "sell"
    deal = DIRECTION_LABELS[session.direction].lower()

    if step == SessionStep.AWAITING_NAME:
        return Prompt(text="👤 Who is the other party? Please enter a name:")
    if step == SessionStep.AWAITING_ITEM_KIND:
        return Prompt(
            text=f"📦 What did you {action}?",
            keyboard=_keyboard(ITEM_KIND_OPTIONS),
        )
    if step == SessionStep.AWAITING_UNIT_PRICE_GOLD:
        return Prompt(
            text=f"💰 Please enter today's price of one mithqal of gold ({currency_label}):"
        )
    if step == SessionStep.AWAITING_COIN_SUBTYPE:
        return Prompt(text="🪙 Which coin?", keyboard=_keyboard(COIN_OPTIONS, per_row=2))
    if step == SessionStep.AWAITING_CURRENCY_SUBTYPE:
        return Prompt(text="💵 Which currency?", keyboard=_keyboard(CURRENCY_OPTIONS))
    if step == SessionStep.AWAITING_BASE_PRICE:
        unit = "coin" if session.item_kind == ItemKind.COIN else "unit"
        return Prompt(text=f"💰 Please enter the price per {unit} ({currency_label}):")
    if step == SessionStep.AWAITING_TOTAL_OR_QUANTITY:
        if session.item_kind == ItemKind.COIN:
            return Prompt(text="🔢 How many coins?")
        if session.item_kind == ItemKind.CURRENCY:
            return Prompt(text="🔢 How many units?")
        return Prompt(
            text=f"💵 Please enter the total amount of the {deal} ({currency_label}):"
        )
    if step == SessionStep.AWAITING_NOTE:
        return Prompt(
            text=f"📝 Add a note (send {NOTE_SKIP_LABEL} to skip):",
            keyboard=[[NOTE_SKIP_LABEL]],
        )
    if step == SessionStep.COMPLETE:
        return Prompt(text="✅ All details received.")
    raise ValueError(f"Unknown dialog step: {step}")
