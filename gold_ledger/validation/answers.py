"""
Dialog Answer Validation

Every answer typed during a dialog passes through here before it touches
the session. Validation NEVER silently fixes a value: text that does not
parse is rejected with a message the user can act on, and the dialog stays
on the same step.

Numbers may be typed with Persian or Arabic-Indic digits and with
thousands separators; those are normalised before parsing.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Mapping, Optional, TypeVar


E = TypeVar("E", bound=Enum)

# Persian (U+06F0..) and Arabic-Indic (U+0660..) digits to ASCII
_DIGIT_TABLE = {
    **{ord(ch): str(i) for i, ch in enumerate("۰۱۲۳۴۵۶۷۸۹")},
    **{ord(ch): str(i) for i, ch in enumerate("٠١٢٣٤٥٦٧٨٩")},
    ord("٫"): ".",  # Arabic decimal separator
}
_GROUP_SEPARATORS = (",", "٬", "،", " ", "\u00a0", "\u202f", "_")

# Largest accepted answer is 999,999,999,999,999; finest step is 0.000001
MAX_INTEGER_DIGITS = 15
MAX_FRACTION_DIGITS = 6


class AnswerRejected(ValueError):
    """Base class for answers that cannot be accepted at the current step."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.raw_text = raw_text


class InvalidNumericInput(AnswerRejected):
    """Text for a numeric step is not a usable number."""
    pass


class InvalidChoice(AnswerRejected):
    """Text for a choice step is not one of the offered options."""
    pass


def normalize_number_text(text: str) -> str:
    """Map localized digits to ASCII and drop grouping separators."""
    normalized = text.strip().translate(_DIGIT_TABLE)
    for separator in _GROUP_SEPARATORS:
        normalized = normalized.replace(separator, "")
    return normalized


def parse_number(
    text: Optional[str],
    *,
    allow_zero: bool = False,
) -> Decimal:
    """
    Parse a strictly positive (or, with allow_zero, non-negative) number.

    Raises:
        InvalidNumericInput: empty text, not a finite number, or out of range
    """
    if text is None or not text.strip():
        raise InvalidNumericInput("❌ Please enter a number.", text)

    try:
        value = Decimal(normalize_number_text(text))
    except InvalidOperation:
        raise InvalidNumericInput("❌ Please enter numbers only.", text)

    if not value.is_finite():
        raise InvalidNumericInput("❌ Please enter numbers only.", text)

    if value.adjusted() >= MAX_INTEGER_DIGITS:
        raise InvalidNumericInput("❌ The number is too large.", text)
    if value.normalize().as_tuple().exponent < -MAX_FRACTION_DIGITS:
        raise InvalidNumericInput(
            f"❌ Please use at most {MAX_FRACTION_DIGITS} decimal places.", text
        )

    if value < 0:
        raise InvalidNumericInput("❌ The number cannot be negative.", text)
    if value == 0 and not allow_zero:
        raise InvalidNumericInput("❌ The number must be greater than zero.", text)

    return value


def plain_label(label: str) -> str:
    """Drop leading emoji/symbols from a keyboard label: '🟡 Gold' -> 'gold'."""
    stripped = label.strip()
    index = 0
    while index < len(stripped) and not stripped[index].isalnum():
        index += 1
    return stripped[index:].strip().casefold()


def parse_choice(text: Optional[str], options: Mapping[str, E]) -> E:
    """
    Resolve a keyboard label (or the enum value itself) to its option.

    Matching ignores case, surrounding whitespace and the label's emoji.

    Raises:
        InvalidChoice: the text is not one of the offered options
    """
    candidate = (text or "").strip().casefold()
    if candidate:
        for label, option in options.items():
            accepted = (
                label.casefold(),
                plain_label(label),
                str(option.value).casefold(),
            )
            if candidate in accepted or plain_label(candidate) in accepted:
                return option

    raise InvalidChoice("❌ Please choose one of the options below.", text)


def parse_free_text(text: Optional[str], *, placeholder: Optional[str] = None) -> str:
    """
    Accept any text. Empty answers become `placeholder` when one is given.
    """
    value = (text or "").strip()
    if not value and placeholder is not None:
        return placeholder
    return value
