"""Validation package."""

from gold_ledger.validation.answers import (
    AnswerRejected,
    InvalidChoice,
    InvalidNumericInput,
    MAX_FRACTION_DIGITS,
    MAX_INTEGER_DIGITS,
    normalize_number_text,
    parse_choice,
    parse_free_text,
    parse_number,
    plain_label,
)

__all__ = [
    "AnswerRejected",
    "InvalidChoice",
    "InvalidNumericInput",
    "MAX_FRACTION_DIGITS",
    "MAX_INTEGER_DIGITS",
    "normalize_number_text",
    "parse_choice",
    "parse_free_text",
    "parse_number",
    "plain_label",
]
