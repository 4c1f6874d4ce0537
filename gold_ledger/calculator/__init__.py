"""Transaction calculator package."""

from gold_ledger.calculator.formulas import (
    GRAMS_PER_MITHQAL,
    InvalidInput,
    derive_gold_weight,
    derive_total,
)

__all__ = [
    "GRAMS_PER_MITHQAL",
    "InvalidInput",
    "derive_gold_weight",
    "derive_total",
]
