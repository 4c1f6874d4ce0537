"""
Transaction Calculator

Pure functions deriving computed fields from the numbers captured during a
dialog. No I/O, no state.

Gold is quoted per mithqal; one mithqal is 4.3318 grams, so the weight
bought or sold is total / price-per-mithqal * 4.3318, rounded to grams
with 3 fractional digits.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


GRAMS_PER_MITHQAL = Decimal("4.3318")
WEIGHT_QUANTUM = Decimal("0.001")


class InvalidInput(ValueError):
    """A calculator input is outside its domain."""
    pass


def derive_gold_weight(unit_price: Decimal, total_amount: Decimal) -> Decimal:
    """
    Gold weight in grams for `total_amount` at `unit_price` per mithqal.

    Raises:
        InvalidInput: unit price not positive, total amount negative, or a
            weight too large to quantize
    """
    unit_price = Decimal(unit_price)
    total_amount = Decimal(total_amount)
    if unit_price <= 0:
        raise InvalidInput("Unit price must be greater than zero")
    if total_amount < 0:
        raise InvalidInput("Total amount cannot be negative")

    try:
        weight = total_amount / unit_price * GRAMS_PER_MITHQAL
        return weight.quantize(WEIGHT_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidInput("Weight is outside the representable range")


def derive_total(unit_price: Decimal, quantity: Decimal) -> Decimal:
    """Total amount for coins and currency: unit price times quantity."""
    unit_price = Decimal(unit_price)
    quantity = Decimal(quantity)
    if unit_price <= 0:
        raise InvalidInput("Unit price must be greater than zero")
    if quantity <= 0:
        raise InvalidInput("Quantity must be greater than zero")
    return unit_price * quantity
