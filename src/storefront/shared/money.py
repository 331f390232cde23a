"""Currency amounts.

Amounts are held as :class:`decimal.Decimal` in memory and persisted as
canonical strings with exactly two fractional digits (``"1000.00"``), so no
binary floating point ever touches a price or a total.
"""

from decimal import Decimal, InvalidOperation

from protean.exceptions import ValidationError

CENT = Decimal("0.01")


def parse_amount(value, field: str = "price", allow_zero: bool = False) -> Decimal:
    """Parse a user or storage supplied amount into a 2-dp Decimal.

    Rejects non-numeric input, negative values (and zero unless allowed) and
    more than two fractional digits.
    """
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({field: [f"{value!r} is not a valid amount"]}) from None

    if not amount.is_finite():
        raise ValidationError({field: [f"{value!r} is not a valid amount"]})
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError({field: ["Amount must be greater than zero"]})
    if amount != amount.quantize(CENT):
        raise ValidationError({field: ["Amount cannot have more than two decimal places"]})

    return amount.quantize(CENT)


def format_amount(amount: Decimal) -> str:
    return str(Decimal(amount).quantize(CENT))
