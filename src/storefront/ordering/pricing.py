"""Order pricing in fixed-point decimal.

Prices arrive with two fractional digits and quantities are integers, so
line and order totals are exact without rounding. ``round_currency`` is the
one place rounding happens (half-up, to the cent) for any future discount
or tax rule.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from storefront.shared.money import CENT


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return Decimal(unit_price) * quantity


def order_total(lines: Iterable[tuple[Decimal, int]]) -> Decimal:
    """Sum of ``line_total`` over ``(unit_price, quantity)`` pairs."""
    return sum((line_total(price, qty) for price, qty in lines), Decimal("0.00"))


def round_currency(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
