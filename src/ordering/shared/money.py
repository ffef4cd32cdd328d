"""Fixed-point money helpers.

Amounts are ``Decimal`` values quantized to cents. Floats are converted via
their string form so ``10.1`` becomes ``Decimal("10.10")`` rather than the
nearest binary fraction.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ordering.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value, field: str = "amount") -> Decimal:
    """Coerce ``value`` to a two-place Decimal."""
    if isinstance(value, bool):
        raise ValidationError({field: [f"Invalid monetary amount: {value!r}"]})
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError({field: [f"Invalid monetary amount: {value!r}"]}) from exc
    if not amount.is_finite():
        raise ValidationError({field: [f"Invalid monetary amount: {value!r}"]})
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal, symbol: str = "$") -> str:
    return f"{symbol}{to_money(amount):,.2f}"
