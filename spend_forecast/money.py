from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from .errors import InvalidAmountError

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """Convert an int, float, str or Decimal amount to Decimal.

    Floats go through ``str`` so 0.1 stays 0.1 instead of its binary expansion.
    """
    if value is None:
        raise InvalidAmountError("missing amount")
    if isinstance(value, bool):
        raise InvalidAmountError(f"invalid amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidAmountError(f"invalid amount: {value!r}") from exc

    if not amount.is_finite():
        raise InvalidAmountError(f"invalid amount: {value!r}")
    return amount


def to_amount(value) -> Decimal:
    """Like ``to_decimal`` but rejects negative amounts"""
    amount = to_decimal(value)
    if amount < 0:
        raise InvalidAmountError(f"amount must not be negative: {value!r}")
    return amount


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def round_percent(value: Optional[Decimal]) -> Optional[int]:
    if value is None:
        return None
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
