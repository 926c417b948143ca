# common/money.py

from decimal import ROUND_HALF_UP, Decimal

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
# Largest amount a max_digits=12, decimal_places=2 column holds.
MAX_AMOUNT = Decimal("9999999999.99")


def money(v) -> Decimal:
    """
    Normalize any numeric input to a 2dp Decimal (ROUND_HALF_UP).

    Raises decimal.InvalidOperation for non-numeric input; callers turn that
    into a domain ValidationError.
    """
    return Decimal(str(v if v is not None else "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def percentage_of(base, pct) -> Decimal:
    return money(Decimal(str(base)) * Decimal(str(pct)) / HUNDRED)
