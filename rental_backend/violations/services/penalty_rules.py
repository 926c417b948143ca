# violations/services/penalty_rules.py

"""
PENALTY RULES (PURE)

The penalty of one violation is bounded by the deposit held for the claimed
order line:

    0 <= penalty_amount <= deposit_per_unit * quantity

A claim may state a percentage, an amount, or both. A missing amount is
derived from the percentage; a missing percentage is derived from the amount.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from common.exceptions import PenaltyExceedsDepositError, ValidationError
from common.money import HUNDRED, ZERO, money, percentage_of


def as_decimal(value, *, field: str) -> Decimal | None:
    """
    Parse a money-like input. Non-numbers, NaN, infinities and values too
    large to hold two decimal places are rejected as ValidationError.
    """
    if value is None or value == "":
        return None
    try:
        parsed = Decimal(str(value))
        if not parsed.is_finite():
            raise ValidationError(f"{field} must be a finite number")
        money(parsed)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be a number") from exc
    return parsed


def validate_percentage(value, *, field: str) -> Decimal | None:
    pct = as_decimal(value, field=field)
    if pct is None:
        return None
    if pct < ZERO or pct > HUNDRED:
        raise ValidationError(f"{field} must be between 0 and 100")
    return money(pct)


def validate_penalty_amount(amount, *, deposit_base) -> Decimal:
    amount = money(as_decimal(amount, field="penalty_amount"))
    if amount < ZERO:
        raise ValidationError("penalty_amount cannot be negative")
    if amount > money(deposit_base):
        raise PenaltyExceedsDepositError(
            f"Penalty {amount} exceeds the deposit {money(deposit_base)} held for this item"
        )
    return amount


def resolve_penalty(
    *,
    deposit_base,
    penalty_percentage=None,
    penalty_amount=None,
) -> tuple[Decimal, Decimal]:
    """
    Returns (penalty_percentage, penalty_amount), both 2dp.
    """
    deposit_base = money(deposit_base)
    pct = validate_percentage(penalty_percentage, field="penalty_percentage")
    amount = as_decimal(penalty_amount, field="penalty_amount")

    if amount is None:
        amount = percentage_of(deposit_base, pct or ZERO)

    amount = validate_penalty_amount(amount, deposit_base=deposit_base)

    if pct is None:
        pct = money(amount * HUNDRED / deposit_base) if deposit_base > ZERO else ZERO

    return pct, amount
