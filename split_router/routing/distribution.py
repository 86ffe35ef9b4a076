"""Amount ladder for batched price discovery.

The requested amount is cut into fractions S%, 2S%, ..., 100%. Every candidate
route is quoted at every rung, and the split search combines rungs whose
percents add up to 100.
"""

from __future__ import annotations

from fractions import Fraction

from split_router.config import validate_distribution_percent


def get_amount_distribution(amount: int | Fraction, distribution_percent: int) -> tuple[list[int], list[Fraction]]:
    """Split `amount` into a ladder of exact fractions.

    Multiplication is exact; precision is only lost later, when each rung is
    floored to the raw integer amount actually quoted. Reconciliation of the
    winning split puts that loss back.

    Args:
        amount: Total trade amount in raw token units
        distribution_percent: Step in percent (must divide 100)

    Returns:
        (percents, amounts) where amounts[i] == amount * percents[i] / 100

    Raises:
        ConfigError: If distribution_percent does not divide 100
    """
    validate_distribution_percent(distribution_percent)
    total = Fraction(amount)

    percents: list[int] = []
    amounts: list[Fraction] = []
    for i in range(1, 100 // distribution_percent + 1):
        percent = i * distribution_percent
        percents.append(percent)
        amounts.append(total * Fraction(percent, 100))

    return percents, amounts


def to_raw_amount(amount: Fraction) -> int:
    """Floor an exact amount to the raw integer units a swap can execute."""
    return amount.numerator // amount.denominator


__all__ = ["get_amount_distribution", "to_raw_amount"]
