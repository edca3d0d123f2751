# deal_checker/parsers/discount_calculator.py

"""Discount percentage and saved amount from an (original, current) pair."""

from decimal import Decimal

from deal_checker.models.deal import Discount
from deal_checker.parsers.price_parser import round_money

_ZERO = Decimal("0.00")


def compute_discount(
    original: Decimal | None,
    current: Decimal | None,
) -> Discount:
    """Derive the discount for a price pair.

    - either price absent → no discount, percentage and saving unknown
    - current >= original → no discount, 0% and 0 saved
    - current < original → percentage and saving rounded to 2 dp
    """
    if original is None or current is None:
        return Discount(has_discount=False)
    if current >= original:
        return Discount(
            has_discount=False,
            percentage=_ZERO,
            saved_amount=_ZERO,
        )
    saved = original - current
    return Discount(
        has_discount=True,
        percentage=round_money(saved / original * 100),
        saved_amount=round_money(saved),
    )
