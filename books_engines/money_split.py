"""
Money Splitter - split an amount into base and sales tax.

Pure functions with no I/O.  Decimal arithmetic throughout; every figure
is rounded to the currency's precision with the configured rounding mode
(ROUND_HALF_EVEN unless told otherwise).

Two directions:
    - known base:   tax = round(base * rate), gross = base + tax
    - tax-inclusive: base = round(gross / (1 + rate)), tax = gross - base

In both directions base + tax == gross exactly.

Usage:
    from books_engines.money_split import MoneySplitter
    from books_kernel.domain.values import Money
    from decimal import Decimal

    split = MoneySplitter().split(Money.of("100.00", "CAD"), Decimal("0.13"))
    split.tax    # Money: 13.00 CAD
    split.gross  # Money: 113.00 CAD
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from books_kernel.domain.records import check_rate
from books_kernel.domain.values import DEFAULT_ROUNDING, Money, to_decimal
from books_kernel.logging_config import get_logger

logger = get_logger("engines.money_split")


@dataclass(frozen=True)
class MoneySplit:
    """
    An amount split into its pre-tax base and sales tax.

    Immutable value object; base + tax == gross.
    """

    base: Money
    tax: Money
    gross: Money
    rate: Decimal

    @property
    def effective_rate(self) -> Decimal:
        """Effective rate after rounding (tax / base)."""
        if self.base.is_zero:
            return Decimal("0")
        return self.tax.amount / self.base.amount


class MoneySplitter:
    """
    Split amounts into base and tax.

    Pure functions - no I/O, no database access.
    """

    def __init__(self, rounding: str = DEFAULT_ROUNDING):
        self._rounding = rounding

    @property
    def rounding(self) -> str:
        return self._rounding

    def round(self, amount: Money) -> Money:
        """Round to currency precision with this splitter's rounding mode."""
        return amount.round(self._rounding)

    def split(
        self,
        amount: Money,
        rate: Decimal | str | int,
        tax_inclusive: bool = False,
    ) -> MoneySplit:
        """
        Split an amount at a sales-tax rate.

        Args:
            amount: The base (default) or the tax-inclusive gross amount.
            rate: Sales tax rate as a fraction, e.g. Decimal("0.13").
            tax_inclusive: True if ``amount`` already includes tax.

        Returns:
            MoneySplit with rounded base, tax and gross.

        Raises:
            InvalidRateError: If rate is outside [0, 1].
            TypeError: If rate is a float.
        """
        rate = to_decimal(rate)
        check_rate(rate)

        if tax_inclusive:
            gross = self.round(amount)
            base = self.round(gross / (Decimal("1") + rate))
            tax = gross - base
        else:
            base = self.round(amount)
            tax = self.round(base * rate)
            gross = base + tax

        logger.debug("money_split_computed", extra={
            "currency": amount.currency.code,
            "rate": str(rate),
            "tax_inclusive": tax_inclusive,
            "base": str(base.amount),
            "tax": str(tax.amount),
            "gross": str(gross.amount),
        })

        return MoneySplit(base=base, tax=tax, gross=gross, rate=rate)

    def combine(self, base: Money, tax: Money) -> MoneySplit:
        """
        Wrap a base and an already-known tax amount (e.g. an expense receipt).

        The implied rate is informational only and is not validated.
        """
        base = self.round(base)
        tax = self.round(tax)
        rate = tax.amount / base.amount if not base.is_zero else Decimal("0")
        return MoneySplit(base=base, tax=tax, gross=base + tax, rate=rate)
