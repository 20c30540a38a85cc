"""
Invoice Calculator - line totals, subtotal, sales tax and grand total.

Pure functions with no I/O.  The sales-tax rate is supplied by the caller
(normally the company's configured rate); a tax-exempt client is never
charged tax.

Also covers the per-record tax rules for the other money-in and money-out
records the books carry:
    - income entries are taxed unless they are client income from a
      tax-exempt client
    - expenses carry the tax actually paid on the receipt

Usage:
    from books_engines.invoicing import InvoiceCalculator
    from books_kernel.domain.records import InvoiceItem
    from decimal import Decimal

    totals = InvoiceCalculator().compute(
        items=[InvoiceItem("Consulting", Decimal("40"), Decimal("75.00"))],
        client_exempt=False,
        rate=Decimal("0.13"),
    )
    totals.subtotal  # Decimal("3000.00")
    totals.tax       # Decimal("390.00")
    totals.total     # Decimal("3390.00")
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from books_engines.money_split import MoneySplit, MoneySplitter
from books_kernel.domain.records import (
    Company,
    Expense,
    IncomeType,
    InvoiceItem,
    check_rate,
)
from books_kernel.domain.values import DEFAULT_ROUNDING, Currency, Money, to_decimal
from books_kernel.exceptions import EmptyInvoiceError, NegativeQuantityOrPriceError
from books_kernel.logging_config import get_logger

logger = get_logger("engines.invoicing")


@dataclass(frozen=True)
class InvoiceTotals:
    """
    Derived invoice figures.

    lines carry their computed line_total; total == subtotal + tax.
    """

    lines: tuple[InvoiceItem, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    currency: Currency


def sales_tax_rate_for(company: Company) -> Decimal:
    """Rate to charge on the company's invoices (zero if not registered)."""
    return company.sales_tax_rate if company.sales_tax_registered else Decimal("0")


def next_invoice_number(year: int, issued_count: int) -> str:
    """
    Sequential invoice number for a year, e.g. ``2025-0007``.

    ``issued_count`` is how many invoices the company already numbered in
    ``year``.
    """
    if issued_count < 0:
        raise ValueError(f"issued_count must not be negative, got {issued_count}")
    return f"{year:04d}-{issued_count + 1:04d}"


class InvoiceCalculator:
    """
    Compute invoice totals.

    Pure functions - no I/O, no database access.
    """

    def __init__(
        self,
        currency: Currency | str = "CAD",
        rounding: str = DEFAULT_ROUNDING,
    ):
        self._currency = Currency(currency) if isinstance(currency, str) else currency
        self._splitter = MoneySplitter(rounding)

    @property
    def currency(self) -> Currency:
        return self._currency

    def compute(
        self,
        items: Sequence[InvoiceItem],
        client_exempt: bool,
        rate: Decimal | str | int,
    ) -> InvoiceTotals:
        """
        Compute line totals, subtotal, tax and total.

        Args:
            items: Invoice lines (quantity and unit_price as Decimal).
            client_exempt: True if the client is exempt from sales tax.
            rate: Sales tax rate as a fraction.

        Returns:
            InvoiceTotals with rounded figures.

        Raises:
            EmptyInvoiceError: If there are no items.
            NegativeQuantityOrPriceError: If a quantity or unit price is negative.
            InvalidRateError: If rate is outside [0, 1].
        """
        t0 = time.monotonic()
        rate = to_decimal(rate)
        logger.info("invoice_totals_started", extra={
            "item_count": len(items),
            "client_exempt": client_exempt,
            "rate": str(rate),
            "currency": self._currency.code,
        })

        if not items:
            logger.warning("invoice_totals_empty", extra={})
            raise EmptyInvoiceError()
        check_rate(rate)

        lines: list[InvoiceItem] = []
        for index, item in enumerate(items):
            quantity = to_decimal(item.quantity)
            unit_price = to_decimal(item.unit_price)
            if quantity < 0 or unit_price < 0:
                logger.warning("invoice_line_negative", extra={
                    "line_index": index,
                    "quantity": str(quantity),
                    "unit_price": str(unit_price),
                })
                raise NegativeQuantityOrPriceError(index, quantity, unit_price)
            line_total = self._currency.round(quantity * unit_price, self._splitter.rounding)
            lines.append(replace(
                item, quantity=quantity, unit_price=unit_price, line_total=line_total,
            ))

        subtotal = Money(sum((line.line_total for line in lines), Decimal("0")), self._currency)
        effective_rate = Decimal("0") if client_exempt else rate
        split = self._splitter.split(subtotal, effective_rate)

        totals = InvoiceTotals(
            lines=tuple(lines),
            subtotal=split.base.amount,
            tax=split.tax.amount,
            total=split.gross.amount,
            currency=self._currency,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("invoice_totals_computed", extra={
            "line_count": len(lines),
            "subtotal": str(totals.subtotal),
            "tax": str(totals.tax),
            "total": str(totals.total),
            "duration_ms": duration_ms,
        })

        return totals

    def income_entry_totals(
        self,
        amount: Decimal | str | int,
        income_type: IncomeType,
        client_exempt: bool,
        rate: Decimal | str | int,
    ) -> MoneySplit:
        """
        Tax and total for a non-invoice income entry.

        Tax applies unless the entry is client income and the client is
        tax-exempt.  Capital and other income are always taxed at ``rate``.
        """
        exempt = income_type is IncomeType.CLIENT and client_exempt
        effective_rate = Decimal("0") if exempt else to_decimal(rate)
        split = self._splitter.split(Money.of(amount, self._currency), effective_rate)
        logger.debug("income_entry_totals_computed", extra={
            "income_type": income_type.value,
            "exempt": exempt,
            "tax": str(split.tax.amount),
        })
        return split

    def expense_totals(self, expense: Expense) -> MoneySplit:
        """Base, tax paid and total for an expense receipt."""
        return self._splitter.combine(
            Money.of(expense.amount, self._currency),
            Money.of(expense.tax_paid, self._currency),
        )
