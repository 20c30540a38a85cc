"""
Tax Ledger - sales tax collected, paid and owing for a period.

Pure functions with no I/O.  Folds one company's records into a period
summary:

    collected  = tax on issued invoices (sent, paid, overdue) issued in the
                 period + tax on income entries dated in the period
    paid       = tax paid on expenses dated in the period + tax paid on
                 capital assets purchased in the period
    remittance = collected - paid (negative means a refund is due)

Sales-tax payments already sent for the period reduce the balance owing.
Records belonging to another company are ignored.  Dates are inclusive on
both ends.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from books_kernel.domain.periods import in_period, validate_period
from books_kernel.domain.records import Company, LedgerRecords
from books_kernel.domain.values import DEFAULT_ROUNDING, Currency
from books_kernel.logging_config import get_logger

logger = get_logger("engines.tax_ledger")


@dataclass(frozen=True)
class TaxLedgerSummary:
    """Sales tax position of one company over one period."""

    company_id: UUID
    period_start: date
    period_end: date
    invoice_tax: Decimal
    income_tax: Decimal
    expense_tax: Decimal
    asset_tax: Decimal
    tax_collected: Decimal
    tax_paid: Decimal
    remittance: Decimal
    payments_made: Decimal
    balance_owing: Decimal
    currency: Currency


def _total(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, Decimal("0"))


class TaxLedger:
    """
    Compute period sales-tax summaries.

    Pure functions - no I/O, no database access.
    """

    def __init__(
        self,
        currency: Currency | str = "CAD",
        rounding: str = DEFAULT_ROUNDING,
    ):
        self._currency = Currency(currency) if isinstance(currency, str) else currency
        self._rounding = rounding

    def _round(self, amount: Decimal) -> Decimal:
        return self._currency.round(amount, self._rounding)

    def compute(
        self,
        company: Company,
        period_start: date,
        period_end: date,
        records: LedgerRecords,
    ) -> TaxLedgerSummary:
        """
        Summarize sales tax for ``company`` over [period_start, period_end].

        Missing income or expense sub-ledgers are treated as empty.

        Raises:
            InvalidPeriodError: If period_end < period_start.
        """
        t0 = time.monotonic()
        logger.info("tax_ledger_started", extra={
            "company_id": str(company.id),
            "period_start": period_start,
            "period_end": period_end,
        })
        validate_period(period_start, period_end)

        def mine(record) -> bool:
            return record.company_id == company.id

        invoice_tax = _total(
            inv.tax_amount for inv in records.invoices
            if mine(inv)
            and inv.status.is_issued
            and in_period(inv.issue_date, period_start, period_end)
        )
        income_tax = _total(
            entry.tax_amount for entry in records.income_entries
            if mine(entry) and in_period(entry.income_date, period_start, period_end)
        )
        expense_tax = _total(
            exp.tax_paid for exp in records.expense_entries
            if mine(exp) and in_period(exp.expense_date, period_start, period_end)
        )
        asset_tax = _total(
            asset.tax_paid for asset in records.capital_assets
            if mine(asset) and in_period(asset.purchase_date, period_start, period_end)
        )
        payments_made = _total(
            payment.amount for payment in records.sales_tax_payments
            if mine(payment) and in_period(payment.payment_date, period_start, period_end)
        )

        collected = self._round(invoice_tax + income_tax)
        paid = self._round(expense_tax + asset_tax)
        remittance = collected - paid
        payments_made = self._round(payments_made)

        summary = TaxLedgerSummary(
            company_id=company.id,
            period_start=period_start,
            period_end=period_end,
            invoice_tax=self._round(invoice_tax),
            income_tax=self._round(income_tax),
            expense_tax=self._round(expense_tax),
            asset_tax=self._round(asset_tax),
            tax_collected=collected,
            tax_paid=paid,
            remittance=remittance,
            payments_made=payments_made,
            balance_owing=remittance - payments_made,
            currency=self._currency,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("tax_ledger_completed", extra={
            "company_id": str(company.id),
            "tax_collected": str(collected),
            "tax_paid": str(paid),
            "remittance": str(remittance),
            "balance_owing": str(summary.balance_owing),
            "duration_ms": duration_ms,
        })

        return summary
