"""
Tax Return Aggregator - annual income, tax and retained-earnings summary.

Pure functions with no I/O.  For one company and fiscal year:

    gross income      = income entry amounts dated in the year
                        + subtotals of paid invoices issued in the year
    total expenses    = expense amounts dated in the year
                        + depreciation entries for that fiscal year
    pre-tax net       = gross income - total expenses
    small-business tax = max(0, round(pre-tax net * small business rate))
    post-tax net      = pre-tax net - tax
    retained earnings = prior retained earnings + post-tax net
                        - dividends declared in the year

Sales tax collected, paid and remittance come from the TaxLedger over the
same fiscal-year bounds.

The income and expense sub-ledgers must both be supplied and must cover
the whole fiscal year; otherwise the figures would silently understate
the year and IncompleteFiscalYearError is raised instead.
"""

from __future__ import annotations

import time
from datetime import date
from decimal import Decimal

from books_engines.tax_ledger import TaxLedger
from books_kernel.domain.periods import fiscal_year_bounds, in_period
from books_kernel.domain.records import (
    Company,
    InvoiceStatus,
    LedgerRecords,
    SubLedger,
    TaxReturn,
)
from books_kernel.domain.values import DEFAULT_ROUNDING, Currency
from books_kernel.exceptions import IncompleteFiscalYearError
from books_kernel.logging_config import get_logger

logger = get_logger("engines.tax_return")

ZERO = Decimal("0")


class TaxReturnAggregator:
    """
    Aggregate a fiscal year's records into a TaxReturn.

    Pure functions - no I/O, no database access.
    """

    def __init__(
        self,
        currency: Currency | str = "CAD",
        rounding: str = DEFAULT_ROUNDING,
    ):
        self._currency = Currency(currency) if isinstance(currency, str) else currency
        self._rounding = rounding
        self._tax_ledger = TaxLedger(self._currency, rounding)

    def _round(self, amount: Decimal) -> Decimal:
        return self._currency.round(amount, self._rounding)

    def aggregate(
        self,
        company: Company,
        fiscal_year: int,
        records: LedgerRecords,
        prior_retained_earnings: Decimal = ZERO,
    ) -> TaxReturn:
        """
        Build the tax return for ``fiscal_year``.

        Raises:
            IncompleteFiscalYearError: If the income or expense sub-ledger
                is missing or does not span the fiscal year.
        """
        t0 = time.monotonic()
        start, end = fiscal_year_bounds(fiscal_year, company.fiscal_year_end)
        logger.info("tax_return_started", extra={
            "company_id": str(company.id),
            "fiscal_year": fiscal_year,
            "period_start": start,
            "period_end": end,
        })

        self._require_coverage(fiscal_year, "income", records.income, start, end)
        self._require_coverage(fiscal_year, "expenses", records.expenses, start, end)

        def mine(record) -> bool:
            return record.company_id == company.id

        income = sum(
            (e.amount for e in records.income_entries
             if mine(e) and in_period(e.income_date, start, end)),
            ZERO,
        )
        invoiced = sum(
            (inv.subtotal for inv in records.invoices
             if mine(inv)
             and inv.status is InvoiceStatus.PAID
             and in_period(inv.issue_date, start, end)),
            ZERO,
        )
        operating = sum(
            (e.amount for e in records.expense_entries
             if mine(e) and in_period(e.expense_date, start, end)),
            ZERO,
        )
        depreciation = sum(
            (d.amount for d in records.depreciation_entries
             if mine(d) and d.fiscal_year == fiscal_year),
            ZERO,
        )
        dividends = sum(
            (d.amount for d in records.dividends
             if mine(d) and in_period(d.declaration_date, start, end)),
            ZERO,
        )

        gross_income = self._round(income + invoiced)
        operating = self._round(operating)
        depreciation = self._round(depreciation)
        total_expenses = operating + depreciation
        pre_tax = gross_income - total_expenses
        tax = max(ZERO, self._round(pre_tax * company.small_business_rate))
        post_tax = pre_tax - tax
        dividends = self._round(dividends)
        retained = prior_retained_earnings + post_tax - dividends

        ledger = self._tax_ledger.compute(company, start, end, records)

        tax_return = TaxReturn(
            company_id=company.id,
            fiscal_year=fiscal_year,
            period_start=start,
            period_end=end,
            gross_income=gross_income,
            operating_expenses=operating,
            depreciation=depreciation,
            total_expenses=total_expenses,
            net_income_before_tax=pre_tax,
            small_business_tax=tax,
            net_income_after_tax=post_tax,
            tax_collected=ledger.tax_collected,
            tax_paid=ledger.tax_paid,
            tax_remittance=ledger.remittance,
            dividends_declared=dividends,
            prior_retained_earnings=prior_retained_earnings,
            retained_earnings=retained,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("tax_return_completed", extra={
            "company_id": str(company.id),
            "fiscal_year": fiscal_year,
            "gross_income": str(gross_income),
            "total_expenses": str(total_expenses),
            "net_income_before_tax": str(pre_tax),
            "small_business_tax": str(tax),
            "retained_earnings": str(retained),
            "duration_ms": duration_ms,
        })

        return tax_return

    @staticmethod
    def _require_coverage(
        fiscal_year: int,
        ledger: str,
        sub_ledger: SubLedger | None,
        start: date,
        end: date,
    ) -> None:
        if sub_ledger is None:
            logger.warning("tax_return_ledger_missing", extra={
                "fiscal_year": fiscal_year,
                "ledger": ledger,
            })
            raise IncompleteFiscalYearError(fiscal_year, ledger)
        if not sub_ledger.covers(start, end):
            logger.warning("tax_return_ledger_incomplete", extra={
                "fiscal_year": fiscal_year,
                "ledger": ledger,
                "covers_from": sub_ledger.covers_from,
                "covers_to": sub_ledger.covers_to,
            })
            raise IncompleteFiscalYearError(
                fiscal_year, ledger, sub_ledger.covers_from, sub_ledger.covers_to,
            )
