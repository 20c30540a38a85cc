"""
Owner distributions - statistics over payments from the corporation to its owner.

Pure functions with no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from books_kernel.domain.periods import in_period, validate_period
from books_kernel.domain.records import OwnerPayment, OwnerPaymentType
from books_kernel.logging_config import get_logger

logger = get_logger("engines.distributions")


@dataclass(frozen=True)
class OwnerPaymentSummary:
    period_start: date
    period_end: date
    total_paid: Decimal
    reimbursement_total: Decimal
    loan_repayment_total: Decimal
    other_total: Decimal
    payment_count: int


def summarize_owner_payments(
    payments: Iterable[OwnerPayment],
    period_start: date,
    period_end: date,
    company_id: UUID | None = None,
) -> OwnerPaymentSummary:
    """
    Totals by payment type for payments dated in [period_start, period_end].

    If ``company_id`` is given, payments of other companies are ignored.

    Raises:
        InvalidPeriodError: If period_end < period_start.
    """
    validate_period(period_start, period_end)

    totals = {kind: Decimal("0") for kind in OwnerPaymentType}
    count = 0
    for payment in payments:
        if company_id is not None and payment.company_id != company_id:
            continue
        if not in_period(payment.payment_date, period_start, period_end):
            continue
        totals[payment.payment_type] += payment.amount
        count += 1

    summary = OwnerPaymentSummary(
        period_start=period_start,
        period_end=period_end,
        total_paid=sum(totals.values(), Decimal("0")),
        reimbursement_total=totals[OwnerPaymentType.REIMBURSEMENT],
        loan_repayment_total=totals[OwnerPaymentType.LOAN_REPAYMENT],
        other_total=totals[OwnerPaymentType.OTHER],
        payment_count=count,
    )
    logger.debug("owner_payments_summarized", extra={
        "payment_count": count,
        "total_paid": str(summary.total_paid),
    })
    return summary
