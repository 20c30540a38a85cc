"""
Ledger Records.

The nouns of a small corporation's books: companies, clients, invoices,
expenses, income, capital assets, depreciation, dividends, owner payments
and sales-tax payments. Records arrive already validated from the
collaborator that owns storage; the engine only reads them and returns
derived values.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Generic, TypeVar
from uuid import UUID

from books_kernel.exceptions import BookValueMismatchError, InvalidRateError, NegativeAmountError


def check_rate(rate: Decimal, field_name: str = "rate", allow_zero: bool = True) -> None:
    """Raise InvalidRateError unless rate is in [0, 1] (or (0, 1])."""
    low_ok = rate >= 0 if allow_zero else rate > 0
    if not (low_ok and rate <= 1):
        raise InvalidRateError(rate, field=field_name, allow_zero=allow_zero)


class InvoiceStatus(Enum):
    """Invoice lifecycle states."""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"

    @property
    def is_issued(self) -> bool:
        """Issued invoices count toward sales tax collected."""
        return self in (InvoiceStatus.SENT, InvoiceStatus.PAID, InvoiceStatus.OVERDUE)


class PaidBy(Enum):
    """Who paid for an expense or asset."""
    CORP = "corp"
    OWNER = "owner"


class IncomeType(Enum):
    CLIENT = "client"
    CAPITAL = "capital"
    OTHER = "other"


class DividendStatus(Enum):
    DECLARED = "declared"
    PAID = "paid"


class OwnerPaymentType(Enum):
    REIMBURSEMENT = "reimbursement"
    LOAN_REPAYMENT = "loan_repayment"
    OTHER = "other"


@dataclass(frozen=True)
class Company:
    """A corporation whose books are being computed."""
    id: UUID
    name: str
    small_business_rate: Decimal = Decimal("0.15")
    sales_tax_rate: Decimal = Decimal("0.13")
    sales_tax_registered: bool = True
    fiscal_year_end: date | None = None  # only month/day matter; None means Dec 31

    def __post_init__(self) -> None:
        check_rate(self.small_business_rate, "small_business_rate")
        check_rate(self.sales_tax_rate, "sales_tax_rate")


@dataclass(frozen=True)
class Client:
    id: UUID
    company_id: UUID
    name: str
    tax_exempt: bool = False


@dataclass(frozen=True)
class InvoiceItem:
    """One invoice line. line_total is filled in by the invoice calculator."""
    description: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal | None = None


@dataclass(frozen=True)
class Invoice:
    id: UUID
    company_id: UUID
    client_id: UUID
    invoice_number: str
    issue_date: date
    due_date: date
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    status: InvoiceStatus = InvoiceStatus.DRAFT
    items: tuple[InvoiceItem, ...] = ()
    paid_date: date | None = None


@dataclass(frozen=True)
class Expense:
    id: UUID
    company_id: UUID
    description: str
    amount: Decimal
    tax_paid: Decimal
    expense_date: date
    paid_by: PaidBy = PaidBy.CORP
    category: str | None = None

    @property
    def total(self) -> Decimal:
        return self.amount + self.tax_paid


@dataclass(frozen=True)
class IncomeEntry:
    id: UUID
    company_id: UUID
    description: str
    amount: Decimal
    tax_amount: Decimal
    income_type: IncomeType
    income_date: date
    client_id: UUID | None = None

    @property
    def total(self) -> Decimal:
        return self.amount + self.tax_amount


@dataclass(frozen=True)
class CapitalAsset:
    """
    A depreciable capital asset.

    book_value == total_cost - accumulated_depreciation and never goes
    below zero. Once disposal_date is set the asset is terminal.
    """
    id: UUID
    company_id: UUID
    description: str
    purchase_date: date
    purchase_amount: Decimal
    tax_paid: Decimal
    total_cost: Decimal
    cca_class: str
    accumulated_depreciation: Decimal = Decimal("0")
    book_value: Decimal | None = None
    disposal_date: date | None = None
    disposal_amount: Decimal | None = None
    paid_by: PaidBy = PaidBy.CORP

    def __post_init__(self) -> None:
        expected = self.total_cost - self.accumulated_depreciation
        if self.book_value is None:
            object.__setattr__(self, "book_value", expected)
        elif self.book_value != expected:
            raise BookValueMismatchError(self.id, self.book_value, expected)
        if self.book_value < 0:
            raise NegativeAmountError("book_value", self.book_value)

    @property
    def is_disposed(self) -> bool:
        return self.disposal_date is not None


@dataclass(frozen=True)
class DepreciationEntry:
    id: UUID
    asset_id: UUID
    company_id: UUID
    fiscal_year: int
    amount: Decimal
    is_half_year: bool
    entry_date: date


@dataclass(frozen=True)
class Dividend:
    id: UUID
    company_id: UUID
    amount: Decimal
    declaration_date: date
    status: DividendStatus = DividendStatus.DECLARED
    payment_date: date | None = None


@dataclass(frozen=True)
class OwnerPayment:
    id: UUID
    company_id: UUID
    amount: Decimal
    payment_date: date
    payment_type: OwnerPaymentType
    description: str | None = None


@dataclass(frozen=True)
class SalesTaxPayment:
    """A remittance already sent to the tax authority."""
    id: UUID
    company_id: UUID
    amount: Decimal
    payment_date: date
    period_start: date
    period_end: date
    reference: str | None = None


# ---------------------------------------------------------------------------
# Engine inputs and outputs
# ---------------------------------------------------------------------------

T = TypeVar("T")


@dataclass(frozen=True)
class SubLedger(Generic[T]):
    """
    A batch of records together with the date span the supplier vouches for.

    An empty sub-ledger that covers a whole year means "nothing happened";
    a missing sub-ledger means "not supplied yet".
    """
    entries: tuple[T, ...]
    covers_from: date
    covers_to: date

    def covers(self, period_start: date, period_end: date) -> bool:
        return self.covers_from <= period_start and self.covers_to >= period_end


@dataclass(frozen=True)
class LedgerRecords:
    """Everything the collaborator supplies for one company."""
    invoices: tuple[Invoice, ...] = ()
    income: SubLedger[IncomeEntry] | None = None
    expenses: SubLedger[Expense] | None = None
    capital_assets: tuple[CapitalAsset, ...] = ()
    depreciation_entries: tuple[DepreciationEntry, ...] = ()
    dividends: tuple[Dividend, ...] = ()
    sales_tax_payments: tuple[SalesTaxPayment, ...] = ()

    @property
    def income_entries(self) -> tuple[IncomeEntry, ...]:
        return self.income.entries if self.income is not None else ()

    @property
    def expense_entries(self) -> tuple[Expense, ...]:
        return self.expenses.entries if self.expenses is not None else ()


@dataclass(frozen=True)
class TaxReturn:
    """Annual tax-return summary for one company and fiscal year."""
    company_id: UUID
    fiscal_year: int
    period_start: date
    period_end: date
    gross_income: Decimal
    operating_expenses: Decimal
    depreciation: Decimal
    total_expenses: Decimal
    net_income_before_tax: Decimal
    small_business_tax: Decimal
    net_income_after_tax: Decimal
    tax_collected: Decimal
    tax_paid: Decimal
    tax_remittance: Decimal
    dividends_declared: Decimal
    prior_retained_earnings: Decimal
    retained_earnings: Decimal
