"""Record builders shared by the test modules."""

from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

from books_kernel.domain.records import (
    CapitalAsset,
    DepreciationEntry,
    Dividend,
    Expense,
    IncomeEntry,
    IncomeType,
    Invoice,
    InvoiceStatus,
    OwnerPayment,
    OwnerPaymentType,
    SalesTaxPayment,
    SubLedger,
)


def full_year(entries, year: int) -> SubLedger:
    """A sub-ledger vouching for the whole calendar year."""
    return SubLedger(tuple(entries), date(year, 1, 1), date(year, 12, 31))


def make_invoice(
    company_id: UUID,
    issue_date: date,
    subtotal: str,
    tax: str,
    status: InvoiceStatus = InvoiceStatus.SENT,
) -> Invoice:
    subtotal_d, tax_d = Decimal(subtotal), Decimal(tax)
    return Invoice(
        id=uuid4(),
        company_id=company_id,
        client_id=uuid4(),
        invoice_number=f"{issue_date.year}-0001",
        issue_date=issue_date,
        due_date=issue_date + timedelta(days=30),
        subtotal=subtotal_d,
        tax_amount=tax_d,
        total=subtotal_d + tax_d,
        status=status,
    )


def make_income(
    company_id: UUID,
    income_date: date,
    amount: str,
    tax: str = "0",
    income_type: IncomeType = IncomeType.CLIENT,
) -> IncomeEntry:
    return IncomeEntry(
        id=uuid4(),
        company_id=company_id,
        description="Income",
        amount=Decimal(amount),
        tax_amount=Decimal(tax),
        income_type=income_type,
        income_date=income_date,
    )


def make_expense(company_id: UUID, expense_date: date, amount: str, tax: str = "0") -> Expense:
    return Expense(
        id=uuid4(),
        company_id=company_id,
        description="Expense",
        amount=Decimal(amount),
        tax_paid=Decimal(tax),
        expense_date=expense_date,
    )


def make_asset(
    company_id: UUID,
    purchase_date: date,
    cost: str,
    tax: str = "0",
    cca_class: str = "8",
    **overrides,
) -> CapitalAsset:
    purchase, tax_paid = Decimal(cost), Decimal(tax)
    return CapitalAsset(
        id=overrides.pop("id", uuid4()),
        company_id=company_id,
        description="Asset",
        purchase_date=purchase_date,
        purchase_amount=purchase,
        tax_paid=tax_paid,
        total_cost=purchase + tax_paid,
        cca_class=cca_class,
        **overrides,
    )


def make_depreciation(
    asset: CapitalAsset, fiscal_year: int, amount: str, is_half_year: bool = False,
) -> DepreciationEntry:
    return DepreciationEntry(
        id=uuid4(),
        asset_id=asset.id,
        company_id=asset.company_id,
        fiscal_year=fiscal_year,
        amount=Decimal(amount),
        is_half_year=is_half_year,
        entry_date=date(fiscal_year, 12, 31),
    )


def make_dividend(company_id: UUID, declaration_date: date, amount: str) -> Dividend:
    return Dividend(
        id=uuid4(),
        company_id=company_id,
        amount=Decimal(amount),
        declaration_date=declaration_date,
    )


def make_owner_payment(
    company_id: UUID,
    payment_date: date,
    amount: str,
    payment_type: OwnerPaymentType = OwnerPaymentType.REIMBURSEMENT,
) -> OwnerPayment:
    return OwnerPayment(
        id=uuid4(),
        company_id=company_id,
        amount=Decimal(amount),
        payment_date=payment_date,
        payment_type=payment_type,
    )


def make_sales_tax_payment(company_id: UUID, payment_date: date, amount: str) -> SalesTaxPayment:
    return SalesTaxPayment(
        id=uuid4(),
        company_id=company_id,
        amount=Decimal(amount),
        payment_date=payment_date,
        period_start=date(payment_date.year, 1, 1),
        period_end=payment_date,
    )
