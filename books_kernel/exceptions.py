"""
Typed Exception Hierarchy for the Books Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from BooksError:

    BooksError (base)
    |
    +-- ValidationError
    |   +-- InvalidRateError
    |   +-- EmptyInvoiceError
    |   +-- NegativeQuantityOrPriceError
    |   +-- NegativeAmountError
    |   +-- BookValueMismatchError
    |   +-- UnknownCCAClassError
    |   +-- InvalidPeriodError
    |   +-- DisposalBeforeAcquisitionError
    |   +-- FiscalYearBeforeAcquisitionError
    |
    +-- ConflictError
    |   +-- DuplicateDepreciationYearError
    |   +-- DepreciationYearOutOfOrderError
    |   +-- AssetDisposedError
    |   +-- AlreadyDisposedError
    |   +-- AssetHasDepreciationError
    |   +-- ConcurrentModificationError
    |
    +-- StateError
    |   +-- IncompleteFiscalYearError
    |   +-- AssetNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                            | When Raised
------------|---------------------------------|---------------------------------------
Validation  | INVALID_RATE                    | Rate outside [0, 1] (or (0, 1] for CCA)
            | EMPTY_INVOICE                   | Invoice computed with no items
            | NEGATIVE_QUANTITY_OR_PRICE      | Line quantity or unit price < 0
            | NEGATIVE_AMOUNT                 | Cost, tax, proceeds or book value < 0
            | BOOK_VALUE_MISMATCH             | Book value != cost - accumulated
            | UNKNOWN_CCA_CLASS               | Class number not in the registry
            | INVALID_PERIOD                  | Period end before period start
            | DISPOSAL_BEFORE_ACQUISITION     | Disposal dated before purchase
            | FISCAL_YEAR_BEFORE_ACQUISITION  | Depreciating a year before purchase
------------|---------------------------------|---------------------------------------
Conflict    | DUPLICATE_DEPRECIATION_YEAR     | Entry already exists for (asset, year)
            | DEPRECIATION_YEAR_OUT_OF_ORDER  | Year precedes the latest recorded year
            | ASSET_DISPOSED                  | Depreciating a disposed asset
            | ALREADY_DISPOSED                | Disposing a disposed asset
            | ASSET_HAS_DEPRECIATION          | Deleting an asset with entries
            | CONCURRENT_MODIFICATION         | Asset row changed underneath a commit
------------|---------------------------------|---------------------------------------
State       | INCOMPLETE_FISCAL_YEAR          | Sub-ledger missing or not covering year
            | ASSET_NOT_FOUND                 | Asset id unknown to the store

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        engine.commit_depreciation(asset, 2024, entry_date)
    except DuplicateDepreciationYearError as e:
        return {"error": e.code, "asset_id": e.asset_id, "year": e.fiscal_year}
    except ValidationError as e:
        return {"error": e.code}

Categories let callers map errors without message parsing:
    ValidationError -> caller input is wrong, retrying will not help
    ConflictError   -> state already changed, re-read and decide
    StateError      -> records are incomplete, supply more data
"""

from datetime import date
from decimal import Decimal
from uuid import UUID


class BooksError(Exception):
    """
    Base exception for all books kernel errors.

    Every subclass carries a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BOOKS_ERROR"


# Validation errors


class ValidationError(BooksError):
    """Caller-supplied input violates a precondition."""

    code: str = "VALIDATION_ERROR"


class InvalidRateError(ValidationError):
    """Rate outside its permitted range."""

    code: str = "INVALID_RATE"

    def __init__(self, rate: Decimal, field: str = "rate", allow_zero: bool = True):
        self.rate = rate
        self.field = field
        bounds = "[0, 1]" if allow_zero else "(0, 1]"
        super().__init__(f"{field} must be within {bounds}, got {rate}")


class EmptyInvoiceError(ValidationError):
    """Invoice totals requested for an invoice with no items."""

    code: str = "EMPTY_INVOICE"

    def __init__(self) -> None:
        super().__init__("Invoice must have at least one item")


class NegativeQuantityOrPriceError(ValidationError):
    """A line item has a negative quantity or unit price."""

    code: str = "NEGATIVE_QUANTITY_OR_PRICE"

    def __init__(self, line_index: int, quantity: Decimal, unit_price: Decimal):
        self.line_index = line_index
        self.quantity = quantity
        self.unit_price = unit_price
        super().__init__(
            f"Line {line_index}: quantity ({quantity}) and unit price "
            f"({unit_price}) must not be negative"
        )


class NegativeAmountError(ValidationError):
    """A monetary amount that must be non-negative is negative."""

    code: str = "NEGATIVE_AMOUNT"

    def __init__(self, field: str, amount: Decimal):
        self.field = field
        self.amount = amount
        super().__init__(f"{field} must not be negative, got {amount}")


class BookValueMismatchError(ValidationError):
    """Asset book value is not total cost less accumulated depreciation."""

    code: str = "BOOK_VALUE_MISMATCH"

    def __init__(self, asset_id: UUID, book_value: Decimal, expected: Decimal):
        self.asset_id = asset_id
        self.book_value = book_value
        self.expected = expected
        super().__init__(
            f"Asset {asset_id}: book value {book_value} does not equal "
            f"total cost less accumulated depreciation ({expected})"
        )


class UnknownCCAClassError(ValidationError):
    """CCA class number is not in the registry."""

    code: str = "UNKNOWN_CCA_CLASS"

    def __init__(self, class_number: str):
        self.class_number = class_number
        super().__init__(f"Unknown CCA class: {class_number}")


class InvalidPeriodError(ValidationError):
    """Period end precedes period start."""

    code: str = "INVALID_PERIOD"

    def __init__(self, period_start: date, period_end: date):
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"Period end {period_end} is before period start {period_start}"
        )


class DisposalBeforeAcquisitionError(ValidationError):
    """Disposal date precedes the asset's purchase date."""

    code: str = "DISPOSAL_BEFORE_ACQUISITION"

    def __init__(self, asset_id: UUID, purchase_date: date, disposal_date: date):
        self.asset_id = asset_id
        self.purchase_date = purchase_date
        self.disposal_date = disposal_date
        super().__init__(
            f"Asset {asset_id}: disposal date {disposal_date} is before "
            f"purchase date {purchase_date}"
        )


class FiscalYearBeforeAcquisitionError(ValidationError):
    """Depreciation requested for a fiscal year before the asset was acquired."""

    code: str = "FISCAL_YEAR_BEFORE_ACQUISITION"

    def __init__(self, asset_id: UUID, fiscal_year: int, acquisition_year: int):
        self.asset_id = asset_id
        self.fiscal_year = fiscal_year
        self.acquisition_year = acquisition_year
        super().__init__(
            f"Asset {asset_id}: fiscal year {fiscal_year} precedes "
            f"acquisition fiscal year {acquisition_year}"
        )


# Conflict errors


class ConflictError(BooksError):
    """Operation conflicts with state that has already been recorded."""

    code: str = "CONFLICT_ERROR"


class DuplicateDepreciationYearError(ConflictError):
    """A depreciation entry already exists for (asset, fiscal year)."""

    code: str = "DUPLICATE_DEPRECIATION_YEAR"

    def __init__(self, asset_id: UUID, fiscal_year: int):
        self.asset_id = asset_id
        self.fiscal_year = fiscal_year
        super().__init__(
            f"Depreciation already recorded for asset {asset_id} "
            f"in fiscal year {fiscal_year}"
        )


class DepreciationYearOutOfOrderError(ConflictError):
    """Depreciation requested for a year earlier than the latest recorded year."""

    code: str = "DEPRECIATION_YEAR_OUT_OF_ORDER"

    def __init__(self, asset_id: UUID, fiscal_year: int, latest_year: int):
        self.asset_id = asset_id
        self.fiscal_year = fiscal_year
        self.latest_year = latest_year
        super().__init__(
            f"Asset {asset_id}: fiscal year {fiscal_year} precedes the latest "
            f"recorded depreciation year {latest_year}"
        )


class AssetDisposedError(ConflictError):
    """Depreciation requested for a disposed asset."""

    code: str = "ASSET_DISPOSED"

    def __init__(self, asset_id: UUID, disposal_date: date):
        self.asset_id = asset_id
        self.disposal_date = disposal_date
        super().__init__(f"Asset {asset_id} was disposed on {disposal_date}")


class AlreadyDisposedError(ConflictError):
    """Disposal requested for an asset that is already disposed."""

    code: str = "ALREADY_DISPOSED"

    def __init__(self, asset_id: UUID, disposal_date: date):
        self.asset_id = asset_id
        self.disposal_date = disposal_date
        super().__init__(
            f"Asset {asset_id} is already disposed (on {disposal_date})"
        )


class AssetHasDepreciationError(ConflictError):
    """Asset cannot be deleted while depreciation entries reference it."""

    code: str = "ASSET_HAS_DEPRECIATION"

    def __init__(self, asset_id: UUID, entry_count: int):
        self.asset_id = asset_id
        self.entry_count = entry_count
        super().__init__(
            f"Asset {asset_id} has {entry_count} depreciation entries "
            f"and cannot be deleted"
        )


class ConcurrentModificationError(ConflictError):
    """Asset row changed between read and write."""

    code: str = "CONCURRENT_MODIFICATION"

    def __init__(self, asset_id: UUID, expected: Decimal, actual: Decimal | None = None):
        self.asset_id = asset_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Asset {asset_id} was modified concurrently "
            f"(expected accumulated depreciation {expected}, found {actual})"
        )


# State errors


class StateError(BooksError):
    """Records needed for the computation are missing or incomplete."""

    code: str = "STATE_ERROR"


class IncompleteFiscalYearError(StateError):
    """Income or expense records do not cover the whole fiscal year."""

    code: str = "INCOMPLETE_FISCAL_YEAR"

    def __init__(
        self,
        fiscal_year: int,
        ledger: str,
        covers_from: date | None = None,
        covers_to: date | None = None,
    ):
        self.fiscal_year = fiscal_year
        self.ledger = ledger
        self.covers_from = covers_from
        self.covers_to = covers_to
        if covers_from is None or covers_to is None:
            detail = "missing"
        else:
            detail = f"covers only {covers_from} to {covers_to}"
        super().__init__(
            f"Fiscal year {fiscal_year}: {ledger} records are {detail}"
        )


class AssetNotFoundError(StateError):
    """Asset id is unknown to the store."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, asset_id: UUID):
        self.asset_id = asset_id
        super().__init__(f"Capital asset not found: {asset_id}")
