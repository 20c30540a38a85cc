"""
Values -- Currency and Money, the types every figure passes through.

Responsibility:
    Money pairs an exact Decimal amount with its Currency. Rounding is
    always explicit (``Money.round``) and always to the currency's own
    precision, with ROUND_HALF_EVEN unless the caller passes another mode.

Architecture position:
    Kernel > Domain -- pure, no I/O. Depends only on
    books_kernel.domain.currency.

Invariants enforced:
    - Floats never become amounts or scalar factors (TypeError).
    - Currency codes are checked against the precision table on
      construction.
    - Arithmetic and comparison between different currencies fail.

Audit relevance:
    Invoice totals, sales tax, CCA and tax-return lines are all rounded
    Money amounts. Banker's rounding keeps long runs of half-cent values
    from drifting in one direction.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from functools import total_ordering

from books_kernel.domain.currency import decimal_places as places_for, is_supported

DEFAULT_ROUNDING = ROUND_HALF_EVEN

ZERO = Decimal("0")


def to_decimal(value: Decimal | int | str) -> Decimal:
    """Exact Decimal from a Decimal, int or numeric string. Floats and bools are refused."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (float, bool)):
        raise TypeError(f"Monetary values must not be {type(value).__name__}: {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid decimal value: {value!r}") from e


def _scalar(factor: object) -> Decimal | None:
    # None tells the operator to return NotImplemented
    if isinstance(factor, Decimal):
        return factor
    if isinstance(factor, (int, str)) and not isinstance(factor, bool):
        return to_decimal(factor)
    return None


@dataclass(frozen=True, slots=True)
class Currency:
    """ISO 4217 code, uppercased on construction."""

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if isinstance(self.code, str) else ""
        if not is_supported(normalized):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code!r}")
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return places_for(self.code)

    @property
    def quantum(self) -> Decimal:
        """Smallest unit, e.g. Decimal('0.01') for CAD."""
        return Decimal(10) ** -self.decimal_places

    def round(self, amount: Decimal, rounding: str = DEFAULT_ROUNDING) -> Decimal:
        return amount.quantize(self.quantum, rounding=rounding)

    def __str__(self) -> str:
        return self.code


@total_ordering
@dataclass(frozen=True, slots=True)
class Money:
    """
    An amount in one currency.

    Immutable and hashable. Never converts between currencies and never
    rounds on its own.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        return cls(to_decimal(amount), currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(ZERO, currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == ZERO

    @property
    def is_positive(self) -> bool:
        return self.amount > ZERO

    @property
    def is_negative(self) -> bool:
        return self.amount < ZERO

    def round(self, rounding: str = DEFAULT_ROUNDING) -> Money:
        """Rounded to the currency's decimal places."""
        return Money(self.currency.round(self.amount, rounding), self.currency)

    def _same_currency(self, other: Money, op: str) -> None:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {op} Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )

    def __add__(self, other: object) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._same_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: object) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._same_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: object) -> Money:
        scalar = _scalar(factor)
        if scalar is None:
            return NotImplemented
        return Money(self.amount * scalar, self.currency)

    __rmul__ = __mul__

    def __truediv__(self, divisor: object) -> Money:
        scalar = _scalar(divisor)
        if scalar is None:
            return NotImplemented
        return Money(self.amount / scalar, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __abs__(self) -> Money:
        return Money(abs(self.amount), self.currency)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._same_currency(other, "compare")
        return self.amount < other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"
