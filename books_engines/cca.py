"""
CCA Registry - capital cost allowance classes and their rates.

Read-only lookup from a CCA class number (e.g. "10", "50") to its
declining-balance rate and description.  Built once from configuration
(see ``books_config.get_cca_registry``) and shared for the life of the
process.

Usage:
    from books_engines.cca import CCAClass, CCARegistry
    from decimal import Decimal

    registry = CCARegistry([
        CCAClass("8", "Limited-life patents and franchises", Decimal("0.20")),
    ])
    registry.rate_for("8")  # Decimal("0.20")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from books_kernel.domain.records import check_rate
from books_kernel.exceptions import UnknownCCAClassError
from books_kernel.logging_config import get_logger

logger = get_logger("engines.cca")


def _normalize(class_number: str | int) -> str:
    return str(class_number).strip()


@dataclass(frozen=True)
class CCAClass:
    """
    A CCA class.

    rate is the annual declining-balance rate and must be in (0, 1].
    """

    class_number: str
    description: str
    rate: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "class_number", _normalize(self.class_number))
        check_rate(self.rate, f"CCA class {self.class_number} rate", allow_zero=False)


class CCARegistry:
    """
    Immutable CCA class table.

    There is no mutation API; the backing mapping is a read-only proxy.
    Later duplicates of a class number replace earlier ones at build time.
    """

    def __init__(self, classes: Iterable[CCAClass]):
        table = {c.class_number: c for c in classes}
        self._classes: Mapping[str, CCAClass] = MappingProxyType(table)
        logger.debug("cca_registry_built", extra={
            "class_count": len(table),
            "class_numbers": sorted(table),
        })

    def get(self, class_number: str | int) -> CCAClass:
        """
        Look up a class.

        Raises:
            UnknownCCAClassError: If the class number is not registered.
        """
        key = _normalize(class_number)
        try:
            return self._classes[key]
        except KeyError:
            logger.warning("cca_class_unknown", extra={"class_number": key})
            raise UnknownCCAClassError(key) from None

    def rate_for(self, class_number: str | int) -> Decimal:
        """Declining-balance rate for a class."""
        return self.get(class_number).rate

    def classes(self) -> tuple[CCAClass, ...]:
        """All classes, ordered by class number."""
        return tuple(
            sorted(self._classes.values(), key=lambda c: _sort_key(c.class_number))
        )

    @property
    def table(self) -> Mapping[str, CCAClass]:
        return self._classes

    def __contains__(self, class_number: object) -> bool:
        if not isinstance(class_number, (str, int)):
            return False
        return _normalize(class_number) in self._classes

    def __len__(self) -> int:
        return len(self._classes)


def _sort_key(class_number: str) -> tuple[int, str]:
    # Numeric classes first in numeric order, anything else after
    if class_number.isdigit():
        return (int(class_number), "")
    return (10**9, class_number)
