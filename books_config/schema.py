"""
Engine settings schema.

The typed form of ``engine.yaml``: the working currency and rounding mode
every calculation uses, the default company rates, and the capital cost
allowance class table.  The loader parses YAML into these frozen
dataclasses; bridges translate them into engine types.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class CCAClassDef:
    """One row of the CCA class table as authored in YAML."""

    class_number: str
    description: str
    rate: Decimal


@dataclass(frozen=True)
class EngineSettings:
    """Process-wide engine configuration."""

    config_id: str
    version: int
    currency: str
    rounding: str  # name of a decimal rounding constant, e.g. ROUND_HALF_EVEN
    default_small_business_rate: Decimal
    default_sales_tax_rate: Decimal
    cca_classes: tuple[CCAClassDef, ...]
    checksum: str = ""
