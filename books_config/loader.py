"""
Configuration Loader (``books_config.loader``).

Responsibility
--------------
Loads the engine YAML file and parses it into typed ``books_config.schema``
dataclass instances.  Runtime callers go through
``books_config.get_active_settings()`` instead of calling this directly.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Rates are parsed to ``Decimal`` through their string form, never kept as
  float.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Unknown rounding mode, unsupported currency, unparseable rate  -> ``ValueError``.
"""

from __future__ import annotations

import decimal
import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from books_config.schema import CCAClassDef, EngineSettings
from books_kernel.domain.currency import normalize_currency_code

_ROUNDING_MODES = frozenset({
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_UP,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_DOWN,
    decimal.ROUND_UP,
    decimal.ROUND_CEILING,
    decimal.ROUND_FLOOR,
})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, field: str) -> Decimal:
    """Parse a YAML scalar (str, int or float) into an exact Decimal."""
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"{field}: cannot parse decimal from {value!r}") from e


def parse_cca_class(class_number: Any, data: dict[str, Any]) -> CCAClassDef:
    """Parse a CCAClassDef from its YAML mapping entry."""
    number = str(class_number).strip()
    return CCAClassDef(
        class_number=number,
        description=data["description"],
        rate=parse_decimal(data["rate"], f"cca_classes.{number}.rate"),
    )


def parse_settings(data: dict[str, Any]) -> EngineSettings:
    """
    Parse ``EngineSettings`` from the root YAML mapping.

    Raises:
        KeyError: if a required key is missing.
        ValueError: if the rounding mode or currency is not recognised.
    """
    rounding = data.get("rounding", decimal.ROUND_HALF_EVEN)
    if rounding not in _ROUNDING_MODES:
        raise ValueError(f"Unknown rounding mode: {rounding!r}")

    currency = normalize_currency_code(data["currency"])

    defaults = data.get("company_defaults", {})
    classes = tuple(
        parse_cca_class(number, entry)
        for number, entry in data["cca_classes"].items()
    )

    return EngineSettings(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        currency=currency,
        rounding=rounding,
        default_small_business_rate=parse_decimal(
            defaults.get("small_business_rate", "0.15"),
            "company_defaults.small_business_rate",
        ),
        default_sales_tax_rate=parse_decimal(
            defaults.get("sales_tax_rate", "0.13"),
            "company_defaults.sales_tax_rate",
        ),
        cca_classes=classes,
        checksum=compute_checksum(data),
    )


def load_settings(path: Path) -> EngineSettings:
    """Load and parse an engine settings YAML file."""
    return parse_settings(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
