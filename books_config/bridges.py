"""
Bridges from configuration to engine types.

``books_config`` sits above the engines: the engines never read YAML, they
receive typed objects built here.
"""

from __future__ import annotations

from books_config.schema import EngineSettings
from books_engines.cca import CCAClass, CCARegistry
from books_kernel.domain.values import Currency


def build_cca_registry(settings: EngineSettings) -> CCARegistry:
    """Build the read-only CCA registry from the configured class table."""
    return CCARegistry(
        CCAClass(
            class_number=c.class_number,
            description=c.description,
            rate=c.rate,
        )
        for c in settings.cca_classes
    )


def settings_currency(settings: EngineSettings) -> Currency:
    return Currency(settings.currency)
