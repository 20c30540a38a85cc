"""
books_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_settings()`` and ``get_cca_registry()``.  YAML loading is
    internal tooling and never exposed to engine code.

Architecture position:
    Configuration -- sits above ``books_kernel`` and ``books_engines`` and
    below ``books_modules`` / ``books_services``.  The kernel and engines
    MUST NEVER import from ``books_config``.

Invariants enforced:
    - Settings are loaded once per path and shared process-wide; the CCA
      registry built from them is immutable.

Failure modes:
    - ``FileNotFoundError`` -- configuration file not found.
    - ``ValueError`` / ``KeyError`` -- malformed configuration.
    - ``InvalidRateError`` -- a CCA class rate outside (0, 1].

Audit relevance:
    Every first load emits a ``BOOKS_CONFIG_TRACE`` log entry with the
    config_id, version, checksum and class count, tying computed figures
    back to the exact rate table in force.
"""

from __future__ import annotations

import threading
from pathlib import Path

from books_config.bridges import build_cca_registry
from books_config.loader import load_settings
from books_config.schema import CCAClassDef, EngineSettings
from books_engines.cca import CCARegistry
from books_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "data" / "engine.yaml"

_lock = threading.Lock()
_settings_cache: dict[Path, EngineSettings] = {}
_registry_cache: dict[Path, CCARegistry] = {}


def get_active_settings(config_path: Path | None = None) -> EngineSettings:
    """The ONLY public settings entrypoint.

    Args:
        config_path: Override path to the engine YAML file.  Defaults to
            the ``engine.yaml`` shipped with the package.

    Returns:
        Frozen ``EngineSettings``, cached per resolved path.
    """
    path = (config_path or _DEFAULT_CONFIG_PATH).resolve()
    with _lock:
        settings = _settings_cache.get(path)
        if settings is None:
            settings = load_settings(path)
            _settings_cache[path] = settings
            _logger.info(
                "BOOKS_CONFIG_TRACE",
                extra={
                    "trace_type": "BOOKS_CONFIG_TRACE",
                    "config_id": settings.config_id,
                    "config_version": settings.version,
                    "checksum": settings.checksum,
                    "currency": settings.currency,
                    "cca_class_count": len(settings.cca_classes),
                },
            )
    return settings


def get_cca_registry(config_path: Path | None = None) -> CCARegistry:
    """Return the process-wide CCA registry for the given settings file."""
    path = (config_path or _DEFAULT_CONFIG_PATH).resolve()
    settings = get_active_settings(path)
    with _lock:
        registry = _registry_cache.get(path)
        if registry is None:
            registry = build_cca_registry(settings)
            _registry_cache[path] = registry
    return registry


def clear_cache() -> None:
    """Drop cached settings and registries. FOR TESTING ONLY."""
    with _lock:
        _settings_cache.clear()
        _registry_cache.clear()


__all__ = [
    "CCAClassDef",
    "EngineSettings",
    "clear_cache",
    "get_active_settings",
    "get_cca_registry",
]
