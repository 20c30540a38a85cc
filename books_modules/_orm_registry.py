"""
Module ORM Registry (``books_modules._orm_registry``).

Ensure all module-level SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before tables are
created.  ``books_kernel.db.engine.create_tables()`` calls this.
"""


def import_all_orm_models() -> None:
    """Import every ``books_modules.*.orm`` module (idempotent)."""
    import books_modules.assets.orm  # noqa: F401
