"""Shared FastAPI dependencies."""

from poketactix.catalog.service import BaseCatalog
from poketactix.catalog.service import get_catalog as _get_catalog
from poketactix.database import get_session as _get_session

get_db = _get_session


def get_catalog() -> BaseCatalog:
    """Provide the species catalog (overridden in tests)."""
    return _get_catalog()
