from collections.abc import Generator
from contextlib import contextmanager

import psycopg


class PersistenceError(Exception):
    """Raised when a store read or write fails."""


@contextmanager
def translate_db_errors(action: str) -> Generator[None, None, None]:
    """Re-raise driver errors as PersistenceError with a readable action name."""
    try:
        yield
    except psycopg.Error as exc:
        raise PersistenceError(f"Failed to {action}: {exc}") from exc
