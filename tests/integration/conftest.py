import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import apply_schema, close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "rewrites_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, Any]], None, None]:
    cleanup: list[tuple[str, Any]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "jobs":
                    cur.execute("DELETE FROM jobs WHERE job_id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "doc_collections":
                    cur.execute("DELETE FROM docs WHERE collection_id = %s", (row_id,))
                    cur.execute("DELETE FROM doc_collections WHERE id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "users":
                    cur.execute("DELETE FROM activity_log WHERE user_id = %s", (row_id,))
                    cur.execute("DELETE FROM users WHERE id = %s", (row_id,))
        conn.commit()


def _insert_user(
    db_conn: psycopg.Connection[Any],
    cleanup: list[tuple[str, Any]],
    balance: int,
    is_admin: bool = False,
) -> int:
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO users (email, credit_balance, is_admin)
            VALUES (%s, %s, %s)
            RETURNING id
            """,
            (f"{uuid.uuid4()}@example.com", balance, is_admin),
        )
        row = cur.fetchone()
        assert row is not None
        user_id = row[0]
    db_conn.commit()
    cleanup.append(("users", user_id))
    return user_id


@pytest.fixture
def seed_user(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, Any]],
) -> int:
    return _insert_user(db_conn, integration_cleanup, balance=10)


@pytest.fixture
def seed_admin(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, Any]],
) -> int:
    return _insert_user(db_conn, integration_cleanup, balance=0, is_admin=True)


@pytest.fixture
def job_id(integration_cleanup: list[tuple[str, Any]]) -> str:
    new_id = str(uuid.uuid4())
    integration_cleanup.append(("jobs", new_id))
    return new_id
