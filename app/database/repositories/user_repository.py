from typing import Any

import psycopg
from psycopg.rows import dict_row

from app.credits.exceptions import UserNotFoundError
from app.database.connection import get_connection
from app.database.exceptions import translate_db_errors
from app.database.models import UserRecord


class UserRepository:
    """Database operations for the users and activity_log tables.

    Balance changes are single UPDATE statements so concurrent grants and
    debits never lose an update.
    """

    def find_by_id(self, user_id: int) -> UserRecord | None:
        with translate_db_errors(f"read user {user_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, email, credit_balance, is_admin,
                           stripe_customer_id, created_at
                    FROM users
                    WHERE id = %s
                    """,
                    (user_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return UserRecord(
            id=row["id"],
            email=row["email"],
            credit_balance=row["credit_balance"],
            is_admin=row["is_admin"],
            stripe_customer_id=row["stripe_customer_id"],
            created_at=row["created_at"],
        )

    def get_balance(self, user_id: int) -> int:
        """Return the current credit balance.

        Raises:
            UserNotFoundError: if no user with this ID exists.
        """
        with translate_db_errors(f"read balance of user {user_id}"), get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT credit_balance FROM users WHERE id = %s", (user_id,))
                row = cur.fetchone()

        if row is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return int(row[0])

    def increment_credits(
        self, user_id: int, amount: int, action: str, actor_id: int | None = None
    ) -> int:
        """Atomically add credits and record the action. Returns the new balance."""
        return self._apply_delta(user_id, amount, action, actor_id)

    def decrement_credits(
        self, user_id: int, amount: int, action: str, actor_id: int | None = None
    ) -> int:
        """Atomically remove credits and record the action. Returns the new balance."""
        return self._apply_delta(user_id, -amount, action, actor_id)

    def _apply_delta(
        self, user_id: int, delta: int, action: str, actor_id: int | None
    ) -> int:
        with translate_db_errors(f"update credits of user {user_id}"), get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE users
                    SET credit_balance = credit_balance + %s
                    WHERE id = %s
                    RETURNING credit_balance
                    """,
                    (delta, user_id),
                )
                row = cur.fetchone()
                if row is None:
                    conn.rollback()
                    raise UserNotFoundError(f"User {user_id} not found")
                self._insert_activity(conn, user_id, action, actor_id)
            conn.commit()
        return int(row[0])

    @staticmethod
    def _insert_activity(
        conn: psycopg.Connection[Any], user_id: int, action: str, actor_id: int | None
    ) -> None:
        conn.execute(
            """
            INSERT INTO activity_log (user_id, action, activity_type, actor_id)
            VALUES (%s, %s, 'LOG', %s)
            """,
            (user_id, action, actor_id),
        )
