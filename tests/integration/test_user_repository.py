import threading

import pytest

from app.credits.exceptions import UserNotFoundError
from app.credits.ledger import CreditLedger
from app.database.repositories.user_repository import UserRepository


@pytest.mark.integration
class TestUserRepositoryBalance:
    def test_get_balance(self, seed_user: int) -> None:
        assert UserRepository().get_balance(seed_user) == 10

    def test_unknown_user_raises(self, integration_pool: None) -> None:
        with pytest.raises(UserNotFoundError):
            UserRepository().get_balance(-1)

    def test_decrement_records_activity(self, seed_user: int, db_conn) -> None:
        balance = UserRepository().decrement_credits(seed_user, 3, "Used 3 credits.")

        assert balance == 7
        with db_conn.cursor() as cur:
            cur.execute(
                "SELECT action, activity_type, actor_id FROM activity_log WHERE user_id = %s",
                (seed_user,),
            )
            rows = cur.fetchall()
        assert rows == [("Used 3 credits.", "LOG", None)]

    def test_decrement_may_go_negative(self, seed_user: int) -> None:
        assert UserRepository().decrement_credits(seed_user, 13, "Used 13 credits.") == -3

    def test_increment_records_actor(self, seed_user: int, seed_admin: int, db_conn) -> None:
        UserRepository().increment_credits(seed_user, 5, "Added 5 credits.", actor_id=seed_admin)

        with db_conn.cursor() as cur:
            cur.execute("SELECT actor_id FROM activity_log WHERE user_id = %s", (seed_user,))
            assert cur.fetchone() == (seed_admin,)

    def test_unknown_user_update_writes_nothing(self, integration_pool: None, db_conn) -> None:
        with pytest.raises(UserNotFoundError):
            UserRepository().increment_credits(-1, 5, "Added 5 credits.")
        with db_conn.cursor() as cur:
            cur.execute("SELECT COUNT(*) FROM activity_log WHERE user_id = -1")
            assert cur.fetchone() == (0,)


@pytest.mark.integration
class TestConcurrentLedgerUpdates:
    def test_no_lost_updates(self, seed_user: int) -> None:
        ledger = CreditLedger(UserRepository())

        def grant_and_spend() -> None:
            for _ in range(5):
                ledger.credit(seed_user, 2)
                ledger.debit(seed_user, 1)

        threads = [threading.Thread(target=grant_and_spend) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert ledger.get_balance(seed_user) == 10 + 4 * 5 * (2 - 1)
