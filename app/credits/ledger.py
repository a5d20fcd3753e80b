from app.credits.exceptions import InsufficientCreditsError
from app.database.repositories.user_repository import UserRepository
from app.logging.logger import Log


class CreditLedger:
    """Per-user credit balance with atomic grants and debits.

    The positive-balance check is advisory: it runs before expensive work
    starts and is not held as a lock, so a debit may still take the balance
    below zero. Debits never clamp.
    """

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def get_balance(self, user_id: int) -> int:
        return self._user_repo.get_balance(user_id)

    def ensure_positive_balance(self, user_id: int) -> int:
        """Return the balance, or raise InsufficientCreditsError if it is not above zero."""
        balance = self._user_repo.get_balance(user_id)
        if balance <= 0:
            raise InsufficientCreditsError("You have insufficient credits.")
        return balance

    def debit(self, user_id: int, amount: int, reason: str | None = None) -> int:
        _require_positive(amount)
        balance = self._user_repo.decrement_credits(
            user_id, amount, reason or f"Used {amount} credits."
        )
        Log.info(f"Debited {amount} credits from user {user_id}, balance {balance}")
        if balance < 0:
            Log.warning(f"User {user_id} balance is overdrawn: {balance}")
        return balance

    def credit(
        self,
        user_id: int,
        amount: int,
        reason: str | None = None,
        actor_id: int | None = None,
    ) -> int:
        _require_positive(amount)
        balance = self._user_repo.increment_credits(
            user_id, amount, reason or f"Added {amount} credits.", actor_id=actor_id
        )
        Log.info(f"Credited {amount} credits to user {user_id}, balance {balance}")
        return balance

    def spend(self, user_id: int, amount: int) -> int:
        """Direct user spend: requires the balance to cover the full amount."""
        _require_positive(amount)
        if self._user_repo.get_balance(user_id) < amount:
            raise InsufficientCreditsError("Insufficient credits")
        return self.debit(user_id, amount)


def _require_positive(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValueError(f"Credit amount must be a positive integer, got {amount!r}")
