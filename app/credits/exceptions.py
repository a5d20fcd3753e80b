class CreditError(Exception):
    """Base exception for credit ledger errors."""


class InsufficientCreditsError(CreditError):
    """Raised when a user's balance cannot cover the requested work."""


class UserNotFoundError(CreditError):
    """Raised when no user exists for the given ID."""
