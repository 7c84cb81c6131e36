"""
Ledger Errors Module

Exception hierarchy raised by the directory and account operations.
Every error leaves the directory and account state exactly as it was
before the failing call.
"""

from decimal import Decimal
from typing import Any, Optional


class LedgerError(Exception):
    """Base exception for all ledger operations"""
    pass


class DuplicateUsernameError(LedgerError):
    """An account with this exact username already exists"""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"An account with username '{username}' already exists")


class AuthError(LedgerError):
    """Login credentials could not be resolved to an account"""

    def __init__(self, username: str, message: str):
        self.username = username
        super().__init__(message)


class UnknownUsernameError(AuthError):
    """No account matches the username"""

    def __init__(self, username: str):
        super().__init__(username, f"No account with username '{username}'")


class WrongPasswordError(AuthError):
    """The password does not match the stored credential hash"""

    def __init__(self, username: str):
        super().__init__(username, f"Incorrect password for '{username}'")


class InvalidAmountError(LedgerError, ValueError):
    """Amount is not a positive, finite, cent-scale decimal"""

    def __init__(self, amount: Any, reason: Optional[str] = None):
        self.amount = amount
        self.reason = reason or "not a valid monetary value"
        super().__init__(f"Invalid amount {amount!r}: {self.reason}")


class WithdrawalError(LedgerError):
    """Base exception for rejected withdrawals"""
    pass


class InvalidWithdrawalAmountError(InvalidAmountError, WithdrawalError):
    """Withdrawal amount failed validation"""
    pass


class InsufficientFundsError(WithdrawalError):
    """Withdrawal would overdraw the account"""

    def __init__(self, requested: Decimal, available: Decimal):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient funds: requested {requested}, available {available}"
        )
