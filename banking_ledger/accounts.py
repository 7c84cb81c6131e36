"""
Account Module

A single user's account: credential hash, balance and an append-only
transaction log. The balance always equals the sum of the signed
transaction amounts, and a rejected deposit or withdrawal leaves both
untouched.
"""

from decimal import Decimal, Inexact
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from enum import Enum
import uuid

from .audit import AuditTrail, AuditEventType
from .credentials import CredentialHasher
from .currency import AmountInput, MAX_AMOUNT, ZERO, exact_sum, parse_amount
from .errors import (
    InvalidAmountError, InvalidWithdrawalAmountError, InsufficientFundsError, LedgerError
)
from .logging_config import get_logger, log_action

logger = get_logger(__name__)


class TransactionKind(Enum):
    """Direction of a ledger posting"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass(frozen=True)
class Transaction:
    """
    One posting in an account's transaction log
    Amount is always a positive magnitude; kind carries the sign
    """
    kind: TransactionKind
    amount: Decimal
    sequence: int
    posted_at: datetime

    @property
    def signed_amount(self) -> Decimal:
        """Amount with deposits positive and withdrawals negative"""
        if self.kind == TransactionKind.WITHDRAWAL:
            return -self.amount
        return self.amount

    @property
    def is_deposit(self) -> bool:
        return self.kind == TransactionKind.DEPOSIT

    @property
    def is_withdrawal(self) -> bool:
        return self.kind == TransactionKind.WITHDRAWAL


@dataclass(eq=False)
class Account:
    """
    Bank account owned by one user

    Created through AccountDirectory.create_account, which hashes the
    password; the plaintext is never kept on the account.
    """
    username: str
    credential_hash: str = field(repr=False)
    hasher: CredentialHasher = field(repr=False)
    audit_trail: Optional[AuditTrail] = field(default=None, repr=False)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    _balance: Decimal = field(default=ZERO, init=False, repr=False)
    _transactions: List[Transaction] = field(default_factory=list, init=False, repr=False)

    @property
    def balance(self) -> Decimal:
        return self._balance

    def verify_password(self, password: str) -> bool:
        """Check a plaintext password against the stored credential hash"""
        return self.hasher.verify(password, self.credential_hash)

    def deposit(self, amount: AmountInput) -> Transaction:
        """
        Add funds to the account

        Args:
            amount: Positive amount as text, int or Decimal

        Returns:
            The posted DEPOSIT transaction

        Raises:
            InvalidAmountError: If the amount is not a positive cent-scale value,
                or the balance would pass MAX_AMOUNT
        """
        try:
            value = parse_amount(amount)
            new_balance = self._next_balance(amount, value, InvalidAmountError)
        except InvalidAmountError as e:
            self._log_rejection(TransactionKind.DEPOSIT, e)
            raise

        return self._post(TransactionKind.DEPOSIT, value, new_balance)

    def withdraw(self, amount: AmountInput) -> Transaction:
        """
        Remove funds from the account; overdrafts are not permitted

        Args:
            amount: Positive amount as text, int or Decimal

        Returns:
            The posted WITHDRAWAL transaction

        Raises:
            InvalidWithdrawalAmountError: If the amount is not a positive cent-scale value
            InsufficientFundsError: If the amount exceeds the current balance
        """
        try:
            value = parse_amount(amount, error_cls=InvalidWithdrawalAmountError)
            if value > self._balance:
                raise InsufficientFundsError(value, self._balance)
            new_balance = self._next_balance(amount, -value, InvalidWithdrawalAmountError)
        except LedgerError as e:
            self._log_rejection(TransactionKind.WITHDRAWAL, e)
            raise

        return self._post(TransactionKind.WITHDRAWAL, value, new_balance)

    def current_balance(self) -> Decimal:
        """Get the current balance"""
        return self._balance

    def transaction_history(self) -> Tuple[Transaction, ...]:
        """Snapshot of the transaction log in chronological order"""
        return tuple(self._transactions)

    def is_reconciled(self) -> bool:
        """Check that the balance equals the sum of signed postings"""
        total = sum((t.signed_amount for t in self._transactions), ZERO)
        return total == self._balance

    def _next_balance(self, amount: AmountInput, delta: Decimal, error_cls) -> Decimal:
        """Balance after applying delta, rejected if it would round or pass MAX_AMOUNT"""
        try:
            new_balance = exact_sum(self._balance, delta)
        except Inexact:
            raise error_cls(amount, "balance exceeds decimal precision")
        if new_balance > MAX_AMOUNT:
            raise error_cls(amount, f"balance would exceed the maximum of {MAX_AMOUNT}")
        return new_balance

    def _post(self, kind: TransactionKind, amount: Decimal, new_balance: Decimal) -> Transaction:
        """Append a posting and move the balance in one step"""
        transaction = Transaction(
            kind=kind,
            amount=amount,
            sequence=len(self._transactions) + 1,
            posted_at=datetime.now(timezone.utc)
        )
        self._transactions.append(transaction)
        self._balance = new_balance

        log_action(
            logger, "info", f"{kind.value} posted",
            username=self.username, action=kind.value, resource="account",
            extra={"amount": str(amount), "balance": str(new_balance),
                   "sequence": transaction.sequence}
        )

        if self.audit_trail:
            event_type = (AuditEventType.DEPOSIT_POSTED if kind == TransactionKind.DEPOSIT
                          else AuditEventType.WITHDRAWAL_POSTED)
            self.audit_trail.log_event(
                event_type=event_type,
                entity_type="account",
                entity_id=self.username,
                metadata={
                    "amount": amount,
                    "balance": new_balance,
                    "sequence": transaction.sequence
                }
            )

        return transaction

    def _log_rejection(self, kind: TransactionKind, error: LedgerError) -> None:
        log_action(
            logger, "warning", f"{kind.value} rejected: {error}",
            username=self.username, action=kind.value, resource="account",
            extra={"error": type(error).__name__}
        )

        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=AuditEventType.TRANSACTION_REJECTED,
                entity_type="account",
                entity_id=self.username,
                metadata={
                    "kind": kind,
                    "error": type(error).__name__,
                    "balance": self._balance
                }
            )
