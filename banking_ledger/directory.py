"""
Account Directory Module

In-memory registry mapping usernames to accounts. Usernames are unique
and matched exactly (case-sensitive). The directory is append-only for
the lifetime of the process.
"""

from typing import Dict, Iterator, List, Optional

from .accounts import Account
from .audit import AuditTrail, AuditEventType
from .credentials import CredentialHasher, ScryptHasher
from .errors import DuplicateUsernameError, UnknownUsernameError, WrongPasswordError
from .logging_config import get_logger, log_action

logger = get_logger(__name__)


class AccountDirectory:
    """
    Owns the set of accounts, enforces username uniqueness and
    resolves login credentials
    """

    def __init__(
        self,
        hasher: Optional[CredentialHasher] = None,
        audit_trail: Optional[AuditTrail] = None
    ):
        self.hasher = hasher or ScryptHasher()
        self.audit_trail = audit_trail
        self._accounts: Dict[str, Account] = {}

    def create_account(self, username: str, password: str) -> Account:
        """
        Create a new account with a zero balance

        Args:
            username: Unique, case-sensitive account name
            password: Plaintext password; only its digest is stored

        Returns:
            Created Account object

        Raises:
            DuplicateUsernameError: If the username is already taken
        """
        if username in self._accounts:
            log_action(
                logger, "warning", "account creation rejected: duplicate username",
                username=username, action="create_account", resource="directory"
            )
            raise DuplicateUsernameError(username)

        account = Account(
            username=username,
            credential_hash=self.hasher.hash(password),
            hasher=self.hasher,
            audit_trail=self.audit_trail
        )
        self._accounts[username] = account

        log_action(
            logger, "info", "account created",
            username=username, action="create_account", resource="directory",
            extra={"account_id": account.id, "hasher": self.hasher.name}
        )

        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=AuditEventType.ACCOUNT_CREATED,
                entity_type="account",
                entity_id=username,
                metadata={"account_id": account.id, "hasher": self.hasher.name}
            )

        return account

    def authenticate(self, username: str, password: str) -> Account:
        """
        Resolve login credentials to an account

        Each call is independent; attempt limits belong to the caller.

        Raises:
            UnknownUsernameError: If no account has this username
            WrongPasswordError: If the password does not match
        """
        account = self._accounts.get(username)
        if account is None:
            self._log_login_failure(username, "unknown_username")
            raise UnknownUsernameError(username)

        if not account.verify_password(password):
            self._log_login_failure(username, "wrong_password")
            raise WrongPasswordError(username)

        log_action(
            logger, "info", "login succeeded",
            username=username, action="authenticate", resource="directory"
        )
        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=AuditEventType.LOGIN_SUCCESS,
                entity_type="account",
                entity_id=username
            )

        return account

    def get_account(self, username: str) -> Optional[Account]:
        """Get account by username"""
        return self._accounts.get(username)

    def has_account(self, username: str) -> bool:
        return username in self._accounts

    def usernames(self) -> List[str]:
        """Usernames in creation order"""
        return list(self._accounts)

    def __contains__(self, username: object) -> bool:
        return username in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(list(self._accounts.values()))

    def _log_login_failure(self, username: str, reason: str) -> None:
        log_action(
            logger, "warning", f"login failed: {reason}",
            username=username, action="authenticate", resource="directory"
        )
        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=AuditEventType.LOGIN_FAILED,
                entity_type="account",
                entity_id=username,
                metadata={"reason": reason}
            )
