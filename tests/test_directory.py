"""
Test suite for directory module

Tests account creation, username uniqueness and credential resolution.
"""

import logging

import pytest
from decimal import Decimal

from banking_ledger.audit import AuditTrail, AuditEventType
from banking_ledger.credentials import ScryptHasher, Sha256Hasher
from banking_ledger.directory import AccountDirectory
from banking_ledger.errors import (
    AuthError, DuplicateUsernameError, UnknownUsernameError, WrongPasswordError
)


class TestAccountDirectory:
    """Test AccountDirectory functionality"""

    def setup_method(self):
        self.directory = AccountDirectory(hasher=Sha256Hasher())

    def test_create_account(self):
        """Test that a new account starts with a zero balance"""
        account = self.directory.create_account("alice", "pw1")

        assert account.username == "alice"
        assert account.current_balance() == Decimal('0.00')
        assert account.transaction_history() == ()
        assert self.directory.get_account("alice") is account
        assert "alice" in self.directory
        assert len(self.directory) == 1

    def test_duplicate_username(self):
        """Test that an exact-case duplicate is rejected and nothing changes"""
        original = self.directory.create_account("bob", "pw2")

        with pytest.raises(DuplicateUsernameError) as exc_info:
            self.directory.create_account("bob", "anything")

        assert exc_info.value.username == "bob"
        assert len(self.directory) == 1
        assert self.directory.get_account("bob") is original
        assert self.directory.authenticate("bob", "pw2") is original

    def test_usernames_are_case_sensitive(self):
        bob = self.directory.create_account("bob", "pw2")
        big_bob = self.directory.create_account("Bob", "pw3")

        assert bob is not big_bob
        assert self.directory.usernames() == ["bob", "Bob"]
        with pytest.raises(UnknownUsernameError):
            self.directory.authenticate("BOB", "pw2")

    def test_authenticate(self):
        account = self.directory.create_account("alice", "pw1")

        assert self.directory.authenticate("alice", "pw1") is account

    def test_authenticate_wrong_password(self):
        self.directory.create_account("alice", "pw1")

        with pytest.raises(WrongPasswordError) as exc_info:
            self.directory.authenticate("alice", "pw2")

        assert exc_info.value.username == "alice"
        assert isinstance(exc_info.value, AuthError)

    def test_authenticate_unknown_username(self):
        self.directory.create_account("alice", "pw1")

        with pytest.raises(UnknownUsernameError) as exc_info:
            self.directory.authenticate("carol", "pw1")

        assert exc_info.value.username == "carol"
        assert isinstance(exc_info.value, AuthError)

    def test_repeated_wrong_password_has_no_lockout(self):
        """Test that each failed login is independent of the last"""
        self.directory.create_account("bob", "pw2")

        for _ in range(3):
            with pytest.raises(WrongPasswordError):
                self.directory.authenticate("bob", "wrong")

        assert self.directory.authenticate("bob", "pw2").username == "bob"

    def test_password_checked_against_own_account(self):
        """Test that another account's password does not unlock this one"""
        self.directory.create_account("alice", "pw1")
        self.directory.create_account("bob", "pw2")

        with pytest.raises(WrongPasswordError):
            self.directory.authenticate("alice", "pw2")

    def test_accounts_are_independent(self):
        alice = self.directory.create_account("alice", "pw1")
        bob = self.directory.create_account("bob", "pw2")

        alice.deposit("100.00")

        assert alice.current_balance() == Decimal('100.00')
        assert bob.current_balance() == Decimal('0.00')

    def test_directories_are_independent(self):
        other = AccountDirectory(hasher=Sha256Hasher())
        self.directory.create_account("alice", "pw1")

        assert other.get_account("alice") is None
        other.create_account("alice", "different")
        assert self.directory.authenticate("alice", "pw1") is not other.get_account("alice")

    def test_iteration_order(self):
        for name in ("carol", "alice", "bob"):
            self.directory.create_account(name, "pw")

        assert [a.username for a in self.directory] == ["carol", "alice", "bob"]
        assert self.directory.has_account("bob")
        assert not self.directory.has_account("dave")

    def test_default_hasher_is_scrypt(self):
        directory = AccountDirectory()
        assert isinstance(directory.hasher, ScryptHasher)

    def test_scrypt_backed_directory(self):
        directory = AccountDirectory(hasher=ScryptHasher(n=16, r=1, p=1))
        account = directory.create_account("alice", "pw1")

        assert account.credential_hash.startswith("scrypt$")
        assert directory.authenticate("alice", "pw1") is account
        with pytest.raises(WrongPasswordError):
            directory.authenticate("alice", "pw2")


class TestDirectoryAudit:
    """Test audit events and logs emitted by the directory"""

    def setup_method(self):
        self.audit_trail = AuditTrail()
        self.directory = AccountDirectory(hasher=Sha256Hasher(), audit_trail=self.audit_trail)

    def test_lifecycle_events(self):
        account = self.directory.create_account("alice", "pw1")
        with pytest.raises(WrongPasswordError):
            self.directory.authenticate("alice", "bad")
        with pytest.raises(UnknownUsernameError):
            self.directory.authenticate("zed", "pw")
        self.directory.authenticate("alice", "pw1")

        events = self.audit_trail.get_all_events()
        assert [e.event_type for e in events] == [
            AuditEventType.ACCOUNT_CREATED,
            AuditEventType.LOGIN_FAILED,
            AuditEventType.LOGIN_FAILED,
            AuditEventType.LOGIN_SUCCESS,
        ]
        assert events[0].metadata == {"account_id": account.id, "hasher": "sha256"}
        assert events[1].metadata == {"reason": "wrong_password"}
        assert events[2].metadata == {"reason": "unknown_username"}
        assert self.audit_trail.verify_integrity()["valid"]

    def test_duplicate_is_not_audited_as_creation(self):
        self.directory.create_account("bob", "pw2")
        with pytest.raises(DuplicateUsernameError):
            self.directory.create_account("bob", "pw3")

        assert len(self.audit_trail.get_events_by_type(AuditEventType.ACCOUNT_CREATED)) == 1

    def test_accounts_share_audit_trail(self):
        account = self.directory.create_account("alice", "pw1")
        account.deposit("5.00")

        assert account.audit_trail is self.audit_trail
        assert self.audit_trail.count_events() == 2

    def test_passwords_never_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="banking_ledger"):
            self.directory.create_account("alice", "s3cret-pw")
            with pytest.raises(WrongPasswordError):
                self.directory.authenticate("alice", "other-s3cret")

        logged = " ".join(f"{r.getMessage()} {r.__dict__}" for r in caplog.records)
        assert "s3cret" not in logged
        assert caplog.records[-1].levelno == logging.WARNING
        assert caplog.records[-1].username == "alice"
