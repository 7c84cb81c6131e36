"""
Banking Ledger Console

Interactive text menu over an AccountDirectory. All prompting,
re-prompting and message rendering lives here; the directory and
accounts never touch the console.

Usage:
  banking-ledger [--log-level LEVEL] [--log-format json|text] [--hasher scrypt|sha256]
  python -m banking_ledger
"""

import argparse
import getpass
import sys
import uuid
from typing import Callable, Optional, TextIO

from . import __version__
from .accounts import Account
from .audit import AuditTrail
from .config import LedgerConfig, get_config
from .credentials import hasher_from_config
from .currency import format_amount
from .directory import AccountDirectory
from .errors import (
    DuplicateUsernameError, InsufficientFundsError, InvalidAmountError,
    UnknownUsernameError, WrongPasswordError
)
from .logging_config import get_logger, log_action, setup_logging

logger = get_logger(__name__)

BANNER = "*" * 47
SECTION = "*" * 24

LOGIN_MENU = (
    "1) Create a new account",
    "2) Log into an existing account",
    "3) Exit Bank Ledger",
)

ACCOUNT_MENU = (
    "1) Make a Deposit",
    "2) Make a Withdrawal",
    "3) View available funds",
    "4) View transaction history",
    "5) Log out",
)

INVALID_AMOUNT_MESSAGE = (
    "That is not a valid monetary value. "
    "Please enter an amount without any extra symbols."
)


class LedgerConsole:
    """Menu-driven adapter translating console input into ledger calls"""

    def __init__(
        self,
        directory: AccountDirectory,
        config: Optional[LedgerConfig] = None,
        input_func: Callable[[str], str] = input,
        password_func: Callable[[str], str] = getpass.getpass,
        output: Optional[TextIO] = None
    ):
        self.directory = directory
        self.config = config or get_config()
        self.input_func = input_func
        self.password_func = password_func
        self.output = output or sys.stdout
        self.session_id = str(uuid.uuid4())

    def _print(self, text: str = "") -> None:
        print(text, file=self.output)

    def _money(self, amount) -> str:
        return format_amount(amount, self.config.currency_symbol)

    def read_selection(self, prompt: str, minimum: int, maximum: int) -> Optional[int]:
        """Read a menu choice; None when the input is not an available option"""
        text = self.input_func(prompt).strip()
        try:
            selection = int(text)
        except ValueError:
            self._print("That input is invalid. Please make a valid selection.")
            self._print()
            return None

        if selection < minimum or selection > maximum:
            self._print("That is not an available option. Please make a valid selection.")
            self._print()
            return None

        self._print()
        return selection

    def run(self) -> None:
        """Show the login menu until the user exits"""
        while True:
            self._print(BANNER)
            self._print("Welcome to the World's Greatest Banking Ledger!")
            self._print(BANNER)
            for line in LOGIN_MENU:
                self._print(line)

            selection = self.read_selection("Please make a selection: ", 1, len(LOGIN_MENU))
            if selection == 1:
                self.create_account()
            elif selection == 2:
                account = self.login()
                if account is not None:
                    self.account_menu(account)
            elif selection == 3:
                return

    def create_account(self) -> Optional[Account]:
        self._print(SECTION)
        self._print("User Account Creation")
        self._print(SECTION)

        username = self.input_func("Please enter a username: ")
        if self.directory.has_account(username):
            self._print("An account with that username already exists.")
            self._print()
            return None

        while True:
            password = self.password_func("Please enter a password: ")
            if not self.config.require_password_confirmation:
                break
            confirmation = self.password_func("Please enter your password again: ")
            if password == confirmation:
                break
            self._print("The passwords you've entered do not match. "
                        "Please enter and verify your password again.")
            self._print()

        try:
            account = self.directory.create_account(username, password)
        except DuplicateUsernameError:
            self._print("An account with that username already exists.")
            self._print()
            return None

        self._print()
        self._print("You have successfully created a new account!")
        self._print()
        return account

    def login(self) -> Optional[Account]:
        """Prompt for credentials, allowing a limited number of attempts"""
        self._print(SECTION)
        self._print("User Account Login")
        self._print(SECTION)

        max_attempts = self.config.max_login_attempts
        for attempt in range(1, max_attempts + 1):
            username = self.input_func("Please enter your username: ")
            if not self.directory.has_account(username):
                self._print("There seems to be no account with that username.")
                self._print("Please create an account before attempting to login.")
                self._print()
                return None

            password = self.password_func("Please enter your password: ")
            try:
                account = self.directory.authenticate(username, password)
            except UnknownUsernameError:
                self._print("There seems to be no account with that username.")
                self._print()
                return None
            except WrongPasswordError:
                self._print("Incorrect password. Please try again.")
                continue

            log_action(
                logger, "info", "console session logged in",
                username=username, action="login", resource="console",
                correlation_id=self.session_id, extra={"attempt": attempt}
            )
            self._print()
            return account

        self._print("Too many login attempts!")
        self._print()
        log_action(
            logger, "warning", "login attempts exhausted",
            action="login", resource="console", correlation_id=self.session_id,
            extra={"attempts": max_attempts}
        )
        return None

    def account_menu(self, account: Account) -> None:
        """Show the account menu until the user logs out"""
        while True:
            self._print("What would you like to do?")
            for line in ACCOUNT_MENU:
                self._print(line)

            selection = self.read_selection("Please make a selection: ", 1, len(ACCOUNT_MENU))
            if selection == 1:
                self.deposit(account)
            elif selection == 2:
                self.withdraw(account)
            elif selection == 3:
                self.show_balance(account)
            elif selection == 4:
                self.show_history(account)
            elif selection == 5:
                log_action(
                    logger, "info", "console session logged out",
                    username=account.username, action="logout", resource="console",
                    correlation_id=self.session_id
                )
                return

    def deposit(self, account: Account) -> None:
        amount_text = self.input_func("How much would you like to deposit? ")
        try:
            account.deposit(amount_text)
        except InvalidAmountError:
            self._print(INVALID_AMOUNT_MESSAGE)
        else:
            self._print("Your deposit was successfully made!")
        self._print()

    def withdraw(self, account: Account) -> None:
        amount_text = self.input_func("How much would you like to withdraw? ")
        try:
            account.withdraw(amount_text)
        except InvalidAmountError:
            self._print(INVALID_AMOUNT_MESSAGE)
        except InsufficientFundsError as e:
            self._print(f"You do not have enough funds to withdraw {self._money(e.requested)}")
        else:
            self._print("Your withdrawal was successfully made!")
        self._print()

    def show_balance(self, account: Account) -> None:
        self._print(f"Your account currently holds {self._money(account.current_balance())}")
        self._print()

    def show_history(self, account: Account) -> None:
        self._print(SECTION)
        self._print(f"Transaction History for {account.username}")
        self._print(SECTION)

        history = account.transaction_history()
        if not history:
            self._print("No transactions yet.")
            self._print()
            return

        for transaction in history:
            verb = "Deposited" if transaction.is_deposit else "Withdrew"
            self._print(f"{verb} {self._money(transaction.amount)}")
        self._print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="banking-ledger",
        description="Interactive in-memory banking ledger"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        type=str.upper, help="Override LEDGER_LOG_LEVEL")
    parser.add_argument("--log-format", choices=["json", "text"],
                        help="Override LEDGER_LOG_FORMAT")
    parser.add_argument("--hasher", choices=["scrypt", "sha256"],
                        help="Override LEDGER_PASSWORD_HASHER")
    return parser


def main(argv=None, input_func: Callable[[str], str] = input,
         password_func: Callable[[str], str] = getpass.getpass,
         output: Optional[TextIO] = None) -> int:
    """Console entry point"""
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_format:
        overrides["log_format"] = args.log_format
    if args.hasher:
        overrides["password_hasher"] = args.hasher
    config = get_config().model_copy(update=overrides)

    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)

    audit_trail = AuditTrail() if config.enable_audit_logging else None
    directory = AccountDirectory(hasher_from_config(config), audit_trail)
    console = LedgerConsole(directory, config, input_func, password_func, output)

    try:
        console.run()
    except (EOFError, KeyboardInterrupt):
        print(file=console.output)

    if audit_trail is not None:
        integrity = audit_trail.verify_integrity()
        log_action(
            logger, "info", "session ended",
            action="shutdown", resource="console", correlation_id=console.session_id,
            extra={"audit_events": integrity["total_events"], "audit_valid": integrity["valid"]}
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
