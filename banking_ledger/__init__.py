"""
Banking Ledger

An in-memory, single-user banking ledger: password-protected accounts
with Decimal balances and append-only transaction histories.
"""

__version__ = "1.0.0"
