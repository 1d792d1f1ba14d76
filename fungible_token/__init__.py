"""
Fungible Token Ledger

Accounting core of a fungible token: a single fixed supply partitioned into
per-account balances, with registration, atomic transfers, immutable
metadata and NEP-141 style event notifications.
"""

__version__ = "1.0.0"
