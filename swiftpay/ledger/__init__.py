"""Ledger core: balance-affecting operations and transaction history"""

from .amounts import parse_amount
from .engine import LedgerEngine, LedgerReceipt
from .ids import MonotonicIdGenerator, default_id_generator

__all__ = ["LedgerEngine", "LedgerReceipt", "MonotonicIdGenerator", "default_id_generator", "parse_amount"]
