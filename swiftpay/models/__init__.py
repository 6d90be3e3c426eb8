"""Data models for the wallet ledger"""

from .account import Account, VendorInfo
from .product import Product
from .transaction import Transaction

__all__ = ["Account", "VendorInfo", "Product", "Transaction"]
