"""Constants and enums for the wallet ledger"""

from decimal import Decimal
from enum import Enum


class Role(str, Enum):
    """Account roles"""
    CLIENT = "client"
    VENDOR = "vendor"
    ADMIN = "admin"


class TransactionType(str, Enum):
    """Transaction record types; direction is derived from the type"""
    SENT = "sent"
    RECEIVED = "received"
    UTILITY = "utility"
    FUND = "fund"
    PURCHASE = "purchase"
    SALE = "sale"


class TransactionStatus(str, Enum):
    """Transaction status (only completed records are ever written)"""
    COMPLETED = "completed"


class Capability(str, Enum):
    """Operations a principal may be allowed to perform"""
    SEND_MONEY = "send_money"
    SHOP_MARKETPLACE = "shop_marketplace"
    FUND_WALLET = "fund_wallet"
    BUY_UTILITIES = "buy_utilities"
    VIEW_HISTORY = "view_history"
    MANAGE_PROFILE = "manage_profile"
    MANAGE_CATALOG = "manage_catalog"
    ADMINISTER = "administer"


CREDIT_TYPES = frozenset({TransactionType.FUND, TransactionType.RECEIVED, TransactionType.SALE})
DEBIT_TYPES = frozenset({TransactionType.SENT, TransactionType.UTILITY, TransactionType.PURCHASE})

# Record store collections
ACCOUNTS = "accounts"
PRODUCTS = "products"
TRANSACTIONS = "transactions"
CREDENTIALS = "credentials"
COLLECTIONS = (ACCOUNTS, PRODUCTS, TRANSACTIONS, CREDENTIALS)

# Default configuration values
DEFAULT_STARTING_BALANCE = Decimal("1000")
CENTS = Decimal("0.01")
DEFAULT_PASSWORD_MIN_LENGTH = 6
PIN_LENGTH = 4
DEFAULT_RECENT_TRANSACTIONS = 10

DEFAULT_FUNDING_METHODS = ("credit-card", "debit-card", "bank-transfer", "paypal")
DEFAULT_AIRTIME_PROVIDERS = ("verizon", "att", "tmobile", "sprint")
DEFAULT_PRODUCT_CATEGORIES = ("retail", "food", "services", "utilities", "entertainment")
