"""Shared fixtures for wallet ledger tests"""

import copy
import pytest
from decimal import Decimal

from swiftpay.constants import ACCOUNTS, PRODUCTS
from swiftpay.models import Account, Product, VendorInfo
from swiftpay.service import WalletService
from swiftpay.store import MemoryRecordStore, dump_models

# Low hash cost and no processing delays keep the suite fast
TEST_CONFIG = {
    "version": "1.0",
    "ledger": {
        "starting_balance": 1000,
        "resolve_recipients": False,
        "funding_methods": ["credit-card", "debit-card", "bank-transfer", "paypal"],
        "airtime_providers": ["verizon", "att", "tmobile", "sprint"],
        "processing_delay_seconds": {"transfer": 0, "fund": 0, "utility": 0, "purchase": 0},
    },
    "store": {"backend": "memory"},
    "session": {"password_min_length": 6, "hash_iterations": 1000},
    "catalog": {"categories": ["retail", "food", "services", "utilities", "entertainment"]},
}


def make_account(account_id, balance, role="client", email=None, name=None, business_name=None):
    """Build an account record directly, bypassing registration"""
    vendor_info = None
    if role == "vendor":
        vendor_info = VendorInfo(business_name=business_name or f"Shop {account_id}", category="food")
    return Account(
        id=account_id,
        email=email or f"user{account_id}@example.com",
        name=name or f"User {account_id}",
        role=role,
        balance=Decimal(str(balance)),
        vendor_info=vendor_info
    )


def make_store(accounts=(), products=()):
    """Memory store pre-populated with the given models"""
    return MemoryRecordStore({
        ACCOUNTS: dump_models(list(accounts)),
        PRODUCTS: dump_models(list(products)),
    })


def make_product(product_id, vendor_id, price, name="Difference Engine", is_active=True, category="retail"):
    return Product(
        id=product_id,
        vendor_id=vendor_id,
        name=name,
        price=Decimal(str(price)),
        category=category,
        is_active=is_active
    )


@pytest.fixture
def config():
    return copy.deepcopy(TEST_CONFIG)


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def service(store, config):
    return WalletService(store, config)


@pytest.fixture
def session(service):
    return service.session


@pytest.fixture
def ledger(service):
    return service.ledger


@pytest.fixture
def catalog(service):
    return service.catalog


@pytest.fixture
def directory(service):
    return service.directory


@pytest.fixture
def users(session):
    """One account per role, registered through the session layer and signed out"""
    registered = {
        "alice": session.register("alice@example.com", "alice-pass", "Alice Johnson"),
        "bob": session.register("bob@example.com", "bob-pass", "Bob Smith"),
        "vendor": session.register(
            "shop@example.com", "vendor-pass", "Maria Green", "vendor",
            {"businessName": "Green Grocer", "category": "food", "description": "Fresh produce"}
        ),
        "admin": session.register("admin@example.com", "admin-pass", "Site Admin", "admin"),
    }
    session.logout()
    return registered
