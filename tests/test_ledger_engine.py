"""Tests for the ledger engine: transfers, funding, utilities and marketplace purchases"""

import copy
import threading
import pytest
from decimal import Decimal

from conftest import TEST_CONFIG, make_account, make_product, make_store
from swiftpay.constants import ACCOUNTS, TRANSACTIONS
from swiftpay.ledger import LedgerEngine, parse_amount
from swiftpay.models import Account, Transaction
from swiftpay.store import MemoryRecordStore, load_models
from swiftpay.utils.errors import (
    InsufficientFundsError,
    InvalidAmountError,
    NotFoundError,
    StoreError,
    ValidationFailedError,
)


def _transactions(store):
    return load_models(store, TRANSACTIONS, Transaction)


def _balances(store):
    return {a.id: a.balance for a in load_models(store, ACCOUNTS, Account)}


class FailingStore(MemoryRecordStore):
    """Memory store whose writes to one collection always fail"""

    def __init__(self, initial, fail_on):
        super().__init__(initial)
        self.fail_on = fail_on

    def _write(self, collection, records):
        if collection == self.fail_on:
            raise StoreError(f"disk full while writing {collection}")
        super()._write(collection, records)


# ----------------------------------------------------------------------
# Transfers
# ----------------------------------------------------------------------

def test_transfer_debits_sender_and_records_sent():
    """Account with 1000 sends 100: balance 900 and one sent record of 100"""
    store = make_store([make_account("1", 1000)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    receipt = ledger.transfer("1", "bob@example.com", 100, "Rent share")

    assert ledger.balance("1") == Decimal("900.00")
    transactions = _transactions(store)
    assert len(transactions) == 1
    sent = transactions[0]
    assert sent.type.value == "sent"
    assert sent.amount == Decimal("100.00")
    assert sent.user_id == "1"
    assert sent.recipient == "bob@example.com"
    assert sent.description == "Rent share"
    assert sent.status.value == "completed"
    assert receipt.operation == "transfer"
    assert receipt.transactions[0].id == sent.id


def test_transfer_insufficient_funds_changes_nothing():
    """Account with 50 cannot send 100; balance and history untouched"""
    store = make_store([make_account("1", 50)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(InsufficientFundsError) as exc_info:
        ledger.transfer("1", "bob@example.com", 100)

    assert exc_info.value.balance == Decimal("50")
    assert exc_info.value.requested == Decimal("100.00")
    assert ledger.balance("1") == Decimal("50")
    assert _transactions(store) == []


def test_transfer_entire_balance_allowed():
    """Sending exactly the balance leaves zero, never negative"""
    store = make_store([make_account("1", "12.50")])
    ledger = LedgerEngine(store, TEST_CONFIG)

    ledger.transfer("1", "someone", "12.50")

    assert ledger.balance("1") == Decimal("0.00")


def test_transfer_requires_recipient():
    store = make_store([make_account("1", 100)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(ValidationFailedError):
        ledger.transfer("1", "   ", 10)
    assert _transactions(store) == []


def test_transfer_unknown_sender():
    ledger = LedgerEngine(make_store(), TEST_CONFIG)

    with pytest.raises(NotFoundError):
        ledger.transfer("missing", "bob@example.com", 10)


@pytest.mark.parametrize("amount", [0, -5, "abc", None, True, "0.001", float("nan"), "Infinity"])
def test_transfer_rejects_invalid_amounts(amount):
    store = make_store([make_account("1", 100)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(InvalidAmountError):
        ledger.transfer("1", "bob@example.com", amount)

    assert ledger.balance("1") == Decimal("100")
    assert _transactions(store) == []


class TestResolvedTransfers:
    """Transfers with recipient resolution enabled"""

    @pytest.fixture
    def resolving_config(self):
        config = copy.deepcopy(TEST_CONFIG)
        config["ledger"]["resolve_recipients"] = True
        return config

    def test_credits_recipient_with_received_record(self, resolving_config):
        store = make_store([
            make_account("1", 1000, name="Alice Johnson"),
            make_account("2", 200, email="bob@example.com"),
        ])
        ledger = LedgerEngine(store, resolving_config)

        ledger.transfer("1", "Bob@Example.com", 150)

        assert _balances(store) == {"1": Decimal("850.00"), "2": Decimal("350.00")}
        sent, received = _transactions(store)
        assert sent.type.value == "sent" and sent.user_id == "1"
        assert received.type.value == "received" and received.user_id == "2"
        assert received.recipient == "Alice Johnson"
        assert int(received.id) == int(sent.id) + 1

    def test_unknown_recipient(self, resolving_config):
        store = make_store([make_account("1", 1000)])
        ledger = LedgerEngine(store, resolving_config)

        with pytest.raises(NotFoundError):
            ledger.transfer("1", "nobody@example.com", 10)
        assert ledger.balance("1") == Decimal("1000")

    def test_self_transfer_rejected(self, resolving_config):
        store = make_store([make_account("1", 1000, email="alice@example.com")])
        ledger = LedgerEngine(store, resolving_config)

        with pytest.raises(ValidationFailedError):
            ledger.transfer("1", "alice@example.com", 10)
        assert _transactions(store) == []


# ----------------------------------------------------------------------
# Funding and utilities
# ----------------------------------------------------------------------

def test_fund_credits_account():
    store = make_store([make_account("1", 100)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    ledger.fund("1", "250.5", "paypal")

    assert ledger.balance("1") == Decimal("350.50")
    record = _transactions(store)[0]
    assert record.type.value == "fund"
    assert record.description == "Wallet funding via paypal"
    assert record.is_credit


def test_fund_negative_amount_rejected():
    """Funding with -5 fails InvalidAmount and leaves the balance alone"""
    store = make_store([make_account("1", 100)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(InvalidAmountError):
        ledger.fund("1", -5, "credit-card")
    assert ledger.balance("1") == Decimal("100")


@pytest.mark.parametrize("method", ["", "bitcoin"])
def test_fund_rejects_unsupported_method(method):
    store = make_store([make_account("1", 100)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(ValidationFailedError):
        ledger.fund("1", 10, method)
    assert _transactions(store) == []


def test_utility_purchase_debits():
    store = make_store([make_account("1", 100)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    ledger.utility_purchase("1", 40, "Water bill")

    assert ledger.balance("1") == Decimal("60.00")
    record = _transactions(store)[0]
    assert record.type.value == "utility"
    assert record.signed_amount == Decimal("-40.00")


def test_utility_purchase_insufficient_funds():
    store = make_store([make_account("1", 10)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(InsufficientFundsError):
        ledger.utility_purchase("1", 40)
    assert ledger.balance("1") == Decimal("10")


def test_buy_airtime_description():
    store = make_store([make_account("1", 100)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    ledger.buy_airtime("1", "verizon", "555-0100", 15)

    record = _transactions(store)[0]
    assert record.description == "Airtime - verizon (555-0100)"
    assert ledger.balance("1") == Decimal("85.00")


def test_buy_airtime_validation():
    store = make_store([make_account("1", 100)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(ValidationFailedError):
        ledger.buy_airtime("1", "unknown-net", "555-0100", 15)
    with pytest.raises(ValidationFailedError):
        ledger.buy_airtime("1", "att", "", 15)
    assert _transactions(store) == []


def test_buy_electricity():
    store = make_store([make_account("1", 100)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    ledger.buy_electricity("1", "MTR-42", 20)
    assert _transactions(store)[0].description == "Electricity - Meter MTR-42"

    with pytest.raises(ValidationFailedError):
        ledger.buy_electricity("1", " ", 20)


# ----------------------------------------------------------------------
# Marketplace purchases
# ----------------------------------------------------------------------

def test_marketplace_purchase_moves_price_and_pairs_records():
    """Buyer 500 buys a 75 product from vendor 0: 425/75 and purchase+sale records"""
    store = make_store(
        [make_account("b", 500, name="Alice Johnson"), make_account("v", 0, role="vendor", business_name="Engines Ltd")],
        [make_product("p1", "v", 75)]
    )
    ledger = LedgerEngine(store, TEST_CONFIG)

    receipt = ledger.marketplace_purchase("b", "p1")

    assert _balances(store) == {"b": Decimal("425.00"), "v": Decimal("75.00")}
    purchase, sale = _transactions(store)
    assert purchase.type.value == "purchase" and purchase.user_id == "b"
    assert sale.type.value == "sale" and sale.user_id == "v"
    assert purchase.amount == sale.amount == Decimal("75.00")
    assert purchase.recipient == "Engines Ltd"
    assert sale.recipient == "Alice Johnson"
    assert purchase.description == "Purchase: Difference Engine"
    assert sale.description == "Sale: Difference Engine"
    assert purchase.date == sale.date
    assert int(sale.id) == int(purchase.id) + 1
    assert len(receipt.accounts) == 2


def test_marketplace_purchase_conserves_money():
    store = make_store(
        [make_account("b", 300), make_account("v", 20, role="vendor")],
        [make_product("p1", "v", "19.99")]
    )
    ledger = LedgerEngine(store, TEST_CONFIG)
    before = sum(_balances(store).values())

    ledger.marketplace_purchase("b", "p1")
    ledger.marketplace_purchase("b", "p1")

    assert sum(_balances(store).values()) == before
    assert len(_transactions(store)) == 4


def test_marketplace_purchase_insufficient_funds():
    store = make_store(
        [make_account("b", 10), make_account("v", 0, role="vendor")],
        [make_product("p1", "v", 75)]
    )
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(InsufficientFundsError):
        ledger.marketplace_purchase("b", "p1")
    assert _balances(store) == {"b": Decimal("10"), "v": Decimal("0")}
    assert _transactions(store) == []


def test_marketplace_purchase_inactive_product():
    store = make_store(
        [make_account("b", 500), make_account("v", 0, role="vendor")],
        [make_product("p1", "v", 75, is_active=False)]
    )
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(ValidationFailedError):
        ledger.marketplace_purchase("b", "p1")


def test_marketplace_purchase_unknown_product_or_vendor():
    store = make_store(
        [make_account("b", 500)],
        [make_product("orphan", "gone", 75)]
    )
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(NotFoundError):
        ledger.marketplace_purchase("b", "missing")
    with pytest.raises(NotFoundError):
        ledger.marketplace_purchase("b", "orphan")


def test_vendor_cannot_buy_own_product():
    store = make_store(
        [make_account("v", 500, role="vendor")],
        [make_product("p1", "v", 75)]
    )
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(ValidationFailedError):
        ledger.marketplace_purchase("v", "p1")
    assert _transactions(store) == []


def test_failed_write_rolls_back_balances():
    """A failing transactions write restores the accounts snapshot"""
    seed = make_store(
        [make_account("b", 500), make_account("v", 0, role="vendor")],
        [make_product("p1", "v", 75)]
    )
    store = FailingStore({c: seed.list(c) for c in ("accounts", "products")}, fail_on=TRANSACTIONS)
    ledger = LedgerEngine(store, TEST_CONFIG)

    with pytest.raises(StoreError):
        ledger.marketplace_purchase("b", "p1")

    assert _balances(store) == {"b": Decimal("500"), "v": Decimal("0")}


# ----------------------------------------------------------------------
# Reads and invariants
# ----------------------------------------------------------------------

def test_history_filters():
    store = make_store([make_account("1", 1000), make_account("2", 1000)])
    ledger = LedgerEngine(store, TEST_CONFIG)
    ledger.transfer("1", "Coffee Corner", 5, "Flat white")
    ledger.fund("1", 50, "debit-card")
    ledger.buy_electricity("1", "MTR-1", 20)
    ledger.fund("2", 10, "paypal")

    assert len(ledger.history("1")) == 3
    assert len(ledger.history("1", txn_type="all")) == 3
    assert [t.type.value for t in ledger.history("1", txn_type="fund")] == ["fund"]
    assert [t.recipient for t in ledger.history("1", search="coffee")] == ["Coffee Corner"]
    assert len(ledger.history("1", search="METER")) == 1
    assert ledger.history("1", search="nothing-matches") == []

    with pytest.raises(ValidationFailedError):
        ledger.history("1", txn_type="refund")


def test_transaction_ids_increase():
    store = make_store([make_account("1", 1000)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    for _ in range(5):
        ledger.fund("1", 1, "paypal")

    ids = [int(t.id) for t in _transactions(store)]
    assert ids == sorted(ids)
    assert len(set(ids)) == 5


def test_concurrent_transfers_do_not_lose_updates():
    store = make_store([make_account("1", 1000)])
    ledger = LedgerEngine(store, TEST_CONFIG)

    threads = [threading.Thread(target=ledger.transfer, args=("1", "friend", 10)) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert ledger.balance("1") == Decimal("900.00")
    assert len(_transactions(store)) == 10


@pytest.mark.parametrize("raw, expected", [
    ("12.345", Decimal("12.35")),
    (10, Decimal("10.00")),
    (0.1, Decimal("0.10")),
    (Decimal("7.005"), Decimal("7.01")),
    (" 3 ", Decimal("3.00")),
])
def test_parse_amount_quantizes_to_cents(raw, expected):
    assert parse_amount(raw) == expected


def test_parse_amount_names_field():
    with pytest.raises(InvalidAmountError, match="price"):
        parse_amount("-1", field="price")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
