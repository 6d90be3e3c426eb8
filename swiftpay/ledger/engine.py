"""Ledger engine - applies balance-affecting operations atomically"""

import time
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from swiftpay.constants import (
    ACCOUNTS,
    PRODUCTS,
    TRANSACTIONS,
    DEFAULT_AIRTIME_PROVIDERS,
    DEFAULT_FUNDING_METHODS,
    Role,
    TransactionType,
)
from swiftpay.ledger.amounts import parse_amount
from swiftpay.ledger.ids import MonotonicIdGenerator, default_id_generator
from swiftpay.models import Account, Product, Transaction
from swiftpay.store import RecordStore, load_models, dump_models
from swiftpay.utils.config_loader import get_section
from swiftpay.utils.errors import (
    WalletError,
    InsufficientFundsError,
    NotFoundError,
    ValidationFailedError,
)
from swiftpay.utils.logging import get_logger
from swiftpay.utils.metrics import ledger_operations, ledger_operation_latency, ledger_volume

logger = get_logger(__name__)


class LedgerReceipt(BaseModel):
    """Accounts touched and records appended by one ledger operation"""

    operation: str = Field(..., description="Operation name")
    accounts: List[Account] = Field(default_factory=list, description="Accounts after the operation")
    transactions: List[Transaction] = Field(default_factory=list, description="Appended records")


class LedgerEngine:
    """
    Executes transfers, funding, utility purchases and marketplace purchases.

    Each operation reads the current account/transaction snapshot, validates
    its preconditions against it, computes the new state and persists every
    changed collection with a single ``put_many`` while holding the store
    lock. A failed precondition raises before anything is written.
    """

    def __init__(self, store: RecordStore, config: Optional[Dict[str, Any]] = None,
                 id_generator: Optional[MonotonicIdGenerator] = None):
        ledger_config = get_section(config, "ledger")
        self.store = store
        self.ids = id_generator or default_id_generator
        self.resolve_recipients = bool(ledger_config.get("resolve_recipients", False))
        self.funding_methods = tuple(ledger_config.get("funding_methods", DEFAULT_FUNDING_METHODS))
        self.airtime_providers = tuple(ledger_config.get("airtime_providers", DEFAULT_AIRTIME_PROVIDERS))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def transfer(self, sender_id: str, recipient_label: str, amount: Any,
                 description: Optional[str] = None) -> LedgerReceipt:
        """
        Debit the sender and record a ``sent`` transaction.

        By default the recipient label is free text and nobody is credited.
        With ``ledger.resolve_recipients`` enabled the label must be the email
        of an existing account, which is credited with a ``received`` record
        in the same commit.

        Raises:
            InvalidAmountError: amount <= 0 or non-numeric
            InsufficientFundsError: amount exceeds the sender's balance
            NotFoundError: unknown sender (or recipient, when resolving)
            ValidationFailedError: empty recipient or self-transfer
        """
        with self._track("transfer"):
            amount = parse_amount(amount)
            recipient_label = (recipient_label or "").strip()
            if not recipient_label:
                raise ValidationFailedError("recipient is required")

            with self.store.lock:
                accounts, transactions = self._snapshot()
                s = self._index(accounts, sender_id)
                sender = accounts[s]
                self._ensure_funds(sender, amount)

                r = None
                if self.resolve_recipients:
                    r = self._index_by_email(accounts, recipient_label)
                    if r == s:
                        raise ValidationFailedError("cannot send money to yourself")

                ids = self.ids.reserve(1 if r is None else 2, after=(t.id for t in transactions))
                now = _utcnow()
                accounts[s] = self._adjust(sender, -amount)
                new = [self._record(ids[0], sender.id, TransactionType.SENT, amount, now,
                                    recipient=recipient_label, description=description)]
                changed = [accounts[s]]

                if r is not None:
                    accounts[r] = self._adjust(accounts[r], amount)
                    new.append(self._record(ids[1], accounts[r].id, TransactionType.RECEIVED, amount, now,
                                            recipient=sender.display_name, description=description))
                    changed.append(accounts[r])

                return self._commit("transfer", accounts, transactions, changed, new)

    def fund(self, account_id: str, amount: Any, method: str) -> LedgerReceipt:
        """
        Credit the account from an external payment method.

        Raises:
            InvalidAmountError: amount <= 0 or non-numeric
            ValidationFailedError: missing or unsupported payment method
            NotFoundError: unknown account
        """
        with self._track("fund"):
            amount = parse_amount(amount)
            method = (method or "").strip()
            if not method:
                raise ValidationFailedError("payment method is required")
            if self.funding_methods and method not in self.funding_methods:
                raise ValidationFailedError(f"unsupported payment method: {method}")

            with self.store.lock:
                accounts, transactions = self._snapshot()
                i = self._index(accounts, account_id)
                accounts[i] = self._adjust(accounts[i], amount)
                txn_id = self.ids.next_id(after=(t.id for t in transactions))
                new = [self._record(txn_id, account_id, TransactionType.FUND, amount, _utcnow(),
                                    description=f"Wallet funding via {method}")]
                return self._commit("fund", accounts, transactions, [accounts[i]], new)

    def utility_purchase(self, account_id: str, amount: Any,
                         description: Optional[str] = None) -> LedgerReceipt:
        """
        Debit the account for an external, non-reversible service.

        Raises:
            InvalidAmountError: amount <= 0 or non-numeric
            InsufficientFundsError: amount exceeds the balance
            NotFoundError: unknown account
        """
        with self._track("utility"):
            amount = parse_amount(amount)

            with self.store.lock:
                accounts, transactions = self._snapshot()
                i = self._index(accounts, account_id)
                self._ensure_funds(accounts[i], amount)
                accounts[i] = self._adjust(accounts[i], -amount)
                txn_id = self.ids.next_id(after=(t.id for t in transactions))
                new = [self._record(txn_id, account_id, TransactionType.UTILITY, amount, _utcnow(),
                                    description=description)]
                return self._commit("utility", accounts, transactions, [accounts[i]], new)

    def buy_airtime(self, account_id: str, provider: str, phone_number: str, amount: Any) -> LedgerReceipt:
        """Utility purchase of mobile airtime"""
        provider = (provider or "").strip()
        phone_number = (phone_number or "").strip()
        if self.airtime_providers and provider not in self.airtime_providers:
            raise ValidationFailedError(f"unsupported network provider: {provider or '(none)'}")
        if not phone_number:
            raise ValidationFailedError("phone number is required")
        return self.utility_purchase(account_id, amount, f"Airtime - {provider} ({phone_number})")

    def buy_electricity(self, account_id: str, meter_number: str, amount: Any) -> LedgerReceipt:
        """Utility purchase of prepaid electricity units"""
        meter_number = (meter_number or "").strip()
        if not meter_number:
            raise ValidationFailedError("meter number is required")
        return self.utility_purchase(account_id, amount, f"Electricity - Meter {meter_number}")

    def marketplace_purchase(self, buyer_id: str, product_id: str) -> LedgerReceipt:
        """
        Move the product price from buyer to vendor and append the paired
        ``purchase`` (buyer) and ``sale`` (vendor) records.

        Raises:
            NotFoundError: unknown buyer, product, or vendor account
            ValidationFailedError: inactive product, non-vendor owner, or
                a vendor buying its own product
            InvalidAmountError: stored price is not positive
            InsufficientFundsError: price exceeds the buyer's balance
        """
        with self._track("purchase"):
            with self.store.lock:
                accounts, transactions = self._snapshot()
                products = load_models(self.store, PRODUCTS, Product)
                product = next((p for p in products if p.id == product_id), None)
                if product is None:
                    raise NotFoundError(f"Product not found: {product_id}")
                if not product.is_active:
                    raise ValidationFailedError(f"Product is not available: {product.name}")
                price = parse_amount(product.price, field="price")

                b = self._index(accounts, buyer_id)
                v = self._index(accounts, product.vendor_id)
                buyer, vendor = accounts[b], accounts[v]
                if vendor.role != Role.VENDOR:
                    raise ValidationFailedError(f"Product owner is not a vendor: {vendor.id}")
                if b == v:
                    raise ValidationFailedError("vendors cannot buy their own products")
                self._ensure_funds(buyer, price)

                accounts[b] = self._adjust(buyer, -price)
                accounts[v] = self._adjust(vendor, price)
                purchase_id, sale_id = self.ids.reserve(2, after=(t.id for t in transactions))
                now = _utcnow()
                new = [
                    self._record(purchase_id, buyer.id, TransactionType.PURCHASE, price, now,
                                 recipient=vendor.display_name, description=f"Purchase: {product.name}"),
                    self._record(sale_id, vendor.id, TransactionType.SALE, price, now,
                                 recipient=buyer.name, description=f"Sale: {product.name}"),
                ]
                return self._commit("purchase", accounts, transactions, [accounts[b], accounts[v]], new)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_account(self, account_id: str) -> Account:
        accounts = load_models(self.store, ACCOUNTS, Account)
        return accounts[self._index(accounts, account_id)]

    def balance(self, account_id: str) -> Decimal:
        return self.get_account(account_id).balance

    def history(self, user_id: str, search: Optional[str] = None,
                txn_type: Optional[str] = None) -> List[Transaction]:
        """
        One account's records in creation order.

        Args:
            user_id: Account whose records to return
            search: Case-insensitive substring matched against recipient and description
            txn_type: Transaction type to keep; None or "all" keeps every type
        """
        wanted = None
        if txn_type and txn_type != "all":
            try:
                wanted = TransactionType(txn_type)
            except ValueError:
                raise ValidationFailedError(f"unknown transaction type: {txn_type}")

        needle = (search or "").strip().lower()
        results = []
        for txn in load_models(self.store, TRANSACTIONS, Transaction):
            if txn.user_id != user_id:
                continue
            if wanted is not None and txn.type != wanted:
                continue
            if needle and needle not in (txn.recipient or "").lower() \
                    and needle not in (txn.description or "").lower():
                continue
            results.append(txn)
        return results

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _track(self, operation: str):
        start = time.time()
        try:
            yield
        except WalletError as e:
            ledger_operations.labels(operation=operation, outcome=e.code).inc()
            logger.warning(f"Ledger {operation} rejected", reason=e.code, detail=str(e))
            raise
        ledger_operations.labels(operation=operation, outcome="success").inc()
        ledger_operation_latency.labels(operation=operation).observe(time.time() - start)

    def _snapshot(self):
        accounts = load_models(self.store, ACCOUNTS, Account)
        transactions = load_models(self.store, TRANSACTIONS, Transaction)
        return accounts, transactions

    @staticmethod
    def _index(accounts: List[Account], account_id: str) -> int:
        for i, account in enumerate(accounts):
            if account.id == account_id:
                return i
        raise NotFoundError(f"Account not found: {account_id}")

    @staticmethod
    def _index_by_email(accounts: List[Account], email: str) -> int:
        email = email.strip().lower()
        for i, account in enumerate(accounts):
            if account.email == email:
                return i
        raise NotFoundError(f"No account registered for {email}")

    @staticmethod
    def _ensure_funds(account: Account, amount: Decimal) -> None:
        if amount > account.balance:
            raise InsufficientFundsError(
                f"Insufficient balance: {account.balance} available, {amount} requested",
                balance=account.balance,
                requested=amount
            )

    @staticmethod
    def _adjust(account: Account, delta: Decimal) -> Account:
        new_balance = account.balance + delta
        if new_balance < 0:
            raise InsufficientFundsError(
                f"Balance of {account.id} would become negative",
                balance=account.balance,
                requested=-delta
            )
        return account.model_copy(update={"balance": new_balance})

    @staticmethod
    def _record(txn_id: str, user_id: str, txn_type: TransactionType, amount: Decimal, date: datetime,
                recipient: Optional[str] = None, description: Optional[str] = None) -> Transaction:
        return Transaction(
            id=txn_id,
            user_id=user_id,
            type=txn_type,
            amount=amount,
            recipient=recipient,
            description=(description or "").strip() or None,
            date=date
        )

    def _commit(self, operation: str, accounts: List[Account], transactions: List[Transaction],
                changed: List[Account], new: List[Transaction]) -> LedgerReceipt:
        self.store.put_many({
            ACCOUNTS: dump_models(accounts),
            TRANSACTIONS: dump_models(transactions + new),
        })

        for txn in new:
            ledger_volume.labels(transaction_type=txn.type.value).inc(float(txn.amount))
            logger.info(
                f"Recorded {txn.type.value} transaction",
                operation=operation,
                transaction_id=txn.id,
                user_id=txn.user_id,
                amount=txn.amount
            )

        return LedgerReceipt(operation=operation, accounts=changed, transactions=new)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
