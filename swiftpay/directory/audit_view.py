"""Directory/audit view - admin oversight of accounts and the ledger"""

import pandas as pd
from decimal import Decimal
from typing import Any, Dict, List, Optional

from swiftpay.constants import (
    ACCOUNTS,
    TRANSACTIONS,
    DEFAULT_RECENT_TRANSACTIONS,
    DEFAULT_STARTING_BALANCE,
    Role,
    TransactionType,
)
from swiftpay.models import Account, Transaction
from swiftpay.store import RecordStore, load_models, dump_models
from swiftpay.utils.config_loader import get_section
from swiftpay.utils.errors import NotFoundError, ValidationFailedError
from swiftpay.utils.logging import get_logger
from swiftpay.utils.metrics import admin_actions, vendors_pending_verification

logger = get_logger(__name__)


class DirectoryAuditView:
    """
    Read aggregation over all accounts and transactions, plus the two admin
    mutations (vendor verification and suspension).

    Callers are trusted to be admins; the role check happens at the
    service boundary.
    """

    def __init__(self, store: RecordStore, config: Optional[Dict[str, Any]] = None):
        ledger_config = get_section(config, "ledger")
        self.store = store
        self.starting_balance = Decimal(str(ledger_config.get("starting_balance", DEFAULT_STARTING_BALANCE)))

    def list_accounts(self) -> List[Account]:
        return load_models(self.store, ACCOUNTS, Account)

    def list_transactions(self) -> List[Transaction]:
        return load_models(self.store, TRANSACTIONS, Transaction)

    def get_account(self, account_id: str) -> Account:
        for account in self.list_accounts():
            if account.id == account_id:
                return account
        raise NotFoundError(f"Account not found: {account_id}")

    def set_vendor_verified(self, account_id: str, verified: bool = True) -> Account:
        """
        Mark a vendor's business details as verified.

        Raises:
            NotFoundError: Unknown account
            ValidationFailedError: Account is not a vendor
        """
        def verify(account: Account) -> Account:
            if account.role != Role.VENDOR or account.vendor_info is None:
                raise ValidationFailedError(f"Account {account.id} is not a vendor")
            vendor_info = account.vendor_info.model_copy(update={"is_verified": bool(verified)})
            return account.model_copy(update={"vendor_info": vendor_info})

        account = self._mutate(account_id, verify)
        admin_actions.labels(action="verify_vendor").inc()
        logger.info("Vendor verification updated", account_id=account_id, verified=bool(verified))
        return account

    def toggle_suspended(self, account_id: str) -> Account:
        """Flip an account's suspension flag"""
        account = self._mutate(account_id, lambda a: a.model_copy(update={"suspended": not a.suspended}))
        admin_actions.labels(action="suspend" if account.suspended else "reinstate").inc()
        logger.info("Account suspension toggled", account_id=account_id, suspended=account.suspended)
        return account

    def overview(self) -> Dict[str, Any]:
        """Headline numbers for the admin dashboard"""
        accounts = self.list_accounts()
        transactions = self.list_transactions()
        pending = sum(
            1 for a in accounts
            if a.role == Role.VENDOR and a.vendor_info is not None and not a.vendor_info.is_verified
        )
        vendors_pending_verification.set(pending)

        return {
            "total_users": len(accounts),
            "total_transactions": len(transactions),
            "total_volume": sum((t.amount for t in transactions), Decimal("0")),
            "pending_vendors": pending,
            "suspended_users": sum(1 for a in accounts if a.suspended),
        }

    def recent_transactions(self, limit: int = DEFAULT_RECENT_TRANSACTIONS) -> List[Transaction]:
        """The latest ``limit`` records, newest first"""
        if limit <= 0:
            return []
        return list(reversed(self.list_transactions()[-limit:]))

    def transaction_summary(self) -> Dict[str, Dict[str, Any]]:
        """
        Record count and volume per transaction type.

        Returns:
            {'purchase': {'count': 2, 'volume': 150.0}, ...}
        """
        transactions = self.list_transactions()
        if not transactions:
            return {}

        df = pd.DataFrame([{"type": t.type.value, "amount": float(t.amount)} for t in transactions])
        grouped = df.groupby("type")["amount"].agg(["count", "sum"])

        return {
            txn_type: {"count": int(row["count"]), "volume": round(float(row["sum"]), 2)}
            for txn_type, row in grouped.iterrows()
        }

    def reconcile_balances(self, starting_balance: Optional[Decimal] = None) -> List[Dict[str, Any]]:
        """
        Compare every balance with the one implied by the account's records.

        Expected balance = starting balance + signed sum of the account's
        transactions. Accounts whose stored balance differs are returned.

        Args:
            starting_balance: Registration balance; defaults to ledger.starting_balance

        Returns:
            List of {'account_id', 'email', 'balance', 'expected', 'difference'}
        """
        opening = self.starting_balance if starting_balance is None else Decimal(str(starting_balance))
        net: Dict[str, Decimal] = {}
        for txn in self.list_transactions():
            net[txn.user_id] = net.get(txn.user_id, Decimal("0")) + txn.signed_amount

        mismatches = []
        for account in self.list_accounts():
            expected = opening + net.get(account.id, Decimal("0"))
            if expected != account.balance:
                mismatches.append({
                    "account_id": account.id,
                    "email": account.email,
                    "balance": account.balance,
                    "expected": expected,
                    "difference": account.balance - expected,
                })

        if mismatches:
            logger.warning("Balance reconciliation found mismatches", count=len(mismatches))
        return mismatches

    def unpaired_marketplace_records(self) -> List[Transaction]:
        """
        Purchase/sale records that are not part of a well-formed pair.

        A pair is a ``purchase`` immediately followed by a ``sale`` with the
        same amount and timestamp under a different account.
        """
        transactions = self.list_transactions()
        paired = set()
        for i, txn in enumerate(transactions[:-1]):
            if txn.type != TransactionType.PURCHASE:
                continue
            nxt = transactions[i + 1]
            if (nxt.type == TransactionType.SALE and nxt.amount == txn.amount
                    and nxt.date == txn.date and nxt.user_id != txn.user_id):
                paired.update((i, i + 1))

        marketplace_types = (TransactionType.PURCHASE, TransactionType.SALE)
        return [
            txn for i, txn in enumerate(transactions)
            if txn.type in marketplace_types and i not in paired
        ]

    def _mutate(self, account_id: str, change) -> Account:
        with self.store.lock:
            accounts = self.list_accounts()
            for i, account in enumerate(accounts):
                if account.id == account_id:
                    accounts[i] = change(account)
                    self.store.put(ACCOUNTS, dump_models(accounts))
                    return accounts[i]
        raise NotFoundError(f"Account not found: {account_id}")
