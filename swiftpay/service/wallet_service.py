"""Wallet service - the boundary between the UI layer and the ledger core.

Every public method authorizes the signed-in principal once, invokes one
component operation and returns an ``OperationResult``. Component errors
never escape: each ``WalletError`` becomes a structured failure carrying its
specific code and reason.
"""

import time
from typing import Any, Callable, Dict, Optional

from pydantic_core import to_jsonable_python

from swiftpay.catalog import CatalogManager
from swiftpay.constants import Capability, TransactionType
from swiftpay.directory import DirectoryAuditView
from swiftpay.ledger import LedgerEngine
from swiftpay.service.results import OperationResult
from swiftpay.session import Principal, SessionManager
from swiftpay.store import RecordStore, create_record_store
from swiftpay.utils.config_loader import load_config, get_section
from swiftpay.utils.errors import WalletError
from swiftpay.utils.logging import get_logger

logger = get_logger(__name__)


class WalletService:
    """UI-facing facade over session, ledger, catalog and directory"""

    def __init__(self, store: RecordStore, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.store = store
        self.session = SessionManager(store, self.config)
        self.ledger = LedgerEngine(store, self.config)
        self.catalog = CatalogManager(store, self.config)
        self.directory = DirectoryAuditView(store, self.config)
        self.processing_delays = get_section(self.config, "ledger").get("processing_delay_seconds") or {}

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "WalletService":
        """Build the service and its record store from YAML configuration"""
        config = config if config is not None else load_config()
        store = create_record_store(get_section(config, "store"))
        return cls(store, config)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def register(self, email: str, password: str, name: str, role: str = "client",
                 vendor_info: Optional[Dict[str, Any]] = None) -> OperationResult:
        return self._run("register", self.session.register, email, password, name, role, vendor_info)

    def login(self, email: str, password: str) -> OperationResult:
        return self._run("login", self.session.authenticate, email, password)

    def logout(self) -> OperationResult:
        return self._run("logout", self.session.logout)

    def current_principal(self) -> Optional[Principal]:
        return self.session.current_principal()

    def change_password(self, current_password: str, new_password: str) -> OperationResult:
        return self._run("change_password", self.session.change_password, current_password, new_password,
                         capability=Capability.MANAGE_PROFILE)

    def set_pin(self, pin: str) -> OperationResult:
        return self._run("set_pin", self.session.set_pin, pin, capability=Capability.MANAGE_PROFILE)

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def get_balance(self) -> OperationResult:
        return self._run("get_balance", self.ledger.get_account, capability=Capability.VIEW_HISTORY)

    def send_money(self, recipient: str, amount: Any, description: Optional[str] = None) -> OperationResult:
        return self._run("send_money", self.ledger.transfer, recipient, amount, description,
                         capability=Capability.SEND_MONEY, delay_key="transfer")

    def fund_wallet(self, amount: Any, method: str) -> OperationResult:
        return self._run("fund_wallet", self.ledger.fund, amount, method,
                         capability=Capability.FUND_WALLET, delay_key="fund")

    def buy_airtime(self, provider: str, phone_number: str, amount: Any) -> OperationResult:
        return self._run("buy_airtime", self.ledger.buy_airtime, provider, phone_number, amount,
                         capability=Capability.BUY_UTILITIES, delay_key="utility")

    def buy_electricity(self, meter_number: str, amount: Any) -> OperationResult:
        return self._run("buy_electricity", self.ledger.buy_electricity, meter_number, amount,
                         capability=Capability.BUY_UTILITIES, delay_key="utility")

    def purchase_product(self, product_id: str) -> OperationResult:
        return self._run("purchase_product", self.ledger.marketplace_purchase, product_id,
                         capability=Capability.SHOP_MARKETPLACE, delay_key="purchase")

    def transaction_history(self, search: Optional[str] = None, txn_type: Optional[str] = None) -> OperationResult:
        return self._run("transaction_history", self.ledger.history, search, txn_type,
                         capability=Capability.VIEW_HISTORY)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def browse_marketplace(self, search: Optional[str] = None, category: Optional[str] = None) -> OperationResult:
        return self._run("browse_marketplace", lambda _: self.catalog.browse(search, category),
                         capability=Capability.SHOP_MARKETPLACE)

    def add_product(self, name: str, price: Any, description: str = "", category: str = "") -> OperationResult:
        return self._run("add_product", self.catalog.create_product, name, price, description, category,
                         capability=Capability.MANAGE_CATALOG)

    def update_product(self, product_id: str, **changes: Any) -> OperationResult:
        return self._run("update_product", self.catalog.update_product, product_id,
                         capability=Capability.MANAGE_CATALOG, **changes)

    def set_product_active(self, product_id: str, is_active: bool) -> OperationResult:
        return self._run("set_product_active", self.catalog.set_product_active, product_id, is_active,
                         capability=Capability.MANAGE_CATALOG)

    def delete_product(self, product_id: str) -> OperationResult:
        return self._run("delete_product", self.catalog.delete_product, product_id,
                         capability=Capability.MANAGE_CATALOG)

    def vendor_dashboard(self) -> OperationResult:
        def dashboard(vendor_id: str) -> Dict[str, Any]:
            return {
                "account": self.ledger.get_account(vendor_id),
                "stats": self.catalog.vendor_stats(vendor_id),
                "products": self.catalog.list_vendor_products(vendor_id),
                "sales": self.ledger.history(vendor_id, txn_type=TransactionType.SALE.value),
            }
        return self._run("vendor_dashboard", dashboard, capability=Capability.MANAGE_CATALOG)

    # ------------------------------------------------------------------
    # Directory / audit
    # ------------------------------------------------------------------

    def admin_overview(self) -> OperationResult:
        def overview(_) -> Dict[str, Any]:
            return {
                "stats": self.directory.overview(),
                "recent_transactions": self.directory.recent_transactions(),
                "summary": self.directory.transaction_summary(),
            }
        return self._run("admin_overview", overview, capability=Capability.ADMINISTER)

    def list_users(self) -> OperationResult:
        return self._run("list_users", lambda _: self.directory.list_accounts(),
                         capability=Capability.ADMINISTER)

    def list_all_transactions(self) -> OperationResult:
        return self._run("list_all_transactions", lambda _: self.directory.list_transactions(),
                         capability=Capability.ADMINISTER)

    def verify_vendor(self, account_id: str) -> OperationResult:
        return self._run("verify_vendor", lambda _: self.directory.set_vendor_verified(account_id, True),
                         capability=Capability.ADMINISTER)

    def toggle_suspended(self, account_id: str) -> OperationResult:
        return self._run("toggle_suspended", lambda _: self.directory.toggle_suspended(account_id),
                         capability=Capability.ADMINISTER)

    def reconcile_ledger(self) -> OperationResult:
        def reconcile(_) -> Dict[str, Any]:
            return {
                "balance_mismatches": self.directory.reconcile_balances(),
                "unpaired_marketplace_records": self.directory.unpaired_marketplace_records(),
            }
        return self._run("reconcile_ledger", reconcile, capability=Capability.ADMINISTER)

    # ------------------------------------------------------------------

    def _run(self, operation: str, func: Callable, *args, capability: Optional[Capability] = None,
             delay_key: Optional[str] = None, **kwargs) -> OperationResult:
        """
        Authorize, optionally simulate processing, call ``func`` and wrap the outcome.

        When ``capability`` is given the principal's account id is passed to
        ``func`` as its first argument.
        """
        try:
            if capability is not None:
                principal = self.session.require_principal().require(capability)
                args = (principal.id,) + args
            if delay_key is not None:
                self._simulate_processing(delay_key)
            data = func(*args, **kwargs)
        except WalletError as e:
            logger.warning(f"{operation} failed", error=e.code, reason=str(e))
            return OperationResult.failure(operation, e)

        return OperationResult.success(operation, to_jsonable_python(data, by_alias=True, exclude_none=True))

    def _simulate_processing(self, delay_key: str) -> None:
        # Presentation-only pause; runs before the atomic state transition
        delay = float(self.processing_delays.get(delay_key, 0) or 0)
        if delay > 0:
            time.sleep(delay)
