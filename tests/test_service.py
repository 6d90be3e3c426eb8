"""Tests for the wallet service boundary: authorization and structured results"""

import copy
import pytest
from unittest.mock import patch

from conftest import TEST_CONFIG
from swiftpay.service import OperationResult, WalletService
from swiftpay.store import MemoryRecordStore


def _login(service, email, password):
    result = service.login(email, password)
    assert result.ok, result.message
    return result


def test_operations_require_sign_in(service, users):
    result = service.get_balance()

    assert result.ok is False
    assert result.error == "AuthenticationFailed"


def test_register_and_balance(service):
    registered = service.register("ada@example.com", "secret1", "Ada Lovelace")

    assert registered.ok
    assert registered.data["email"] == "ada@example.com"
    assert registered.data["balance"] == "1000.00"
    assert "vendorInfo" not in registered.data

    balance = service.get_balance()
    assert balance.ok and balance.data["balance"] == "1000.00"


def test_duplicate_registration_result(service, users):
    result = service.register("alice@example.com", "secret1", "Another Alice")

    assert result.ok is False
    assert result.error == "Duplicate"
    assert result.operation == "register"


def test_send_money_success_and_failures(service, users):
    _login(service, "alice@example.com", "alice-pass")

    sent = service.send_money("bob@example.com", "100", "Dinner")
    assert sent.ok
    assert sent.data["transactions"][0]["type"] == "sent"
    assert sent.data["accounts"][0]["balance"] == "900.00"

    too_much = service.send_money("bob@example.com", 5000)
    assert too_much.error == "InsufficientFunds"
    assert "900.00" in too_much.message

    assert service.send_money("bob@example.com", -1).error == "InvalidAmount"
    assert service.send_money("", 10).error == "ValidationFailed"


def test_vendor_cannot_send_money(service, users):
    _login(service, "shop@example.com", "vendor-pass")

    result = service.send_money("alice@example.com", 10)

    assert result.ok is False
    assert result.error == "Unauthorized"


def test_client_cannot_administer(service, users):
    _login(service, "alice@example.com", "alice-pass")

    assert service.admin_overview().error == "Unauthorized"
    assert service.toggle_suspended(users["bob"].id).error == "Unauthorized"
    assert service.add_product("Bike", 100).error == "Unauthorized"


def test_marketplace_flow(service, users):
    _login(service, "shop@example.com", "vendor-pass")
    added = service.add_product("Veg Box", "35", "Seasonal vegetables", "food")
    assert added.ok
    product_id = added.data["id"]
    service.logout()

    _login(service, "alice@example.com", "alice-pass")
    listing = service.browse_marketplace(category="food")
    assert [p["id"] for p in listing.data] == [product_id]

    purchase = service.purchase_product(product_id)
    assert purchase.ok
    assert [t["type"] for t in purchase.data["transactions"]] == ["purchase", "sale"]

    history = service.transaction_history(txn_type="purchase")
    assert len(history.data) == 1
    assert history.data[0]["recipient"] == "Green Grocer"
    service.logout()

    _login(service, "shop@example.com", "vendor-pass")
    dashboard = service.vendor_dashboard()
    assert dashboard.ok
    assert dashboard.data["stats"]["sales_count"] == 1
    assert dashboard.data["stats"]["total_sales"] == "35.00"
    assert dashboard.data["account"]["balance"] == "1035.00"
    assert len(dashboard.data["sales"]) == 1


def test_fund_and_utilities(service, users):
    _login(service, "bob@example.com", "bob-pass")

    assert service.fund_wallet(200, "bank-transfer").ok
    assert service.fund_wallet(200, "cash").error == "ValidationFailed"
    assert service.buy_airtime("tmobile", "555-0102", 20).ok
    assert service.buy_electricity("MTR-7", 30).ok

    balance = service.get_balance()
    assert balance.data["balance"] == "1150.00"


def test_admin_actions(service, users):
    _login(service, "admin@example.com", "admin-pass")

    verified = service.verify_vendor(users["vendor"].id)
    assert verified.ok
    assert verified.data["vendorInfo"]["isVerified"] is True

    overview = service.admin_overview()
    assert overview.data["stats"]["total_users"] == 4
    assert overview.data["stats"]["pending_vendors"] == 0

    assert len(service.list_users().data) == 4
    assert service.list_all_transactions().data == []
    assert service.verify_vendor(users["alice"].id).error == "ValidationFailed"

    reconcile = service.reconcile_ledger()
    assert reconcile.data == {"balance_mismatches": [], "unpaired_marketplace_records": []}


def test_suspended_user_is_signed_out(service, users):
    _login(service, "bob@example.com", "bob-pass")
    service.logout()
    _login(service, "admin@example.com", "admin-pass")
    assert service.toggle_suspended(users["bob"].id).data["suspended"] is True
    service.logout()

    result = service.login("bob@example.com", "bob-pass")
    assert result.error == "AuthenticationFailed"
    assert result.message == "Account is suspended"


def test_profile_operations(service, users):
    _login(service, "alice@example.com", "alice-pass")

    assert service.set_pin("1234").ok
    assert service.set_pin("12").error == "ValidationFailed"
    assert service.change_password("wrong-pass", "new-secret").error == "AuthenticationFailed"
    assert service.change_password("alice-pass", "new-secret").ok


def test_processing_delay_runs_before_operation(store, users):
    config = copy.deepcopy(TEST_CONFIG)
    config["ledger"]["processing_delay_seconds"] = {"transfer": 2}
    service = WalletService(store, config)
    _login(service, "alice@example.com", "alice-pass")

    with patch("swiftpay.service.wallet_service.time.sleep") as sleep:
        assert service.send_money("bob@example.com", 10).ok
        assert service.fund_wallet(10, "paypal").ok

    sleep.assert_called_once_with(2.0)


def test_from_config_builds_memory_store(config):
    service = WalletService.from_config(config)

    assert isinstance(service.store, MemoryRecordStore)
    assert service.session.hash_iterations == 1000


def test_failure_result_shape():
    from swiftpay.utils.errors import NotFoundError

    result = OperationResult.failure("purchase_product", NotFoundError("Product not found: p1"))

    assert result.model_dump() == {
        "ok": False,
        "operation": "purchase_product",
        "data": None,
        "error": "NotFound",
        "message": "Product not found: p1",
    }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
