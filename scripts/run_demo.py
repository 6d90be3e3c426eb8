#!/usr/bin/env python
"""
Demo runner script for the SwiftPay wallet ledger

Seeds the demo accounts and products, then walks one client through a
short session (transfer, funding, airtime, marketplace purchase) and
prints the admin overview.

Usage:
    python scripts/run_demo.py              # Seed data and run the walkthrough
    python scripts/run_demo.py --dry-run    # Validate demo data files only
    python scripts/run_demo.py --fast       # Skip the processing delays
"""

import os
import sys
import argparse
from pathlib import Path
from datetime import datetime

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set demo mode environment variables
os.environ["DEMO_MODE"] = "true"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from swiftpay.demo import seed_demo_data
from swiftpay.service import WalletService
from swiftpay.utils.config_loader import load_config
from swiftpay.utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_FILES = ["accounts.csv", "products.csv"]


def print_header(title: str):
    """Print formatted section header"""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def validate_demo_data(data_dir: str) -> bool:
    """
    Validate that demo data files exist

    Args:
        data_dir: Path to demo data directory

    Returns:
        True if all required files exist
    """
    data_path = Path(data_dir)

    print_header("Demo Data Validation")

    if not data_path.exists():
        print(f"❌ Demo data directory not found: {data_dir}")
        return False

    print(f"✅ Demo data directory found: {data_path.absolute()}")

    missing_files = []
    for filename in REQUIRED_FILES:
        filepath = data_path / filename
        if filepath.exists():
            size_kb = filepath.stat().st_size / 1024
            print(f"  ✅ {filename} ({size_kb:.1f} KB)")
        else:
            print(f"  ❌ {filename} (missing)")
            missing_files.append(filename)

    if missing_files:
        print(f"\n❌ Missing required files: {missing_files}")
        return False

    print("\n✅ All demo data files present")
    return True


def show_result(label: str, result):
    """Print one operation outcome"""
    if result.ok:
        print(f"  ✅ {label}")
    else:
        print(f"  ❌ {label}: {result.error} - {result.message}")


def run_walkthrough(fast: bool = False):
    """
    Seed the store and run a scripted client session

    Args:
        fast: Zero the processing delays from the demo config
    """
    print_header("Running Wallet Walkthrough")
    print(f"⏰ Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    try:
        config = load_config()
        if fast:
            config["ledger"]["processing_delay_seconds"] = {}

        service = WalletService.from_config(config)
        seeded = seed_demo_data(service)
        print(f"\n🌱 Seeded {seeded['accounts']} accounts and {seeded['products']} products")

        show_result("alice signs in", service.login("alice@swiftpay.test", "alice-pass"))
        show_result("send 25.00 to bob", service.send_money("bob@swiftpay.test", "25.00", "Lunch"))
        show_result("fund 100.00 by card", service.fund_wallet("100", "credit-card"))
        show_result("buy 10.00 airtime", service.buy_airtime("verizon", "555-0100", "10"))

        products = service.browse_marketplace(search="apples")
        if products.ok and products.data:
            show_result("buy Organic Apples", service.purchase_product(products.data[0]["id"]))

        balance = service.get_balance()
        if balance.ok:
            print(f"\n💰 Alice's balance: {balance.data['balance']}")
        service.logout()

        show_result("admin signs in", service.login("admin@swiftpay.test", "admin-pass"))
        overview = service.admin_overview()
        reconcile = service.reconcile_ledger()

        print_header("Admin Overview")
        stats = overview.data["stats"]
        print(f"👥 Users: {stats['total_users']}")
        print(f"🧾 Transactions: {stats['total_transactions']}")
        print(f"💵 Volume: {stats['total_volume']}")
        print(f"⏳ Vendors pending verification: {stats['pending_vendors']}")
        print(f"\n📊 By type:")
        for txn_type, summary in overview.data["summary"].items():
            print(f"  • {txn_type}: {summary['count']} records, {summary['volume']:.2f}")

        mismatches = reconcile.data["balance_mismatches"]
        print(f"\n🔍 Balance mismatches: {len(mismatches)}")
        print(f"🔍 Unpaired marketplace records: {len(reconcile.data['unpaired_marketplace_records'])}")

        print_header("Walkthrough Complete")
        return overview.data

    except Exception as e:
        print(f"\n❌ Walkthrough failed: {e}")
        logger.error(f"Demo walkthrough failed: {e}")
        sys.exit(1)


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Run the SwiftPay wallet ledger in demo mode",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Validate demo data files without touching the store'
    )

    parser.add_argument(
        '--fast',
        action='store_true',
        help='Skip the simulated processing delays'
    )

    parser.add_argument(
        '--data-dir',
        type=str,
        default=os.getenv("DEMO_DATA_DIR", str(project_root / "demo_data")),
        help='Directory containing accounts.csv and products.csv'
    )

    args = parser.parse_args()
    os.environ["DEMO_DATA_DIR"] = args.data_dir

    if not validate_demo_data(args.data_dir):
        sys.exit(1)

    if args.dry_run:
        print("\n✅ Dry run complete")
        return

    run_walkthrough(fast=args.fast)


if __name__ == "__main__":
    main()
