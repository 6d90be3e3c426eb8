"""Demo data seeder - loads demo accounts and products from CSV files"""

import os
import pandas as pd
from pathlib import Path
from typing import Dict, Optional

from swiftpay.constants import Role
from swiftpay.service import WalletService
from swiftpay.utils.errors import DuplicateError
from swiftpay.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DEMO_DATA_DIR = Path(__file__).resolve().parents[2] / "demo_data"


class DemoSeeder:
    """
    Registers demo accounts and lists demo products through the regular
    session and catalog code paths, so seeded data obeys every invariant.

    Seeding is idempotent: existing emails and already-listed product names
    are skipped.
    """

    def __init__(self, service: WalletService, data_dir: Optional[str] = None):
        """
        Initialize demo seeder

        Args:
            service: Wallet service whose store receives the demo data
            data_dir: Directory containing accounts.csv and products.csv
                (defaults to $DEMO_DATA_DIR, then demo_data/)
        """
        if data_dir is None:
            data_dir = os.getenv("DEMO_DATA_DIR", str(DEFAULT_DEMO_DATA_DIR))

        self.service = service
        self.data_dir = Path(data_dir)
        if not self.data_dir.exists():
            raise FileNotFoundError(f"Demo data directory not found: {data_dir}")

        logger.info(f"Demo seeder initialized with data from: {self.data_dir}")

    def _load_csv(self, filename: str) -> pd.DataFrame:
        """Load CSV file as strings, empty cells kept as empty strings"""
        filepath = self.data_dir / filename
        if not filepath.exists():
            logger.warning(f"File not found: {filepath}")
            return pd.DataFrame()

        df = pd.read_csv(filepath, dtype=str, keep_default_na=False)
        logger.info(f"Loaded {len(df)} records from {filename}")
        return df

    def seed_accounts(self) -> int:
        """Register every account in accounts.csv; returns how many were created"""
        session = self.service.session
        directory = self.service.directory
        created = 0

        for row in self._load_csv("accounts.csv").to_dict("records"):
            vendor_info = None
            if row["role"] == Role.VENDOR.value:
                vendor_info = {
                    "businessName": row.get("business_name", ""),
                    "category": row.get("category", ""),
                    "description": row.get("description", ""),
                }

            try:
                account = session.register(row["email"], row["password"], row["name"], row["role"], vendor_info)
            except DuplicateError:
                logger.info("Demo account already present", email=row["email"])
                continue

            if row.get("verified", "").lower() == "true":
                directory.set_vendor_verified(account.id, True)
            created += 1

        session.logout()
        return created

    def seed_products(self) -> int:
        """List every product in products.csv under its vendor; returns how many were created"""
        catalog = self.service.catalog
        vendors = {a.email: a for a in self.service.directory.list_accounts() if a.role == Role.VENDOR}
        created = 0

        for row in self._load_csv("products.csv").to_dict("records"):
            vendor = vendors.get(row["vendor_email"].strip().lower())
            if vendor is None:
                logger.warning("Skipping product for unknown vendor", vendor_email=row["vendor_email"])
                continue

            existing = {p.name for p in catalog.list_vendor_products(vendor.id)}
            if row["name"] in existing:
                continue

            product = catalog.create_product(
                vendor.id,
                row["name"],
                row["price"],
                description=row.get("description", ""),
                category=row.get("category", "")
            )
            if row.get("active", "true").lower() == "false":
                catalog.set_product_active(vendor.id, product.id, False)
            created += 1

        return created

    def seed(self) -> Dict[str, int]:
        """Seed accounts then products"""
        summary = {
            "accounts": self.seed_accounts(),
            "products": self.seed_products(),
        }
        logger.info("Demo data seeded", **summary)
        return summary


def seed_demo_data(service: WalletService, data_dir: Optional[str] = None) -> Dict[str, int]:
    """Convenience wrapper around DemoSeeder.seed"""
    return DemoSeeder(service, data_dir).seed()
