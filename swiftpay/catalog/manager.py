"""Catalog manager for vendor-owned marketplace products.

Vendors create, edit, deactivate and delete their own products. Shoppers
only ever see active products through ``browse``.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from swiftpay.constants import ACCOUNTS, PRODUCTS, TRANSACTIONS, DEFAULT_PRODUCT_CATEGORIES, Role, TransactionType
from swiftpay.ledger.amounts import parse_amount
from swiftpay.ledger.ids import MonotonicIdGenerator, default_id_generator
from swiftpay.models import Account, Product, Transaction
from swiftpay.store import RecordStore, load_models, dump_models
from swiftpay.utils.config_loader import get_section
from swiftpay.utils.errors import NotFoundError, ValidationFailedError
from swiftpay.utils.logging import get_logger
from swiftpay.utils.metrics import catalog_changes

logger = get_logger(__name__)

# Fields a vendor may change after creation
MUTABLE_FIELDS = {'name', 'description', 'price', 'category'}


class CatalogManager:
    """Vendor-scoped product CRUD and the shopper-facing product view"""

    def __init__(self, store: RecordStore, config: Optional[Dict[str, Any]] = None,
                 id_generator: Optional[MonotonicIdGenerator] = None):
        catalog_config = get_section(config, "catalog")
        self.store = store
        self.ids = id_generator or default_id_generator
        self.categories = tuple(catalog_config.get("categories", DEFAULT_PRODUCT_CATEGORIES))

    def create_product(self, vendor_id: str, name: str, price: Any,
                       description: str = "", category: str = "") -> Product:
        """
        Create an active product owned by ``vendor_id``.

        Raises:
            NotFoundError: Unknown vendor account
            ValidationFailedError: Caller is not a vendor, missing name, or unknown category
            InvalidAmountError: Price is not a positive number
        """
        self._require_vendor(vendor_id)
        name = self._clean_name(name)
        price = parse_amount(price, field="price")
        category = self._clean_category(category)

        with self.store.lock:
            products = load_models(self.store, PRODUCTS, Product)
            product = Product(
                id=self.ids.next_id(after=(p.id for p in products)),
                vendor_id=vendor_id,
                name=name,
                description=(description or "").strip(),
                price=price,
                category=category,
                is_active=True
            )
            products.append(product)
            self.store.put(PRODUCTS, dump_models(products))

        catalog_changes.labels(action="created").inc()
        logger.info("Product created", product_id=product.id, vendor_id=vendor_id, price=price)
        return product

    def update_product(self, vendor_id: str, product_id: str, **changes: Any) -> Product:
        """
        Edit name, description, price or category of one of the vendor's products.

        Raises:
            NotFoundError: Product missing or owned by another vendor
            ValidationFailedError: Unknown field, empty name, or unknown category
            InvalidAmountError: Price is not a positive number
        """
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ValidationFailedError(f"Fields cannot be updated: {sorted(unknown)}")

        update = {}
        if changes.get("name") is not None:
            update["name"] = self._clean_name(changes["name"])
        if changes.get("description") is not None:
            update["description"] = changes["description"].strip()
        if changes.get("price") is not None:
            update["price"] = parse_amount(changes["price"], field="price")
        if changes.get("category") is not None:
            update["category"] = self._clean_category(changes["category"])

        product = self._mutate(vendor_id, product_id, update)
        catalog_changes.labels(action="updated").inc()
        logger.info("Product updated", product_id=product_id, fields=sorted(update))
        return product

    def set_product_active(self, vendor_id: str, product_id: str, is_active: bool) -> Product:
        """Show or hide a product from shoppers without deleting it"""
        product = self._mutate(vendor_id, product_id, {"is_active": bool(is_active)})
        catalog_changes.labels(action="activated" if is_active else "deactivated").inc()
        logger.info("Product visibility changed", product_id=product_id, is_active=bool(is_active))
        return product

    def delete_product(self, vendor_id: str, product_id: str) -> None:
        """
        Remove one of the vendor's products.

        Raises:
            NotFoundError: Product missing or owned by another vendor
        """
        with self.store.lock:
            products = load_models(self.store, PRODUCTS, Product)
            self._owned_index(products, vendor_id, product_id)
            remaining = [p for p in products if p.id != product_id]
            self.store.put(PRODUCTS, dump_models(remaining))

        catalog_changes.labels(action="deleted").inc()
        logger.info("Product deleted", product_id=product_id, vendor_id=vendor_id)

    def get_product(self, product_id: str) -> Product:
        for product in load_models(self.store, PRODUCTS, Product):
            if product.id == product_id:
                return product
        raise NotFoundError(f"Product not found: {product_id}")

    def list_vendor_products(self, vendor_id: str) -> List[Product]:
        """Every product the vendor owns, active or not"""
        return [p for p in load_models(self.store, PRODUCTS, Product) if p.vendor_id == vendor_id]

    def browse(self, search: Optional[str] = None, category: Optional[str] = None) -> List[Product]:
        """
        Active products for shoppers.

        Args:
            search: Case-insensitive substring matched against name and description
            category: Exact category; None, "" or "all" disables the filter
        """
        needle = (search or "").strip().lower()
        results = []
        for product in load_models(self.store, PRODUCTS, Product):
            if not product.is_active:
                continue
            if category and category != "all" and product.category != category:
                continue
            if needle and needle not in product.name.lower() and needle not in product.description.lower():
                continue
            results.append(product)
        return results

    def vendor_stats(self, vendor_id: str) -> Dict[str, Any]:
        """Product counts and sale proceeds for the vendor dashboard"""
        products = self.list_vendor_products(vendor_id)
        sales = [
            t for t in load_models(self.store, TRANSACTIONS, Transaction)
            if t.user_id == vendor_id and t.type == TransactionType.SALE
        ]
        return {
            "total_products": len(products),
            "active_products": sum(1 for p in products if p.is_active),
            "sales_count": len(sales),
            "total_sales": sum((t.amount for t in sales), Decimal("0")),
        }

    def _require_vendor(self, vendor_id: str) -> Account:
        for account in load_models(self.store, ACCOUNTS, Account):
            if account.id == vendor_id:
                if account.role != Role.VENDOR:
                    raise ValidationFailedError("Only vendor accounts can list products")
                return account
        raise NotFoundError(f"Vendor not found: {vendor_id}")

    def _mutate(self, vendor_id: str, product_id: str, update: Dict[str, Any]) -> Product:
        with self.store.lock:
            products = load_models(self.store, PRODUCTS, Product)
            i = self._owned_index(products, vendor_id, product_id)
            products[i] = products[i].model_copy(update=update)
            self.store.put(PRODUCTS, dump_models(products))
            return products[i]

    @staticmethod
    def _owned_index(products: List[Product], vendor_id: str, product_id: str) -> int:
        for i, product in enumerate(products):
            # Another vendor's product is reported as missing
            if product.id == product_id and product.vendor_id == vendor_id:
                return i
        raise NotFoundError(f"Product not found: {product_id}")

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationFailedError("Product name is required")
        return name

    def _clean_category(self, category: Optional[str]) -> str:
        category = (category or "").strip()
        if category and self.categories and category not in self.categories:
            raise ValidationFailedError(f"Unknown product category: {category}")
        return category
