"""Vendor product catalog"""

from .manager import CatalogManager, MUTABLE_FIELDS

__all__ = ["CatalogManager", "MUTABLE_FIELDS"]
