"""Utility modules"""

from .config_loader import load_config, save_config, get_section
from .errors import (
    WalletError,
    InvalidAmountError,
    InsufficientFundsError,
    NotFoundError,
    DuplicateError,
    ValidationFailedError,
    AuthenticationError,
    AuthorizationError,
    StoreError,
    ConfigurationError
)

__all__ = [
    "load_config",
    "save_config",
    "get_section",
    "WalletError",
    "InvalidAmountError",
    "InsufficientFundsError",
    "NotFoundError",
    "DuplicateError",
    "ValidationFailedError",
    "AuthenticationError",
    "AuthorizationError",
    "StoreError",
    "ConfigurationError"
]
