"""Custom exceptions for the wallet ledger"""


class WalletError(Exception):
    """Base exception for wallet errors"""
    code = "WalletError"


class InvalidAmountError(WalletError):
    """Amount is non-numeric, non-finite, or not greater than zero"""
    code = "InvalidAmount"


class InsufficientFundsError(WalletError):
    """Amount exceeds the payer's balance"""
    code = "InsufficientFunds"

    def __init__(self, message: str, balance=None, requested=None):
        super().__init__(message)
        self.balance = balance
        self.requested = requested


class NotFoundError(WalletError):
    """Referenced account or product is missing"""
    code = "NotFound"


class DuplicateError(WalletError):
    """Registration email already exists"""
    code = "Duplicate"


class ValidationFailedError(WalletError):
    """Missing required fields or policy violations"""
    code = "ValidationFailed"


class AuthenticationError(WalletError):
    """Unknown credentials, suspended account, or no signed-in session"""
    code = "AuthenticationFailed"


class AuthorizationError(WalletError):
    """Principal lacks the capability for an operation"""
    code = "Unauthorized"


class StoreError(WalletError):
    """Record store read/write errors"""
    code = "StoreError"


class ConfigurationError(WalletError):
    """Configuration loading errors"""
    code = "ConfigurationError"
