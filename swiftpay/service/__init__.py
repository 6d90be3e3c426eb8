"""UI-facing wallet service"""

from .results import OperationResult
from .wallet_service import WalletService

__all__ = ["OperationResult", "WalletService"]
