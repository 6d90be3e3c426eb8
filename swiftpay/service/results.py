"""Structured outcome returned to the UI layer"""

from pydantic import BaseModel, Field
from typing import Any, Optional
from swiftpay.utils.errors import WalletError


class OperationResult(BaseModel):
    """Result-or-error of one wallet operation"""

    ok: bool = Field(..., description="Whether the operation succeeded")
    operation: str = Field(..., description="Operation name")
    data: Any = Field(None, description="JSON-ready payload on success")
    error: Optional[str] = Field(None, description="Error code on failure, e.g. InsufficientFunds")
    message: Optional[str] = Field(None, description="Specific reason on failure")

    class Config:
        json_schema_extra = {
            "example": {
                "ok": False,
                "operation": "send_money",
                "data": None,
                "error": "InsufficientFunds",
                "message": "Insufficient balance: 50.00 available, 100.00 requested"
            }
        }

    @classmethod
    def success(cls, operation: str, data: Any = None) -> "OperationResult":
        return cls(ok=True, operation=operation, data=data)

    @classmethod
    def failure(cls, operation: str, error: WalletError) -> "OperationResult":
        return cls(ok=False, operation=operation, error=error.code, message=str(error))
