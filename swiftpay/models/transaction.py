"""Transaction data model"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from swiftpay.constants import TransactionType, TransactionStatus, CREDIT_TYPES


class Transaction(BaseModel):
    """Append-only ledger record belonging to one account"""

    id: str = Field(..., description="Unique ID, monotonically increasing by creation")
    user_id: str = Field(..., alias="userId", description="Account this record belongs to")
    type: TransactionType = Field(..., description="Record type; determines direction")
    amount: Decimal = Field(..., gt=0, description="Amount moved")
    recipient: Optional[str] = Field(None, description="Counterparty display name")
    description: Optional[str] = Field(None, description="Free-text description")
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Creation timestamp")
    status: TransactionStatus = Field(TransactionStatus.COMPLETED, description="Always completed")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "1718000000002",
                "userId": "1718000000003",
                "type": "purchase",
                "amount": "75.00",
                "recipient": "Analytical Engines",
                "description": "Purchase: Difference Engine",
                "date": "2025-02-03T10:00:00Z",
                "status": "completed"
            }
        }

    @property
    def is_credit(self) -> bool:
        return self.type in CREDIT_TYPES

    @property
    def signed_amount(self) -> Decimal:
        """Effect on the owner's balance"""
        return self.amount if self.is_credit else -self.amount
