"""Account data model"""

from pydantic import BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional
from swiftpay.constants import Role


class VendorInfo(BaseModel):
    """Business details carried by vendor accounts"""

    business_name: str = Field(..., alias="businessName", description="Public business name")
    category: str = Field(..., description="Business category")
    description: str = Field("", description="Business description")
    is_verified: bool = Field(False, alias="isVerified", description="Admin verification flag")

    class Config:
        populate_by_name = True

    @field_validator("business_name", "category")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


class Account(BaseModel):
    """Wallet account entity"""

    id: str = Field(..., description="Unique, stable account ID")
    email: str = Field(..., description="Unique sign-in email (lower-cased)")
    name: str = Field(..., description="Display name")
    role: Role = Field(..., description="client, vendor or admin")
    balance: Decimal = Field(..., ge=0, description="Wallet balance, never negative")
    suspended: bool = Field(False, description="Suspended by an admin")
    vendor_info: Optional[VendorInfo] = Field(None, alias="vendorInfo", description="Present iff role is vendor")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "1718000000000",
                "email": "ada@example.com",
                "name": "Ada Lovelace",
                "role": "vendor",
                "balance": "1000.00",
                "suspended": False,
                "vendorInfo": {
                    "businessName": "Analytical Engines",
                    "category": "retail",
                    "description": "Mechanical computing",
                    "isVerified": False
                }
            }
        }

    @model_validator(mode="after")
    def vendor_info_matches_role(self) -> "Account":
        if self.role == Role.VENDOR and self.vendor_info is None:
            raise ValueError("vendor accounts require vendorInfo")
        if self.role != Role.VENDOR and self.vendor_info is not None:
            raise ValueError("only vendor accounts carry vendorInfo")
        return self

    @property
    def display_name(self) -> str:
        """Name shown to counterparties: business name for vendors"""
        if self.vendor_info is not None:
            return self.vendor_info.business_name
        return self.name
