"""Product data model"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from decimal import Decimal


class Product(BaseModel):
    """Marketplace product owned by a vendor"""

    id: str = Field(..., description="Unique product ID")
    vendor_id: str = Field(..., alias="vendorId", description="Owning vendor account ID")
    name: str = Field(..., min_length=1, description="Product name")
    description: str = Field("", description="Product description")
    price: Decimal = Field(..., gt=0, description="Unit price")
    category: str = Field("", description="Catalog category")
    is_active: bool = Field(True, alias="isActive", description="Listed to shoppers while true")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="createdAt",
        description="Creation timestamp"
    )

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "1718000000001",
                "vendorId": "1718000000000",
                "name": "Difference Engine",
                "description": "Tabulates polynomials",
                "price": "75.00",
                "category": "retail",
                "isActive": True,
                "createdAt": "2025-02-03T10:00:00Z"
            }
        }
