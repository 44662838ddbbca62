from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from stockroom.schemas.common import PaginationMeta

StockStatus = Literal["in_stock", "low_stock", "out_of_stock"]


def _clean_required(value: str, field_name: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field_name} is required")
    return cleaned


class ProductCreate(BaseModel):
    name: str = Field(max_length=255)
    sku: str = Field(max_length=100)
    category_id: int = Field(gt=0)
    description: Optional[str] = Field(default=None, max_length=2000)
    image_url: Optional[HttpUrl] = None
    price: int = Field(ge=0, description="Price in minor currency units (cents)")
    quantity: int = Field(default=0, ge=0)
    # Accepted but ignored: status is always derived from quantity.
    status: Optional[StockStatus] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _clean_required(value, "name")

    @field_validator("sku")
    @classmethod
    def validate_sku(cls, value: str) -> str:
        return _clean_required(value, "sku")

    @field_validator("image_url", mode="after")
    @classmethod
    def image_url_as_str(cls, value):
        return str(value) if value is not None else None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Wireless Bluetooth Headphones",
                "sku": "ELC-001-BLK",
                "category_id": 1,
                "description": "Noise-canceling wireless headphones.",
                "image_url": "https://images.example.com/headphones.jpg",
                "price": 14999,
                "quantity": 45,
            }
        }
    )


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    sku: Optional[str] = Field(default=None, max_length=100)
    category_id: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = Field(default=None, max_length=2000)
    image_url: Optional[HttpUrl] = None
    price: Optional[int] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=0)
    status: Optional[StockStatus] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _clean_required(value, "name")

    @field_validator("sku")
    @classmethod
    def validate_sku(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _clean_required(value, "sku")

    @field_validator("image_url", mode="after")
    @classmethod
    def image_url_as_str(cls, value):
        return str(value) if value is not None else None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Wireless Headphones v2",
                "price": 15999,
                "quantity": 30,
            }
        }
    )


class ProductOut(BaseModel):
    id: int
    name: str
    sku: str
    category_id: int
    category: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    price: int
    quantity: int
    status: StockStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductListOut(BaseModel):
    items: list[ProductOut]
    pagination: PaginationMeta
