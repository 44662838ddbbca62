from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from stockroom.schemas.common import PaginationMeta

CategoryStatus = Literal["active", "inactive"]


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[CategoryStatus] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("name is required")
        return cleaned

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Electronics",
                "description": "Electronic devices and gadgets.",
                "status": "active",
            }
        }
    )


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[CategoryStatus] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("name cannot be empty")
        return cleaned

    @model_validator(mode="after")
    def validate_name_not_null(self) -> "CategoryUpdate":
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("name cannot be null")
        return self


class CategoryOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    status: str
    products_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategoryListOut(BaseModel):
    items: list[CategoryOut]
    pagination: PaginationMeta


class CategoryOptionOut(BaseModel):
    id: int
    name: str


class CategoryOptionListOut(BaseModel):
    items: list[CategoryOptionOut]
