from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LowStockProductOut(BaseModel):
    id: int
    name: str
    sku: str
    category: Optional[str] = None
    quantity: int


class CategoryBreakdownOut(BaseModel):
    name: str
    value: int


class DashboardStatsOut(_CamelModel):
    total_products: int
    total_value: int
    low_stock_count: int
    out_of_stock_count: int
    categories_count: int
    low_stock_products: list[LowStockProductOut]
    category_breakdown: list[CategoryBreakdownOut]
