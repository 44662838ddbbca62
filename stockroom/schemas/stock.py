from datetime import date as calendar_date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from stockroom.schemas.common import PaginationMeta
from stockroom.schemas.product import StockStatus

MovementType = Literal["in", "out"]


class StockAdjustIn(BaseModel):
    quantity: int = Field(ge=1, description="Units to add or remove. Direction comes from the endpoint.")
    notes: Optional[str] = Field(default=None, max_length=500)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "quantity": 20,
                "notes": "Supplier delivery #4411",
            }
        }
    )


class StockInOut(BaseModel):
    id: int
    name: str
    sku: str
    previous_quantity: int
    added_quantity: int
    new_quantity: int
    status: StockStatus


class StockOutOut(BaseModel):
    id: int
    name: str
    sku: str
    previous_quantity: int
    removed_quantity: int
    new_quantity: int
    status: StockStatus


class MovementProductOut(BaseModel):
    id: int
    name: Optional[str] = None
    sku: str


class MovementUserOut(BaseModel):
    id: int
    name: Optional[str] = None


class StockMovementOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    product: Optional[MovementProductOut] = None
    product_sku: str
    user_id: Optional[int] = None
    user: Optional[MovementUserOut] = None
    type: MovementType
    quantity: int
    previous_quantity: int
    new_quantity: int
    notes: Optional[str] = None
    created_at: datetime


class StockMovementListOut(BaseModel):
    items: list[StockMovementOut]
    pagination: PaginationMeta


class StatisticsPeriodOut(BaseModel):
    from_: calendar_date = Field(alias="from")
    to: calendar_date

    model_config = ConfigDict(populate_by_name=True)


class StatisticsTotalsOut(BaseModel):
    stock_in: int
    stock_out: int
    net_change: int


class StatisticsCountsOut(BaseModel):
    stock_in_transactions: int
    stock_out_transactions: int


class DailyMovementOut(BaseModel):
    date: calendar_date
    stock_in: int
    stock_out: int


class StockStatisticsOut(BaseModel):
    period: StatisticsPeriodOut
    totals: StatisticsTotalsOut
    counts: StatisticsCountsOut
    daily_breakdown: list[DailyMovementOut]
