from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockroom.core.api_docs import error_responses
from stockroom.core.config import settings
from stockroom.core.deps import get_db
from stockroom.core.errors import InvalidDateRange
from stockroom.core.security_current import get_current_user
from stockroom.models.user import User
from stockroom.schemas.common import PaginationMeta
from stockroom.schemas.stock import (
    MovementType,
    StockAdjustIn,
    StockInOut,
    StockMovementListOut,
    StockOutOut,
    StockStatisticsOut,
)
from stockroom.services import inventory_service, ledger_service, product_service, report_service

product_stock_router = APIRouter(prefix="/products", tags=["stock"])
router = APIRouter(prefix="/stock", tags=["stock"])

_MOVEMENTS_EXAMPLE = {
    "items": [
        {
            "id": 12,
            "product_id": 1,
            "product": {"id": 1, "name": "Wireless Bluetooth Headphones", "sku": "ELC-001-BLK"},
            "product_sku": "ELC-001-BLK",
            "user_id": 3,
            "user": {"id": 3, "name": "Admin User"},
            "type": "out",
            "quantity": 40,
            "previous_quantity": 45,
            "new_quantity": 5,
            "notes": "Order #1042",
            "created_at": "2026-02-16T10:00:00Z",
        }
    ],
    "pagination": {"total": 1, "limit": 20, "offset": 0, "count": 1, "has_next": False},
}


@product_stock_router.post(
    "/{product_id}/stock-in",
    response_model=StockInOut,
    summary="Add stock to a product",
    responses=error_responses(401, 404, 409, 422, 500, 503),
)
def stock_in(
    product_id: int,
    payload: StockAdjustIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = inventory_service.stock_in(
        db,
        product_id,
        payload.quantity,
        notes=payload.notes,
        acting_user_id=user.id,
    )
    return StockInOut(
        id=result.id,
        name=result.name,
        sku=result.sku,
        previous_quantity=result.previous_quantity,
        added_quantity=result.quantity,
        new_quantity=result.new_quantity,
        status=result.status,
    )


@product_stock_router.post(
    "/{product_id}/stock-out",
    response_model=StockOutOut,
    summary="Remove stock from a product",
    description="Rejected with `insufficient_stock` when the quantity exceeds what is on hand.",
    responses=error_responses(401, 404, 409, 422, 500, 503),
)
def stock_out(
    product_id: int,
    payload: StockAdjustIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = inventory_service.stock_out(
        db,
        product_id,
        payload.quantity,
        notes=payload.notes,
        acting_user_id=user.id,
    )
    return StockOutOut(
        id=result.id,
        name=result.name,
        sku=result.sku,
        previous_quantity=result.previous_quantity,
        removed_quantity=result.quantity,
        new_quantity=result.new_quantity,
        status=result.status,
    )


@product_stock_router.get(
    "/{product_id}/stock-movements",
    response_model=StockMovementListOut,
    summary="List stock movements for a product",
    responses={
        200: {
            "description": "Paginated ledger for one product, newest first",
            "content": {"application/json": {"example": _MOVEMENTS_EXAMPLE}},
        },
        **error_responses(401, 404, 422, 500),
    },
)
def list_product_movements(
    product_id: int,
    movement_type: MovementType | None = Query(default=None, alias="type"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    product_service.get_product(db, product_id)
    items, total = ledger_service.list_product_movements(
        db,
        product_id,
        movement_type=movement_type,
        limit=limit,
        offset=offset,
    )
    return StockMovementListOut(
        items=items,
        pagination=PaginationMeta.build(total=total, limit=limit, offset=offset, count=len(items)),
    )


@router.get(
    "/movements",
    response_model=StockMovementListOut,
    summary="List stock movements",
    responses={
        200: {
            "description": "Paginated global ledger, newest first",
            "content": {"application/json": {"example": _MOVEMENTS_EXAMPLE}},
        },
        **error_responses(401, 422, 500),
    },
)
def list_movements(
    movement_type: MovementType | None = Query(default=None, alias="type"),
    product_id: int | None = Query(default=None, ge=1),
    from_date: date | None = Query(default=None, description="Filter from date (YYYY-MM-DD)"),
    to_date: date | None = Query(default=None, description="Filter to date (YYYY-MM-DD)"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    if from_date and to_date and to_date < from_date:
        raise InvalidDateRange()
    items, total = ledger_service.list_movements(
        db,
        movement_type=movement_type,
        product_id=product_id,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
        offset=offset,
    )
    return StockMovementListOut(
        items=items,
        pagination=PaginationMeta.build(total=total, limit=limit, offset=offset, count=len(items)),
    )


@router.get(
    "/statistics",
    response_model=StockStatisticsOut,
    summary="Stock movement statistics",
    responses={
        200: {
            "description": "Totals, counts and per-day breakdown for a date window",
            "content": {
                "application/json": {
                    "example": {
                        "period": {"from": "2026-01-17", "to": "2026-02-16"},
                        "totals": {"stock_in": 10, "stock_out": 3, "net_change": 7},
                        "counts": {"stock_in_transactions": 1, "stock_out_transactions": 1},
                        "daily_breakdown": [
                            {"date": "2026-02-10", "stock_in": 10, "stock_out": 0},
                            {"date": "2026-02-11", "stock_in": 0, "stock_out": 3},
                        ],
                    }
                }
            },
        },
        **error_responses(401, 422, 500),
    },
)
def statistics(
    from_date: date | None = Query(default=None, description="Defaults to 30 days before to_date"),
    to_date: date | None = Query(default=None, description="Defaults to today (UTC)"),
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    return report_service.get_movement_statistics(db, from_date=from_date, to_date=to_date)
