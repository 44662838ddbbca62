from datetime import date, datetime, timedelta, timezone

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from stockroom.core.config import settings
from stockroom.core.errors import InvalidDateRange
from stockroom.models.category import Category
from stockroom.models.product import Product
from stockroom.models.stock_movement import MOVEMENT_IN, MOVEMENT_OUT, StockMovement
from stockroom.services.stock_status import LOW_STOCK_THRESHOLD


def _low_stock_clause():
    return (Product.quantity > 0) & (Product.quantity < LOW_STOCK_THRESHOLD)


def _as_date(value) -> date:
    # DATE() comes back as a string on SQLite and as a date on Postgres.
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def get_dashboard_stats(db: Session) -> dict:
    total_products = int(db.execute(select(func.count(Product.id))).scalar_one())
    low_stock_count = int(
        db.execute(select(func.count(Product.id)).where(_low_stock_clause())).scalar_one()
    )
    out_of_stock_count = int(
        db.execute(select(func.count(Product.id)).where(Product.quantity <= 0)).scalar_one()
    )
    categories_count = int(db.execute(select(func.count(Category.id))).scalar_one())

    # Integer columns multiplied and summed in SQL: exact, no float accumulation.
    total_value = int(
        db.execute(
            select(func.coalesce(func.sum(Product.price * Product.quantity), 0))
        ).scalar_one()
    )

    low_stock_rows = db.execute(
        select(Product.id, Product.name, Product.sku, Product.quantity, Category.name.label("category"))
        .outerjoin(Category, Category.id == Product.category_id)
        .where(_low_stock_clause())
        .order_by(Product.quantity.asc(), Product.id.asc())
        .limit(settings.low_stock_alert_limit)
    ).all()

    products_count = func.count(Product.id).label("products_count")
    breakdown_rows = db.execute(
        select(Category.name, products_count)
        .outerjoin(Product, Product.category_id == Category.id)
        .group_by(Category.id, Category.name)
        .order_by(products_count.desc(), Category.name.asc())
        .limit(settings.category_breakdown_limit)
    ).all()

    return {
        "total_products": total_products,
        "total_value": total_value,
        "low_stock_count": low_stock_count,
        "out_of_stock_count": out_of_stock_count,
        "categories_count": categories_count,
        "low_stock_products": [
            {
                "id": row.id,
                "name": row.name,
                "sku": row.sku,
                "category": row.category,
                "quantity": row.quantity,
            }
            for row in low_stock_rows
        ],
        "category_breakdown": [
            {"name": name, "value": int(count)} for name, count in breakdown_rows
        ],
    }


def default_statistics_window(end: date | None = None) -> tuple[date, date]:
    """Window of `statistics_default_window_days` ending on `end` (today, UTC, by default)."""
    end = end or datetime.now(timezone.utc).date()
    return end - timedelta(days=settings.statistics_default_window_days), end


def get_movement_statistics(
    db: Session,
    from_date: date | None = None,
    to_date: date | None = None,
) -> dict:
    default_from, default_to = default_statistics_window(to_date)
    from_date = from_date or default_from
    to_date = to_date or default_to
    if to_date < from_date:
        raise InvalidDateRange()

    movement_day = func.date(StockMovement.created_at)
    in_window = (movement_day >= from_date, movement_day <= to_date)

    totals_rows = db.execute(
        select(
            StockMovement.type,
            func.coalesce(func.sum(StockMovement.quantity), 0),
            func.count(StockMovement.id),
        )
        .where(*in_window)
        .group_by(StockMovement.type)
    ).all()
    totals = {movement_type: (int(total), int(count)) for movement_type, total, count in totals_rows}
    stock_in_total, stock_in_count = totals.get(MOVEMENT_IN, (0, 0))
    stock_out_total, stock_out_count = totals.get(MOVEMENT_OUT, (0, 0))

    daily_rows = db.execute(
        select(
            movement_day.label("day"),
            func.sum(case((StockMovement.type == MOVEMENT_IN, StockMovement.quantity), else_=0)),
            func.sum(case((StockMovement.type == MOVEMENT_OUT, StockMovement.quantity), else_=0)),
        )
        .where(*in_window)
        .group_by(movement_day)
        .order_by(movement_day)
    ).all()

    return {
        "period": {"from": from_date, "to": to_date},
        "totals": {
            "stock_in": stock_in_total,
            "stock_out": stock_out_total,
            "net_change": stock_in_total - stock_out_total,
        },
        "counts": {
            "stock_in_transactions": stock_in_count,
            "stock_out_transactions": stock_out_count,
        },
        "daily_breakdown": [
            {"date": _as_date(day), "stock_in": int(stock_in or 0), "stock_out": int(stock_out or 0)}
            for day, stock_in, stock_out in daily_rows
        ],
    }
