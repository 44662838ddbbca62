from datetime import date

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from stockroom.models.product import Product
from stockroom.models.stock_movement import StockMovement
from stockroom.models.user import User


def append_movement(
    db: Session,
    *,
    product_id: int,
    product_sku: str,
    movement_type: str,
    quantity: int,
    previous_quantity: int,
    new_quantity: int,
    notes: str | None = None,
    user_id: int | None = None,
) -> StockMovement:
    entry = StockMovement(
        product_id=product_id,
        product_sku=product_sku,
        user_id=user_id,
        type=movement_type,
        quantity=quantity,
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
        notes=notes,
    )
    db.add(entry)
    return entry


def _movement_rows_stmt() -> Select:
    return (
        select(
            StockMovement,
            Product.name.label("product_name"),
            User.name.label("user_name"),
        )
        .outerjoin(Product, Product.id == StockMovement.product_id)
        .outerjoin(User, User.id == StockMovement.user_id)
    )


def _apply_filters(
    stmt: Select,
    *,
    movement_type: str | None,
    product_id: int | None,
    from_date: date | None,
    to_date: date | None,
) -> Select:
    if movement_type:
        stmt = stmt.where(StockMovement.type == movement_type)
    if product_id is not None:
        stmt = stmt.where(StockMovement.product_id == product_id)
    if from_date:
        stmt = stmt.where(func.date(StockMovement.created_at) >= from_date)
    if to_date:
        stmt = stmt.where(func.date(StockMovement.created_at) <= to_date)
    return stmt


def list_movements(
    db: Session,
    *,
    movement_type: str | None = None,
    product_id: int | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    limit: int,
    offset: int = 0,
) -> tuple[list[dict], int]:
    """Return one page of ledger rows, newest first, plus the unpaged total."""
    filters = {
        "movement_type": movement_type,
        "product_id": product_id,
        "from_date": from_date,
        "to_date": to_date,
    }
    count_stmt = _apply_filters(select(func.count(StockMovement.id)), **filters)
    total = int(db.execute(count_stmt).scalar_one())

    stmt = (
        _apply_filters(_movement_rows_stmt(), **filters)
        .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        .offset(offset)
        .limit(limit)
    )
    rows = db.execute(stmt).all()
    items = [
        {
            "id": movement.id,
            "product_id": movement.product_id,
            "product": (
                {"id": movement.product_id, "name": product_name, "sku": movement.product_sku}
                if movement.product_id is not None
                else None
            ),
            "product_sku": movement.product_sku,
            "user_id": movement.user_id,
            "user": (
                {"id": movement.user_id, "name": user_name}
                if movement.user_id is not None
                else None
            ),
            "type": movement.type,
            "quantity": movement.quantity,
            "previous_quantity": movement.previous_quantity,
            "new_quantity": movement.new_quantity,
            "notes": movement.notes,
            "created_at": movement.created_at,
        }
        for movement, product_name, user_name in rows
    ]
    return items, total


def list_product_movements(
    db: Session,
    product_id: int,
    *,
    movement_type: str | None = None,
    limit: int,
    offset: int = 0,
) -> tuple[list[dict], int]:
    return list_movements(
        db,
        movement_type=movement_type,
        product_id=product_id,
        limit=limit,
        offset=offset,
    )


def get_last_movement(db: Session, product_id: int) -> StockMovement | None:
    return db.execute(
        select(StockMovement)
        .where(StockMovement.product_id == product_id)
        .order_by(StockMovement.id.desc())
        .limit(1)
    ).scalar_one_or_none()
