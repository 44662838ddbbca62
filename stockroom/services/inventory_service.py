"""Stock adjustments: the only sanctioned way to change a product's quantity.

Every change reads the current quantity under a row lock, writes the new
quantity with a compare-and-swap predicate and appends exactly one ledger
row, all inside the caller's transaction.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from stockroom.core.errors import (
    ConcurrentStockUpdate,
    InsufficientStock,
    InvalidQuantity,
    ProductNotFound,
    StockroomError,
    StorageUnavailable,
)
from stockroom.core.observability import log_event
from stockroom.models.product import Product
from stockroom.models.stock_movement import MOVEMENT_IN, MOVEMENT_OUT, MOVEMENT_TYPES, StockMovement
from stockroom.services.ledger_service import append_movement
from stockroom.services.stock_status import derive_status

INITIAL_STOCK_NOTE = "Initial stock"
PRODUCT_UPDATE_NOTE = "Product update"


@dataclass(frozen=True)
class AdjustmentResult:
    id: int
    name: str
    sku: str
    direction: str
    quantity: int
    previous_quantity: int
    new_quantity: int
    status: str
    movement_id: int


def compare_and_set_quantity(db: Session, product_id: int, *, expected: int, new: int) -> bool:
    """Write `new` only if the stored quantity still equals `expected`."""
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.quantity == expected)
        .values(quantity=new, status=derive_status(new))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _locked_quantity(db: Session, product_id: int) -> int | None:
    return db.execute(
        select(Product.quantity).where(Product.id == product_id).with_for_update()
    ).scalar_one_or_none()


def _write_adjustment(
    db: Session,
    *,
    product_id: int,
    sku: str,
    current: int,
    direction: str,
    amount: int,
    notes: str | None,
    user_id: int | None,
) -> StockMovement:
    if direction == MOVEMENT_IN:
        new_quantity = current + amount
    else:
        if amount > current:
            raise InsufficientStock(available=current, requested=amount)
        new_quantity = current - amount

    if not compare_and_set_quantity(db, product_id, expected=current, new=new_quantity):
        raise ConcurrentStockUpdate(product_id)

    movement = append_movement(
        db,
        product_id=product_id,
        product_sku=sku,
        movement_type=direction,
        quantity=amount,
        previous_quantity=current,
        new_quantity=new_quantity,
        notes=notes,
        user_id=user_id,
    )
    db.flush()
    return movement


def adjust_stock(
    db: Session,
    product_id: int,
    direction: str,
    amount: int,
    *,
    notes: str | None = None,
    acting_user_id: int | None = None,
) -> AdjustmentResult:
    if direction not in MOVEMENT_TYPES:
        raise ValueError(f"Unknown stock movement direction: {direction!r}")
    if amount < 1:
        raise InvalidQuantity(amount)

    try:
        row = db.execute(
            select(Product.id, Product.name, Product.sku, Product.quantity)
            .where(Product.id == product_id)
            .with_for_update()
        ).one_or_none()
        if row is None:
            raise ProductNotFound(product_id)

        movement = _write_adjustment(
            db,
            product_id=row.id,
            sku=row.sku,
            current=row.quantity,
            direction=direction,
            amount=amount,
            notes=notes,
            user_id=acting_user_id,
        )
        db.commit()
    except StockroomError as exc:
        db.rollback()
        if isinstance(exc, (InsufficientStock, ConcurrentStockUpdate)):
            log_event(
                "stock.rejected",
                level=logging.WARNING,
                product_id=product_id,
                type=direction,
                quantity=amount,
                reason=exc.code,
            )
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageUnavailable("Stock adjustment could not be stored") from exc

    result = AdjustmentResult(
        id=row.id,
        name=row.name,
        sku=row.sku,
        direction=direction,
        quantity=amount,
        previous_quantity=movement.previous_quantity,
        new_quantity=movement.new_quantity,
        status=derive_status(movement.new_quantity),
        movement_id=movement.id,
    )
    log_event(
        "stock.adjusted",
        product_id=result.id,
        type=direction,
        quantity=amount,
        previous_quantity=result.previous_quantity,
        new_quantity=result.new_quantity,
        status=result.status,
        user_id=acting_user_id,
    )
    return result


def stock_in(db: Session, product_id: int, amount: int, **kwargs) -> AdjustmentResult:
    return adjust_stock(db, product_id, MOVEMENT_IN, amount, **kwargs)


def stock_out(db: Session, product_id: int, amount: int, **kwargs) -> AdjustmentResult:
    return adjust_stock(db, product_id, MOVEMENT_OUT, amount, **kwargs)


def record_initial_stock(
    db: Session,
    product: Product,
    *,
    acting_user_id: int | None = None,
) -> StockMovement | None:
    """Ledger entry for a freshly inserted product. Does not commit."""
    if product.quantity <= 0:
        return None
    return append_movement(
        db,
        product_id=product.id,
        product_sku=product.sku,
        movement_type=MOVEMENT_IN,
        quantity=product.quantity,
        previous_quantity=0,
        new_quantity=product.quantity,
        notes=INITIAL_STOCK_NOTE,
        user_id=acting_user_id,
    )


def record_quantity_change(
    db: Session,
    product: Product,
    new_quantity: int,
    *,
    notes: str | None = PRODUCT_UPDATE_NOTE,
    sku: str | None = None,
    acting_user_id: int | None = None,
) -> StockMovement | None:
    """Move an existing product to an absolute quantity. Does not commit.

    `sku` is the SKU the product will carry once the surrounding transaction
    commits; it defaults to the stored one. Returns None when the stored
    quantity already equals `new_quantity`.
    """
    if new_quantity < 0:
        raise InvalidQuantity(new_quantity)

    current = _locked_quantity(db, product.id)
    if current is None:
        raise ProductNotFound(product.id)
    if current == new_quantity:
        return None

    direction = MOVEMENT_IN if new_quantity > current else MOVEMENT_OUT
    movement = _write_adjustment(
        db,
        product_id=product.id,
        sku=sku or product.sku,
        current=current,
        direction=direction,
        amount=abs(new_quantity - current),
        notes=notes,
        user_id=acting_user_id,
    )
    # Keep the loaded instance in step with the row without marking it dirty.
    set_committed_value(product, "quantity", new_quantity)
    set_committed_value(product, "status", derive_status(new_quantity))
    return movement
