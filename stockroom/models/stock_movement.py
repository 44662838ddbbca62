from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, event, func
from sqlalchemy.orm import Mapped, mapped_column

from stockroom.core.errors import LedgerImmutableError
from stockroom.db.base import Base

MOVEMENT_IN = "in"
MOVEMENT_OUT = "out"
MOVEMENT_TYPES = (MOVEMENT_IN, MOVEMENT_OUT)


class StockMovement(Base):
    """
    One immutable row per quantity change. Direction lives in `type`; `quantity` is always positive.
    """
    __tablename__ = "stock_movements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Nulled when the product is deleted; product_sku keeps the trail readable.
    product_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="SET NULL"), index=True, nullable=True
    )
    product_sku: Mapped[str] = mapped_column(String(100), nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True
    )

    type: Mapped[str] = mapped_column(String(3), nullable=False)  # "in" | "out"
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    new_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movements_quantity_positive"),
        CheckConstraint("type IN ('in', 'out')", name="ck_stock_movements_type"),
        CheckConstraint(
            "(type = 'in' AND new_quantity = previous_quantity + quantity) "
            "OR (type = 'out' AND new_quantity = previous_quantity - quantity)",
            name="ck_stock_movements_balance",
        ),
        Index("ix_stock_movements_created_at", "created_at"),
        Index("ix_stock_movements_product_created_at", "product_id", "created_at"),
        Index("ix_stock_movements_type_created_at", "type", "created_at"),
    )


@event.listens_for(StockMovement, "before_update")
@event.listens_for(StockMovement, "before_delete")
def _reject_ledger_mutation(_mapper, _connection, _target: StockMovement) -> None:
    raise LedgerImmutableError()
