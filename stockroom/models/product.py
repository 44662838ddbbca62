from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, event, func
from sqlalchemy.orm import Mapped, mapped_column

from stockroom.db.base import Base
from stockroom.services.stock_status import OUT_OF_STOCK, STOCK_STATUSES, derive_status


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(Integer, ForeignKey("categories.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")  # minor units
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    # Always derive_status(quantity); see the mapper hooks below.
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OUT_OF_STOCK, server_default=OUT_OF_STOCK
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint(
            f"status IN ({', '.join(repr(value) for value in STOCK_STATUSES)})",
            name="ck_products_status",
        ),
        Index("ix_products_name", "name"),
        Index("ix_products_status", "status"),
        Index("ix_products_quantity", "quantity"),
    )


@event.listens_for(Product, "before_insert")
@event.listens_for(Product, "before_update")
def _sync_status_with_quantity(_mapper, _connection, target: Product) -> None:
    target.status = derive_status(target.quantity or 0)
