from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from stockroom.db.base import Base

CATEGORY_ACTIVE = "active"
CATEGORY_INACTIVE = "inactive"
CATEGORY_STATUSES = (CATEGORY_ACTIVE, CATEGORY_INACTIVE)


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CATEGORY_ACTIVE, server_default=CATEGORY_ACTIVE
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            f"status IN ({', '.join(repr(value) for value in CATEGORY_STATUSES)})",
            name="ck_categories_status",
        ),
    )
