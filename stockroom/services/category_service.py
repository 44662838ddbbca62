from sqlalchemy import func, select
from sqlalchemy.orm import Session

from stockroom.core.errors import CategoryInUse, CategoryNotFound, DuplicateCategoryName
from stockroom.core.observability import log_event
from stockroom.models.category import CATEGORY_ACTIVE, Category
from stockroom.models.product import Product


def _products_count_subquery():
    return (
        select(func.count(Product.id))
        .where(Product.category_id == Category.id)
        .correlate(Category)
        .scalar_subquery()
    )


def _category_out(category: Category, products_count: int | None = None) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "status": category.status,
        "products_count": products_count,
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }


def _get_category_or_404(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if not category:
        raise CategoryNotFound(category_id)
    return category


def _name_taken(db: Session, name: str, *, exclude_id: int | None = None) -> bool:
    stmt = select(Category.id).where(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)
    return db.execute(stmt.limit(1)).scalar_one_or_none() is not None


def count_products(db: Session, category_id: int) -> int:
    return int(
        db.execute(
            select(func.count(Product.id)).where(Product.category_id == category_id)
        ).scalar_one()
    )


def list_categories(
    db: Session,
    *,
    status: str | None = None,
    search: str | None = None,
    limit: int,
    offset: int = 0,
) -> tuple[list[dict], int]:
    filters = []
    if status and status != "all":
        filters.append(Category.status == status)
    if search:
        filters.append(Category.name.ilike(f"%{search}%"))

    total = int(db.execute(select(func.count(Category.id)).where(*filters)).scalar_one())
    rows = db.execute(
        select(Category, _products_count_subquery().label("products_count"))
        .where(*filters)
        .order_by(Category.name.asc())
        .offset(offset)
        .limit(limit)
    ).all()
    return [_category_out(category, int(count)) for category, count in rows], total


def list_active_categories(db: Session) -> list[dict]:
    rows = db.execute(
        select(Category.id, Category.name)
        .where(Category.status == CATEGORY_ACTIVE)
        .order_by(Category.name.asc())
    ).all()
    return [{"id": row.id, "name": row.name} for row in rows]


def get_category(db: Session, category_id: int) -> dict:
    category = _get_category_or_404(db, category_id)
    return _category_out(category, count_products(db, category.id))


def create_category(
    db: Session,
    *,
    name: str,
    description: str | None = None,
    status: str | None = None,
) -> dict:
    if _name_taken(db, name):
        raise DuplicateCategoryName(name)

    category = Category(
        name=name,
        description=description,
        status=status or CATEGORY_ACTIVE,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return _category_out(category, 0)


def update_category(db: Session, category_id: int, changes: dict) -> dict:
    category = _get_category_or_404(db, category_id)

    if "name" in changes:
        if _name_taken(db, changes["name"], exclude_id=category.id):
            raise DuplicateCategoryName(changes["name"])
        category.name = changes["name"]
    if "description" in changes:
        category.description = changes["description"]
    if changes.get("status") is not None:
        category.status = changes["status"]

    db.commit()
    db.refresh(category)
    return _category_out(category, count_products(db, category.id))


def delete_category(db: Session, category_id: int) -> None:
    category = _get_category_or_404(db, category_id)

    product_count = count_products(db, category.id)
    if product_count > 0:
        log_event("category.delete_blocked", category_id=category.id, product_count=product_count)
        raise CategoryInUse(product_count)

    db.delete(category)
    db.commit()
    log_event("category.deleted", category_id=category_id)
