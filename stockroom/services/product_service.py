from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockroom.core.errors import CategoryNotFound, DuplicateSku, ProductNotFound
from stockroom.core.observability import log_event
from stockroom.models.category import Category
from stockroom.models.product import Product
from stockroom.models.stock_movement import StockMovement
from stockroom.schemas.product import ProductCreate, ProductUpdate
from stockroom.services.inventory_service import record_initial_stock, record_quantity_change

SORTABLE_COLUMNS = {
    "name": Product.name,
    "sku": Product.sku,
    "price": Product.price,
    "quantity": Product.quantity,
    "status": Product.status,
    "created_at": Product.created_at,
}
DEFAULT_SORT = "created_at"


def _product_out(product: Product, category_name: str | None) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "sku": product.sku,
        "category_id": product.category_id,
        "category": category_name,
        "description": product.description,
        "image_url": product.image_url,
        "price": product.price,
        "quantity": product.quantity,
        "status": product.status,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


def _category_name(db: Session, category_id: int) -> str | None:
    return db.execute(select(Category.name).where(Category.id == category_id)).scalar_one_or_none()


def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise ProductNotFound(product_id)
    return product


def _ensure_category_exists(db: Session, category_id: int) -> None:
    if db.get(Category, category_id) is None:
        raise CategoryNotFound(category_id)


def _sku_taken(db: Session, sku: str, *, exclude_id: int | None = None) -> bool:
    stmt = select(Product.id).where(func.lower(Product.sku) == sku.lower())
    if exclude_id is not None:
        stmt = stmt.where(Product.id != exclude_id)
    return db.execute(stmt.limit(1)).scalar_one_or_none() is not None


def list_products(
    db: Session,
    *,
    search: str | None = None,
    category: str | None = None,
    status: str | None = None,
    sort_by: str = DEFAULT_SORT,
    sort_order: str = "desc",
    limit: int,
    offset: int = 0,
) -> tuple[list[dict], int]:
    filters = []
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(
                Product.name.ilike(pattern),
                Product.sku.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )
    if category and category != "all":
        filters.append(Category.name == category)
    if status and status != "all":
        filters.append(Product.status == status)

    total = int(
        db.execute(
            select(func.count(Product.id))
            .select_from(Product)
            .outerjoin(Category, Category.id == Product.category_id)
            .where(*filters)
        ).scalar_one()
    )

    sort_column = SORTABLE_COLUMNS.get(sort_by, SORTABLE_COLUMNS[DEFAULT_SORT])
    ordering = sort_column.asc() if sort_order == "asc" else sort_column.desc()
    tie_breaker = Product.id.asc() if sort_order == "asc" else Product.id.desc()

    rows = db.execute(
        select(Product, Category.name)
        .outerjoin(Category, Category.id == Product.category_id)
        .where(*filters)
        .order_by(ordering, tie_breaker)
        .offset(offset)
        .limit(limit)
    ).all()
    return [_product_out(product, category_name) for product, category_name in rows], total


def get_product(db: Session, product_id: int) -> dict:
    product = _get_product_or_404(db, product_id)
    return _product_out(product, _category_name(db, product.category_id))


def create_product(
    db: Session,
    payload: ProductCreate,
    *,
    acting_user_id: int | None = None,
) -> dict:
    if _sku_taken(db, payload.sku):
        raise DuplicateSku(payload.sku)
    _ensure_category_exists(db, payload.category_id)

    # payload.status is accepted for compatibility and ignored: status follows quantity.
    product = Product(
        category_id=payload.category_id,
        name=payload.name,
        sku=payload.sku,
        description=payload.description,
        image_url=payload.image_url,
        price=payload.price,
        quantity=payload.quantity,
    )
    db.add(product)
    try:
        db.flush()
        record_initial_stock(db, product, acting_user_id=acting_user_id)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateSku(payload.sku) from None

    db.refresh(product)
    log_event(
        "product.created",
        product_id=product.id,
        sku=product.sku,
        quantity=product.quantity,
        user_id=acting_user_id,
    )
    return _product_out(product, _category_name(db, product.category_id))


def update_product(
    db: Session,
    product_id: int,
    payload: ProductUpdate,
    *,
    acting_user_id: int | None = None,
) -> dict:
    product = _get_product_or_404(db, product_id)
    changes = payload.model_dump(exclude_unset=True)
    changes.pop("status", None)

    if changes.get("sku") is not None and _sku_taken(db, changes["sku"], exclude_id=product.id):
        raise DuplicateSku(changes["sku"])
    if changes.get("category_id") is not None:
        _ensure_category_exists(db, changes["category_id"])

    try:
        # Quantity first: it is written through the locked compare-and-swap path.
        if changes.get("quantity") is not None:
            record_quantity_change(
                db,
                product,
                changes.pop("quantity"),
                sku=changes.get("sku"),
                acting_user_id=acting_user_id,
            )
        for field in ("name", "sku", "category_id", "price"):
            if changes.get(field) is not None:
                setattr(product, field, changes[field])
        for field in ("description", "image_url"):
            if field in changes:
                setattr(product, field, changes[field])
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateSku(changes.get("sku") or product.sku) from None
    except Exception:
        db.rollback()
        raise

    db.refresh(product)
    return _product_out(product, _category_name(db, product.category_id))


def delete_product(db: Session, product_id: int) -> None:
    """Delete the product row; its ledger rows stay, detached from the product."""
    product = _get_product_or_404(db, product_id)

    retained = db.execute(
        update(StockMovement)
        .where(StockMovement.product_id == product.id)
        .values(product_id=None)
        .execution_options(synchronize_session=False)
    ).rowcount
    db.delete(product)
    db.commit()
    log_event("product.deleted", product_id=product_id, movements_retained=retained)
