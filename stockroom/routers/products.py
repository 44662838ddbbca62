from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockroom.core.api_docs import error_responses
from stockroom.core.config import settings
from stockroom.core.deps import get_db
from stockroom.core.security_current import get_current_user
from stockroom.models.user import User
from stockroom.schemas.common import OkOut, PaginationMeta
from stockroom.schemas.product import ProductCreate, ProductListOut, ProductOut, ProductUpdate
from stockroom.services import product_service

router = APIRouter(prefix="/products", tags=["products"])


@router.get(
    "",
    response_model=ProductListOut,
    summary="List products",
    responses={
        200: {
            "description": "Paginated products",
            "content": {
                "application/json": {
                    "example": {
                        "items": [
                            {
                                "id": 1,
                                "name": "Wireless Bluetooth Headphones",
                                "sku": "ELC-001-BLK",
                                "category_id": 1,
                                "category": "Electronics",
                                "description": "Noise-canceling wireless headphones.",
                                "image_url": None,
                                "price": 14999,
                                "quantity": 45,
                                "status": "in_stock",
                                "created_at": "2026-02-16T10:00:00Z",
                                "updated_at": "2026-02-16T10:00:00Z",
                            }
                        ],
                        "pagination": {
                            "total": 1,
                            "limit": 20,
                            "offset": 0,
                            "count": 1,
                            "has_next": False,
                        },
                    }
                }
            },
        },
        **error_responses(422, 500),
    },
)
def list_products(
    search: str | None = Query(default=None, description="Match name, SKU or description"),
    category: str | None = Query(default=None, description="Category name, or `all`"),
    status_filter: str | None = Query(
        default=None,
        alias="status",
        description="in_stock, low_stock, out_of_stock, or `all`",
    ),
    sort_by: str = Query(default="created_at", description="name, sku, price, quantity, status, created_at"),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    items, total = product_service.list_products(
        db,
        search=search,
        category=category,
        status=status_filter,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return ProductListOut(
        items=items,
        pagination=PaginationMeta.build(total=total, limit=limit, offset=offset, count=len(items)),
    )


@router.post(
    "",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
    description="Creates a product. A positive opening quantity is recorded as an `Initial stock` movement.",
    responses=error_responses(401, 404, 409, 422, 500),
)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return product_service.create_product(db, payload, acting_user_id=user.id)


@router.get(
    "/{product_id}",
    response_model=ProductOut,
    summary="Get product",
    responses=error_responses(404, 422, 500),
)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return product_service.get_product(db, product_id)


@router.put(
    "/{product_id}",
    response_model=ProductOut,
    summary="Update product",
    description="Partial update. A quantity change is recorded as one stock movement; `status` is ignored.",
    responses=error_responses(401, 404, 409, 422, 500),
)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return product_service.update_product(db, product_id, payload, acting_user_id=user.id)


@router.delete(
    "/{product_id}",
    response_model=OkOut,
    summary="Delete product",
    description="Deletes the product. Its stock movements are kept with the product reference cleared.",
    responses=error_responses(401, 404, 422, 500),
)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    product_service.delete_product(db, product_id)
    return OkOut()
