from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockroom.core.api_docs import error_responses
from stockroom.core.config import settings
from stockroom.core.deps import get_db
from stockroom.core.security_current import get_current_user
from stockroom.models.user import User
from stockroom.schemas.category import (
    CategoryCreate,
    CategoryListOut,
    CategoryOptionListOut,
    CategoryOut,
    CategoryUpdate,
)
from stockroom.schemas.common import OkOut, PaginationMeta
from stockroom.services import category_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get(
    "",
    response_model=CategoryListOut,
    summary="List categories",
    responses=error_responses(422, 500),
)
def list_categories(
    status_filter: str | None = Query(default=None, alias="status", description="active, inactive, or `all`"),
    search: str | None = Query(default=None, description="Match category name"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    items, total = category_service.list_categories(
        db,
        status=status_filter,
        search=search,
        limit=limit,
        offset=offset,
    )
    return CategoryListOut(
        items=items,
        pagination=PaginationMeta.build(total=total, limit=limit, offset=offset, count=len(items)),
    )


@router.get(
    "/active",
    response_model=CategoryOptionListOut,
    summary="List active categories for dropdowns",
    responses=error_responses(500),
)
def list_active_categories(db: Session = Depends(get_db)):
    return CategoryOptionListOut(items=category_service.list_active_categories(db))


@router.post(
    "",
    response_model=CategoryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
    responses=error_responses(401, 409, 422, 500),
)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    return category_service.create_category(
        db,
        name=payload.name,
        description=payload.description,
        status=payload.status,
    )


@router.get(
    "/{category_id}",
    response_model=CategoryOut,
    summary="Get category",
    responses=error_responses(401, 404, 422, 500),
)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    return category_service.get_category(db, category_id)


@router.put(
    "/{category_id}",
    response_model=CategoryOut,
    summary="Update category",
    responses=error_responses(401, 404, 409, 422, 500),
)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    return category_service.update_category(db, category_id, payload.model_dump(exclude_unset=True))


@router.delete(
    "/{category_id}",
    response_model=OkOut,
    summary="Delete category",
    description="Rejected with `category_in_use` while any product references the category.",
    responses=error_responses(401, 404, 422, 500),
)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    category_service.delete_category(db, category_id)
    return OkOut()
