# app/routers/products.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    ProductCreate,
    ProductInventorySummary,
    ProductRead,
    ProductUpdate,
)
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
cart_repo = CartRepository()
service = CatalogService(repo, cart_repo)


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    q: str | None = None,
    category: str | None = None,
):
    """
    List products, newest first.

    - `q` searches name and description.
    - `category` filters by category ("All" = no filter).
    """
    return service.list_products(session, query=q, category=category)


@router.get("/categories", response_model=list[str])
def list_categories(session: Session = Depends(get_session)):
    """
    Category options for the storefront filter, starting with "All".
    """
    return service.categories(session)


@router.get(
    "/summary",
    response_model=ProductInventorySummary,
    dependencies=[Depends(require_admin)],
)
def inventory_summary(session: Session = Depends(get_session)):
    """
    Product count, total stock and category count (admin only).
    """
    return service.inventory_summary(session)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    return service.get_product(session, product_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product (admin only).
    """
    return service.create_product(session, payload)


@router.patch(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing product (admin only).
    """
    return service.update_product(session, product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete a product (admin only). Cart lines for it go too.
    """
    service.delete_product(session, product_id)
    return None
