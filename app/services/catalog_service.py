# app/services/catalog_service.py
from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.product import Product
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductInventorySummary, ProductUpdate

ALL_CATEGORIES = "All"


def filter_products(
    products: list[Product],
    query: str | None = None,
    category: str | None = None,
) -> list[Product]:
    """
    Storefront search: `query` matches name or description
    (case-insensitive); `category` of None/""/"All" matches everything.
    """
    needle = (query or "").strip().lower()
    wanted = category if category and category != ALL_CATEGORIES else None

    def matches(product: Product) -> bool:
        if wanted is not None and product.category != wanted:
            return False
        if not needle:
            return True
        return needle in product.name.lower() or needle in (product.description or "").lower()

    return [p for p in products if matches(p)]


def list_categories(products: list[Product]) -> list[str]:
    """The "All" option followed by each distinct category in list order."""
    seen: list[str] = []
    for product in products:
        if product.category and product.category not in seen:
            seen.append(product.category)
    return [ALL_CATEGORIES, *seen]


class CatalogService:
    """
    Business logic for Product.

    Responsibilities:
      - storefront listing, search and category filter
      - admin-only CRUD (enforced at router via require_admin)
    """

    def __init__(self, repo: ProductRepository, cart_repo: CartRepository):
        self.repo = repo
        self.cart_repo = cart_repo

    def list_products(
        self,
        session: Session,
        query: str | None = None,
        category: str | None = None,
    ) -> list[Product]:
        return filter_products(self.repo.list(session), query, category)

    def categories(self, session: Session) -> list[str]:
        return list_categories(self.repo.list(session))

    def inventory_summary(self, session: Session) -> ProductInventorySummary:
        products = self.repo.list(session)
        return ProductInventorySummary(
            product_count=len(products),
            total_stock=sum(p.stock or 0 for p in products),
            category_count=len(list_categories(products)) - 1,
        )

    def get_product(self, session: Session, product_id: int) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        return self.repo.create(session, Product(**payload.model_dump()))

    def update_product(
        self,
        session: Session,
        product_id: int,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product. Existing order snapshots keep the
        old name/price.
        """
        product = self.get_product(session, product_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(product, field, value)
        return self.repo.update(session, product)

    def delete_product(self, session: Session, product_id: int) -> None:
        """
        Delete a product along with cart lines pointing at it.
        """
        product = self.get_product(session, product_id)
        self.cart_repo.delete_for_product(session, product_id)
        self.repo.delete(session, product)
