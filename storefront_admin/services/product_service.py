import logging
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.orm import joinedload

from storefront_admin.core.database import execute, transaction
from storefront_admin.core.errors import InsufficientStockError
from storefront_admin.models.database import Category, Product, utcnow
from storefront_admin.models.schemas import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate
from storefront_admin.services.base import EntityService

logger = logging.getLogger(__name__)


class ProductService(EntityService):
    model = Product
    label = "Product"

    def _select(self):
        return select(Product).options(joinedload(Product.category))

    def _newest_first(self, stmt):
        return stmt.order_by(Product.created_at.desc(), Product.id.desc())

    def list_products(self, category_id: Optional[int] = None) -> List[Product]:
        stmt = self._select()
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        return list(self.db.scalars(self._newest_first(stmt)).all())

    def list_by_category(self, category_id: int) -> List[Product]:
        return self.list_products(category_id=category_id)

    def search_products(self, term: str, category_id: Optional[int] = None) -> List[Product]:
        """Name or description contains ``term``, optionally within one category"""
        pattern = f"%{term}%"
        stmt = self._select().where(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        return list(self.db.scalars(self._newest_first(stmt)).all())

    def get_product(self, product_id: int) -> Product:
        return self._get(product_id)

    def create_product(self, product_data: ProductCreate) -> Product:
        return self._create(Product(**product_data.model_dump()))

    def update_product(self, product_id: int, product_data: ProductUpdate) -> Product:
        return self._update(product_id, product_data.model_dump(exclude_unset=True))

    def delete_product(self, product_id: int) -> None:
        """Rejected by the database while order items still reference the product"""
        self._delete(product_id)

    def adjust_stock(self, product_id: int, delta: int) -> Product:
        """
        Add ``delta`` (negative to remove) to the stock level.

        The check and the write are one conditional UPDATE, so a change
        that would go below zero updates nothing and the stored quantity
        stays as it was.
        """
        new_quantity = Product.stock_quantity + delta
        with transaction(self.db):
            result = execute(
                self.db,
                update(Product)
                .where(Product.id == product_id, new_quantity >= 0)
                .values(stock_quantity=new_quantity, updated_at=utcnow())
                .execution_options(synchronize_session=False),
            )

        if result.affected_rows == 0:
            product = self._get(product_id)
            raise InsufficientStockError(
                f"Insufficient stock for {product.name}. "
                f"Available: {product.stock_quantity}, "
                f"Requested change: {delta}"
            )

        product = self._get(product_id)
        logger.info(
            f"Adjusted stock for {product.name} by {delta}: "
            f"new quantity = {product.stock_quantity}"
        )
        return product


class CategoryService(EntityService):
    model = Category
    label = "Category"

    def list_categories(self) -> List[Category]:
        return list(self.db.scalars(select(Category).order_by(Category.name, Category.id)).all())

    def get_category(self, category_id: int) -> Category:
        return self._get(category_id)

    def create_category(self, category_data: CategoryCreate) -> Category:
        return self._create(Category(**category_data.model_dump()))

    def update_category(self, category_id: int, category_data: CategoryUpdate) -> Category:
        return self._update(category_id, category_data.model_dump(exclude_unset=True))

    def delete_category(self, category_id: int) -> None:
        """Products in the category stay, with no category"""
        self._delete(category_id)
