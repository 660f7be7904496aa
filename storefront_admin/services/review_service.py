import math
from typing import Optional

from sqlalchemy import func, select, update

from storefront_admin.core.database import execute, transaction
from storefront_admin.core.errors import NotFoundError
from storefront_admin.models.database import Review
from storefront_admin.models.schemas import ReviewCreate, ReviewUpdate
from storefront_admin.services.base import EntityService


DEFAULT_PAGE_SIZE = 50


class ReviewService(EntityService):
    """Product reviews; every listing is paginated"""
    model = Review
    label = "Review"

    def _paginate(self, stmt, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
        total = self.db.scalar(select(func.count()).select_from(stmt.subquery()))
        rows = self.db.scalars(
            stmt.order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        ).all()
        return {
            "data": list(rows),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }

    def list_reviews(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
        return self._paginate(select(Review), page, limit)

    def list_by_product(self, product_id: int, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
        stmt = select(Review).where(Review.product_id == product_id, Review.is_approved.is_(True))
        return self._paginate(stmt, page, limit)

    def list_by_customer(self, customer_id: int, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
        return self._paginate(select(Review).where(Review.customer_id == customer_id), page, limit)

    def list_pending_approval(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
        return self._paginate(select(Review).where(Review.is_approved.is_(False)), page, limit)

    def list_by_rating(self, rating: int, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
        stmt = select(Review).where(Review.rating == rating, Review.is_approved.is_(True))
        return self._paginate(stmt, page, limit)

    def list_verified_purchases(self, product_id: int, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
        stmt = select(Review).where(
            Review.product_id == product_id,
            Review.is_verified_purchase.is_(True),
            Review.is_approved.is_(True),
        )
        return self._paginate(stmt, page, limit)

    def get_review(self, review_id: int) -> Review:
        return self._get(review_id)

    def create_review(self, review_data: ReviewCreate) -> Review:
        return self._create(Review(**review_data.model_dump()))

    def update_review(self, review_id: int, review_data: ReviewUpdate) -> Review:
        return self._update(review_id, review_data.model_dump(exclude_unset=True))

    def delete_review(self, review_id: int) -> None:
        self._delete(review_id)

    def approve(self, review_id: int) -> Review:
        return self._update(review_id, {"is_approved": True})

    def reject(self, review_id: int) -> Review:
        return self._update(review_id, {"is_approved": False})

    def increment_helpful(self, review_id: int) -> Review:
        with transaction(self.db):
            result = execute(
                self.db,
                update(Review)
                .where(Review.id == review_id)
                .values(helpful_count=Review.helpful_count + 1)
                .execution_options(synchronize_session=False),
            )
        if result.affected_rows == 0:
            raise NotFoundError("Review not found")
        return self._get(review_id)

    def has_customer_reviewed(self, customer_id: int, product_id: int, order_id: Optional[int] = None) -> bool:
        stmt = select(func.count(Review.id)).where(
            Review.customer_id == customer_id,
            Review.product_id == product_id,
        )
        if order_id is not None:
            stmt = stmt.where(Review.order_id == order_id)
        return self.db.scalar(stmt) > 0
