from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront_admin.core.database import get_db
from storefront_admin.models.schemas import Message, Review, ReviewCreate, ReviewPage, ReviewUpdate
from storefront_admin.services.review_service import DEFAULT_PAGE_SIZE, ReviewService

router = APIRouter()


class Pagination:
    def __init__(self, page: int = Query(1, ge=1), limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=200)):
        self.page = page
        self.limit = limit


@router.get("/", response_model=ReviewPage)
def get_reviews(pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    return ReviewService(db).list_reviews(pagination.page, pagination.limit)


@router.get("/pending", response_model=ReviewPage)
def get_pending_reviews(pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    """Reviews waiting for approval"""
    return ReviewService(db).list_pending_approval(pagination.page, pagination.limit)


@router.get("/product/{product_id}", response_model=ReviewPage)
def get_product_reviews(product_id: int, pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    """Approved reviews of a product"""
    return ReviewService(db).list_by_product(product_id, pagination.page, pagination.limit)


@router.get("/product/{product_id}/verified", response_model=ReviewPage)
def get_verified_reviews(product_id: int, pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    return ReviewService(db).list_verified_purchases(product_id, pagination.page, pagination.limit)


@router.get("/customer/{customer_id}", response_model=ReviewPage)
def get_customer_reviews(customer_id: int, pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    return ReviewService(db).list_by_customer(customer_id, pagination.page, pagination.limit)


@router.get("/rating/{rating}", response_model=ReviewPage)
def get_reviews_by_rating(rating: int, pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    return ReviewService(db).list_by_rating(rating, pagination.page, pagination.limit)


@router.get("/{review_id}", response_model=Review)
def get_review(review_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).get_review(review_id)


@router.post("/", response_model=Review, status_code=201)
def create_review(review_data: ReviewCreate, db: Session = Depends(get_db)):
    return ReviewService(db).create_review(review_data)


@router.put("/{review_id}", response_model=Review)
def update_review(review_id: int, review_data: ReviewUpdate, db: Session = Depends(get_db)):
    return ReviewService(db).update_review(review_id, review_data)


@router.delete("/{review_id}", response_model=Message)
def delete_review(review_id: int, db: Session = Depends(get_db)):
    ReviewService(db).delete_review(review_id)
    return {"message": "Review deleted"}


@router.post("/{review_id}/approve", response_model=Review)
def approve_review(review_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).approve(review_id)


@router.post("/{review_id}/reject", response_model=Review)
def reject_review(review_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).reject(review_id)


@router.post("/{review_id}/helpful", response_model=Review)
def mark_review_helpful(review_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).increment_helpful(review_id)
