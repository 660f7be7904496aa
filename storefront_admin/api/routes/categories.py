from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront_admin.core.database import get_db
from storefront_admin.models.schemas import Category, CategoryCreate, CategoryUpdate, Message
from storefront_admin.services.product_service import CategoryService

router = APIRouter()


@router.get("/", response_model=List[Category])
def get_categories(db: Session = Depends(get_db)):
    return CategoryService(db).list_categories()


@router.get("/{category_id}", response_model=Category)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return CategoryService(db).get_category(category_id)


@router.post("/", response_model=Category, status_code=201)
def create_category(category_data: CategoryCreate, db: Session = Depends(get_db)):
    return CategoryService(db).create_category(category_data)


@router.put("/{category_id}", response_model=Category)
@router.patch("/{category_id}", response_model=Category)
def update_category(category_id: int, category_data: CategoryUpdate, db: Session = Depends(get_db)):
    return CategoryService(db).update_category(category_id, category_data)


@router.delete("/{category_id}", response_model=Message)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    """Delete a category; its products are kept without a category"""
    CategoryService(db).delete_category(category_id)
    return {"message": "Category deleted"}
