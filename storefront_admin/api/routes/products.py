from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront_admin.core.database import get_db
from storefront_admin.models.schemas import Message, Product, ProductCreate, ProductUpdate, StockAdjustment
from storefront_admin.services.product_service import ProductService

router = APIRouter()


@router.get("/", response_model=List[Product])
def get_products(q: Optional[str] = None, category_id: Optional[int] = None, db: Session = Depends(get_db)):
    """Get all products, optionally searched by name/description and/or filtered by category"""
    service = ProductService(db)
    if q:
        return service.search_products(q, category_id=category_id)
    return service.list_products(category_id=category_id)


@router.get("/{product_id}", response_model=Product)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ProductService(db).get_product(product_id)


@router.post("/", response_model=Product, status_code=201)
def create_product(product_data: ProductCreate, db: Session = Depends(get_db)):
    return ProductService(db).create_product(product_data)


@router.put("/{product_id}", response_model=Product)
@router.patch("/{product_id}", response_model=Product)
def update_product(product_id: int, product_data: ProductUpdate, db: Session = Depends(get_db)):
    return ProductService(db).update_product(product_id, product_data)


@router.patch("/{product_id}/stock", response_model=Product)
def adjust_product_stock(product_id: int, adjustment: StockAdjustment, db: Session = Depends(get_db)):
    """Add to or remove from stock; rejected outright if it would go negative"""
    return ProductService(db).adjust_stock(product_id, adjustment.delta)


@router.delete("/{product_id}", response_model=Message)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    ProductService(db).delete_product(product_id)
    return {"message": "Product deleted"}
