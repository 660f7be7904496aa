from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront_admin.core.database import get_db
from storefront_admin.models.schemas import (
    Message,
    Order,
    OrderCreate,
    OrderDetail,
    OrderItem,
    OrderItemCreate,
    OrderStatus,
    OrderStatusUpdate,
    OrderUpdate,
)
from storefront_admin.services.order_service import OrderItemService, OrderService

router = APIRouter()


@router.get("/", response_model=List[Order])
def get_orders(
    status: Optional[OrderStatus] = None,
    customer_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """Get all orders, newest first"""
    return OrderService(db).list_orders(status=status, customer_id=customer_id)


@router.get("/{order_id}", response_model=OrderDetail)
def get_order(order_id: int, db: Session = Depends(get_db)):
    """Get a specific order with its items"""
    return OrderService(db).get_order(order_id)


@router.post("/", response_model=OrderDetail, status_code=201)
def create_order(order_data: OrderCreate, db: Session = Depends(get_db)):
    """Create an order and all of its items in one transaction"""
    return OrderService(db).create_order(order_data)


@router.put("/{order_id}", response_model=OrderDetail)
@router.patch("/{order_id}", response_model=OrderDetail)
def update_order(order_id: int, order_data: OrderUpdate, db: Session = Depends(get_db)):
    """Update the fields present in the body; items are left alone"""
    return OrderService(db).update_order(order_id, order_data)


@router.patch("/{order_id}/status", response_model=OrderDetail)
def update_order_status(order_id: int, status_data: OrderStatusUpdate, db: Session = Depends(get_db)):
    return OrderService(db).update_status(order_id, status_data.status)


@router.post("/{order_id}/recalculate", response_model=OrderDetail)
def recalculate_order_total(order_id: int, db: Session = Depends(get_db)):
    """Reset the order total to the sum of its items"""
    return OrderService(db).recalculate_total(order_id)


@router.delete("/{order_id}", response_model=Message)
def delete_order(order_id: int, db: Session = Depends(get_db)):
    OrderService(db).delete_order(order_id)
    return {"message": "Order deleted"}


@router.get("/{order_id}/items", response_model=List[OrderItem])
def get_order_items(order_id: int, db: Session = Depends(get_db)):
    return OrderItemService(db).list_by_order(order_id)


@router.post("/{order_id}/items", response_model=OrderItem, status_code=201)
def add_order_item(order_id: int, item_data: OrderItemCreate, db: Session = Depends(get_db)):
    """Add one item; the order total is only updated by recalculate"""
    return OrderItemService(db).create_item(order_id, item_data)


@router.delete("/{order_id}/items/{item_id}", response_model=Message)
def delete_order_item(order_id: int, item_id: int, db: Session = Depends(get_db)):
    OrderItemService(db).delete_item(item_id, order_id=order_id)
    return {"message": "Order item deleted"}
