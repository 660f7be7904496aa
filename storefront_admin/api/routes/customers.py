from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront_admin.core.database import get_db
from storefront_admin.models.schemas import Customer, CustomerCreate, CustomerUpdate, Message
from storefront_admin.services.customer_service import CustomerService

router = APIRouter()


@router.get("/", response_model=List[Customer])
def get_customers(q: Optional[str] = None, db: Session = Depends(get_db)):
    """Get all customers, optionally searched by name or email"""
    service = CustomerService(db)
    if q:
        return service.search_customers(q)
    return service.list_customers()


@router.get("/{customer_id}", response_model=Customer)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return CustomerService(db).get_customer(customer_id)


@router.post("/", response_model=Customer, status_code=201)
def create_customer(customer_data: CustomerCreate, db: Session = Depends(get_db)):
    return CustomerService(db).create_customer(customer_data)


@router.put("/{customer_id}", response_model=Customer)
@router.patch("/{customer_id}", response_model=Customer)
def update_customer(customer_id: int, customer_data: CustomerUpdate, db: Session = Depends(get_db)):
    return CustomerService(db).update_customer(customer_id, customer_data)


@router.delete("/{customer_id}", response_model=Message)
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    """Delete a customer; refused with 409 while they still have orders"""
    CustomerService(db).delete_customer(customer_id)
    return {"message": "Customer deleted"}
