from typing import List

from sqlalchemy import or_, select

from storefront_admin.models.database import Customer
from storefront_admin.models.schemas import CustomerCreate, CustomerUpdate
from storefront_admin.services.base import EntityService


class CustomerService(EntityService):
    model = Customer
    label = "Customer"

    def list_customers(self) -> List[Customer]:
        stmt = select(Customer).order_by(Customer.created_at.desc(), Customer.id.desc())
        return list(self.db.scalars(stmt).all())

    def search_customers(self, term: str) -> List[Customer]:
        pattern = f"%{term}%"
        stmt = (
            select(Customer)
            .where(or_(Customer.name.ilike(pattern), Customer.email.ilike(pattern)))
            .order_by(Customer.created_at.desc(), Customer.id.desc())
        )
        return list(self.db.scalars(stmt).all())

    def get_customer(self, customer_id: int) -> Customer:
        return self._get(customer_id)

    def create_customer(self, customer_data: CustomerCreate) -> Customer:
        return self._create(Customer(**customer_data.model_dump()))

    def update_customer(self, customer_id: int, customer_data: CustomerUpdate) -> Customer:
        return self._update(customer_id, customer_data.model_dump(exclude_unset=True))

    def delete_customer(self, customer_id: int) -> None:
        """Rejected by the database while orders still reference the customer"""
        self._delete(customer_id)
