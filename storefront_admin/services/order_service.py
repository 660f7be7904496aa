import logging
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import joinedload, selectinload

from storefront_admin.core.database import execute, transaction
from storefront_admin.core.errors import AppError, NotFoundError
from storefront_admin.models.database import Order, OrderItem
from storefront_admin.models.schemas import OrderCreate, OrderItemCreate, OrderUpdate
from storefront_admin.services.base import EntityService

logger = logging.getLogger(__name__)


class OrderService(EntityService):
    """
    Orders and their line items.

    Creating an order writes the order row and every item row in one
    transaction: either all of them are visible afterwards or none is.
    Nothing here touches product stock and nothing keeps the stored total
    in step with the items except ``recalculate_total``.
    """
    model = Order
    label = "Order"

    def _select(self):
        return select(Order).options(joinedload(Order.customer))

    def _detail_select(self):
        return self._select().options(selectinload(Order.items).joinedload(OrderItem.product))

    def list_orders(self, status: Optional[str] = None, customer_id: Optional[int] = None) -> List[Order]:
        stmt = self._select().order_by(Order.created_at.desc(), Order.id.desc())
        if status is not None:
            stmt = stmt.where(Order.status == status)
        if customer_id is not None:
            stmt = stmt.where(Order.customer_id == customer_id)
        return list(self.db.scalars(stmt).all())

    def list_by_status(self, status: str) -> List[Order]:
        return self.list_orders(status=status)

    def list_by_customer(self, customer_id: int) -> List[Order]:
        return self.list_orders(customer_id=customer_id)

    def get_order(self, order_id: int) -> Order:
        """Order with customer name/email and its items, in insertion order"""
        order = self.db.scalars(self._detail_select().where(Order.id == order_id)).first()
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def create_order(self, order_data: OrderCreate) -> Order:
        """
        Persist an order and all of its items atomically.

        Items are inserted in the order given; a product listed twice
        gives two rows. Any failed insert rolls the whole order back and
        the original error propagates to the caller.
        """
        logger.info(
            f"Creating order {order_data.order_number} for customer {order_data.customer_id} "
            f"with {len(order_data.items)} items"
        )

        with transaction(self.db):
            order = Order(**order_data.model_dump(exclude={"items"}))
            self.db.add(order)
            self.db.flush()  # Get the order ID

            for item_data in order_data.items:
                self.db.add(OrderItem(order_id=order.id, **item_data.model_dump()))
                self.db.flush()

            order_id = order.id

        created = self.db.scalars(self._detail_select().where(Order.id == order_id)).first()
        if created is None:
            raise AppError("Failed to create order")

        logger.info(f"Order {order_data.order_number} created with id {order_id}")
        return created

    def update_order(self, order_id: int, order_data: OrderUpdate) -> Order:
        self._update(order_id, order_data.model_dump(exclude_unset=True))
        return self.get_order(order_id)

    def update_status(self, order_id: int, status: str) -> Order:
        self._update(order_id, {"status": status})
        return self.get_order(order_id)

    def delete_order(self, order_id: int) -> None:
        """Delete the order; its items go with it"""
        self._delete(order_id)

    def recalculate_total(self, order_id: int) -> Order:
        """
        Set the stored total to the sum of the items' stored line totals.

        Line items keep their snapshot prices; an order with no items
        ends up with a total of 0.
        """
        items_total = (
            select(func.coalesce(func.sum(OrderItem.total_price), 0))
            .where(OrderItem.order_id == order_id)
            .scalar_subquery()
        )
        with transaction(self.db):
            result = execute(
                self.db,
                update(Order)
                .where(Order.id == order_id)
                .values(total_amount=items_total)
                .execution_options(synchronize_session=False),
            )
        if result.affected_rows == 0:
            raise NotFoundError("Order not found")

        order = self.get_order(order_id)
        logger.info(f"Recalculated total for order {order.order_number}: {order.total_amount}")
        return order


class OrderItemService(EntityService):
    """Single line items; adding or removing one leaves the order total alone"""
    model = OrderItem
    label = "Order item"

    def _select(self):
        return select(OrderItem).options(joinedload(OrderItem.product))

    def list_items(self) -> List[OrderItem]:
        return list(self.db.scalars(self._select().order_by(OrderItem.id.desc())).all())

    def list_by_order(self, order_id: int) -> List[OrderItem]:
        stmt = self._select().where(OrderItem.order_id == order_id).order_by(OrderItem.id)
        return list(self.db.scalars(stmt).all())

    def get_item(self, item_id: int) -> OrderItem:
        return self._get(item_id)

    def create_item(self, order_id: int, item_data: OrderItemCreate) -> OrderItem:
        if self.db.get(Order, order_id) is None:
            raise NotFoundError("Order not found")
        return self._create(OrderItem(order_id=order_id, **item_data.model_dump()))

    def delete_item(self, item_id: int, order_id: Optional[int] = None) -> None:
        stmt = delete(OrderItem).where(OrderItem.id == item_id)
        if order_id is not None:
            stmt = stmt.where(OrderItem.order_id == order_id)
        with transaction(self.db):
            result = execute(self.db, stmt)
        if result.affected_rows == 0:
            raise NotFoundError("Order item not found")
        logger.info(f"Deleted order item {item_id}")

    def delete_by_order(self, order_id: int) -> int:
        with transaction(self.db):
            result = execute(self.db, delete(OrderItem).where(OrderItem.order_id == order_id))
        logger.info(f"Deleted {result.affected_rows} items of order {order_id}")
        return result.affected_rows
