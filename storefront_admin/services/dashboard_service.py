"""
Dashboard figures.

Every figure is its own aggregate query against the tables; the only
arithmetic done here is the average order value and the month-over-month
percentage changes. Month windows roll back from today's date, they are
not calendar months.
"""
import calendar
import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, List, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session, joinedload

from storefront_admin.core.database import query
from storefront_admin.models.database import (
    Category,
    ContactMessage,
    Customer,
    Order,
    OrderItem,
    Product,
    utcnow,
)
from storefront_admin.models.schemas import DashboardStats

logger = logging.getLogger(__name__)

NO_SALES_ROW = {"name": "No sales data", "value": 0.0}
PERFORMANCE_MONTHS = 6
ONE_DECIMAL = Decimal("0.1")


def months_before(moment: datetime, months: int) -> datetime:
    """Same day ``months`` earlier, clamped to the end of a shorter month"""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def percentage_change(current: float, previous: float) -> str:
    """
    Change from ``previous`` to ``current`` in percent, one decimal place.

    "0" when there is nothing to compare against. Ties round away from
    zero, so 401 against 400 is "0.3".
    """
    if not previous > 0:
        return "0"
    change = Decimal(str((current - previous) / previous * 100))
    return str(change.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def average_order_value(revenue: float, order_count: int) -> float:
    return revenue / order_count if order_count > 0 else 0.0


class DashboardService:
    def __init__(
        self,
        db: Session,
        low_stock_threshold: int = 10,
        list_limit: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.low_stock_threshold = low_stock_threshold
        self.list_limit = list_limit
        self.clock = clock

    def _today(self) -> datetime:
        return self.clock().replace(hour=0, minute=0, second=0, microsecond=0)

    def _month_windows(self) -> Tuple[datetime, datetime]:
        today = self._today()
        return months_before(today, 1), months_before(today, 2)

    def _count(self, column, *criteria) -> int:
        return int(self.db.scalar(select(func.count(column)).where(*criteria)))

    def _revenue(self, *criteria) -> float:
        stmt = select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.status != "cancelled", *criteria
        )
        return float(self.db.scalar(stmt))

    def get_stats(self) -> DashboardStats:
        total_customers = self._count(Customer.id)
        total_products = self._count(Product.id)
        total_orders = self._count(Order.id)
        total_revenue = self._revenue()
        total_stock = int(self.db.scalar(select(func.coalesce(func.sum(Product.stock_quantity), 0))))
        pending_orders = self._count(Order.id, Order.status == "pending")
        unread_messages = self._count(ContactMessage.id, ContactMessage.status == "unread")

        one_month_ago, two_months_ago = self._month_windows()
        last_month_revenue = self._revenue(Order.created_at >= two_months_ago, Order.created_at < one_month_ago)
        last_month_orders = self._count(
            Order.id, Order.created_at >= two_months_ago, Order.created_at < one_month_ago
        )
        last_month_customers = self._count(
            Customer.id, Customer.created_at >= two_months_ago, Customer.created_at < one_month_ago
        )
        this_month_revenue = self._revenue(Order.created_at >= one_month_ago)
        this_month_orders = self._count(Order.id, Order.created_at >= one_month_ago)
        this_month_customers = self._count(Customer.id, Customer.created_at >= one_month_ago)

        return DashboardStats(
            total_customers=total_customers,
            total_products=total_products,
            total_orders=total_orders,
            total_revenue=total_revenue,
            total_stock=total_stock,
            pending_orders=pending_orders,
            unread_messages=unread_messages,
            avg_order_value=average_order_value(total_revenue, total_orders),
            revenue_change=percentage_change(this_month_revenue, last_month_revenue),
            orders_change=percentage_change(this_month_orders, last_month_orders),
            customers_change=percentage_change(this_month_customers, last_month_customers),
        )

    def sales_by_category(self) -> List[Dict]:
        value = func.coalesce(func.sum(OrderItem.total_price), 0).label("value")
        stmt = (
            select(func.coalesce(Category.name, "Uncategorized").label("name"), value)
            .select_from(OrderItem)
            .join(Product, OrderItem.product_id == Product.id)
            .outerjoin(Category, Product.category_id == Category.id)
            .join(Order, OrderItem.order_id == Order.id)
            .where(Order.status != "cancelled")
            .group_by(Category.id, Category.name)
            .order_by(desc(value))
        )
        rows = [{"name": row["name"], "value": float(row["value"])} for row in query(self.db, stmt)]
        return rows or [dict(NO_SALES_ROW)]

    def monthly_performance(self) -> List[Dict]:
        since = months_before(self._today(), PERFORMANCE_MONTHS)
        stmt = (
            select(Order.created_at, Order.total_amount)
            .where(Order.created_at >= since, Order.status != "cancelled")
            .order_by(Order.created_at)
        )
        months: Dict[str, Dict] = {}
        for created_at, total_amount in self.db.execute(stmt):
            sort_key = created_at.strftime("%Y-%m")
            month = months.setdefault(
                sort_key,
                {"month": created_at.strftime("%b"), "sort_key": sort_key, "orders": 0, "revenue": 0.0},
            )
            month["orders"] += 1
            month["revenue"] += float(total_amount)
        return [months[key] for key in sorted(months)]

    def order_status_distribution(self) -> List[Dict]:
        stmt = (
            select(Order.status.label("name"), func.count(Order.id).label("value"))
            .group_by(Order.status)
            .order_by(Order.status)
        )
        return [{"name": row["name"], "value": row["value"]} for row in query(self.db, stmt)]

    def top_products(self) -> List[Dict]:
        total_sold = func.sum(OrderItem.quantity).label("total_sold")
        stmt = (
            select(
                Product.id,
                Product.name,
                Product.price,
                total_sold,
                func.sum(OrderItem.total_price).label("total_revenue"),
            )
            .select_from(OrderItem)
            .join(Product, OrderItem.product_id == Product.id)
            .join(Order, OrderItem.order_id == Order.id)
            .where(Order.status != "cancelled")
            .group_by(Product.id, Product.name, Product.price)
            .order_by(desc(total_sold), Product.id)
            .limit(self.list_limit)
        )
        return [
            {
                "id": row["id"],
                "name": row["name"],
                "price": float(row["price"]),
                "total_sold": int(row["total_sold"]),
                "total_revenue": float(row["total_revenue"]),
            }
            for row in query(self.db, stmt)
        ]

    def recent_orders(self) -> List[Order]:
        stmt = (
            select(Order)
            .options(joinedload(Order.customer))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(self.list_limit)
        )
        return list(self.db.scalars(stmt).all())

    def low_stock(self) -> List[Dict]:
        stmt = (
            select(Product.id, Product.name, Product.stock_quantity, Product.price)
            .where(Product.stock_quantity < self.low_stock_threshold)
            .order_by(Product.stock_quantity, Product.id)
            .limit(self.list_limit)
        )
        return [
            {
                "id": row["id"],
                "name": row["name"],
                "stock_quantity": row["stock_quantity"],
                "price": float(row["price"]),
            }
            for row in query(self.db, stmt)
        ]
