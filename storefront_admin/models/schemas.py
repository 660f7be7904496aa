from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
MessageStatus = Literal["unread", "read", "replied"]


def _reject_null(value):
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


# Update fields backed by NOT NULL columns: optional in the body, never null.
NotNull = BeforeValidator(_reject_null)


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class Message(BaseModel):
    message: str


# Categories

class CategoryBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Annotated[Optional[str], NotNull] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None


class Category(CategoryBase, ORMModel):
    id: int
    created_at: datetime


# Products

class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(ge=0)
    category_id: Optional[int] = None
    stock_quantity: int = Field(default=0, ge=0)
    image_url: Optional[str] = None
    sku: Optional[str] = None


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Annotated[Optional[str], NotNull] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Annotated[Optional[Decimal], NotNull] = Field(default=None, ge=0)
    category_id: Optional[int] = None
    stock_quantity: Annotated[Optional[int], NotNull] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    sku: Optional[str] = None


class StockAdjustment(BaseModel):
    delta: int


class Product(ORMModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    stock_quantity: int
    image_url: Optional[str] = None
    sku: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# Customers

class CustomerBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=255)
    phone: Optional[str] = None
    address: Optional[str] = None


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    name: Annotated[Optional[str], NotNull] = Field(default=None, min_length=1, max_length=200)
    email: Annotated[Optional[str], NotNull] = Field(default=None, min_length=3, max_length=255)
    phone: Optional[str] = None
    address: Optional[str] = None


class Customer(CustomerBase, ORMModel):
    id: int
    created_at: datetime
    updated_at: datetime


# Orders

class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    total_price: Decimal = Field(ge=0)


class OrderItem(ORMModel):
    id: int
    order_id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float


class OrderCreate(BaseModel):
    customer_id: int
    order_number: str = Field(min_length=1, max_length=50)
    status: OrderStatus = "pending"
    total_amount: Decimal = Field(ge=0)
    shipping_address: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItemCreate] = []


class OrderUpdate(BaseModel):
    customer_id: Annotated[Optional[int], NotNull] = None
    order_number: Annotated[Optional[str], NotNull] = Field(default=None, min_length=1, max_length=50)
    status: Annotated[Optional[OrderStatus], NotNull] = None
    total_amount: Annotated[Optional[Decimal], NotNull] = Field(default=None, ge=0)
    shipping_address: Optional[str] = None
    notes: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class Order(ORMModel):
    id: int
    customer_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    order_number: str
    status: str
    total_amount: float
    shipping_address: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderDetail(Order):
    items: List[OrderItem] = []


# Reviews

class ReviewCreate(BaseModel):
    product_id: int
    customer_id: int
    order_id: Optional[int] = None
    rating: int = Field(ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=200)
    comment: Optional[str] = None
    is_verified_purchase: bool = False


class ReviewUpdate(BaseModel):
    rating: Annotated[Optional[int], NotNull] = Field(default=None, ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=200)
    comment: Optional[str] = None
    is_approved: Annotated[Optional[bool], NotNull] = None
    helpful_count: Annotated[Optional[int], NotNull] = Field(default=None, ge=0)


class Review(ORMModel):
    id: int
    product_id: int
    customer_id: int
    order_id: Optional[int] = None
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    is_verified_purchase: bool
    is_approved: bool
    helpful_count: int
    created_at: datetime
    updated_at: datetime


class ReviewPage(BaseModel):
    data: List[Review]
    total: int
    page: int
    limit: int
    total_pages: int


# Contact messages

class ContactMessageCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=255)
    subject: Optional[str] = Field(default=None, max_length=255)
    message: str = Field(min_length=1)


class ContactStatusUpdate(BaseModel):
    status: MessageStatus


class ContactMessage(ORMModel):
    id: int
    name: str
    email: str
    subject: Optional[str] = None
    message: str
    status: str
    created_at: datetime


# Auth

class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class User(ORMModel):
    id: int
    username: str
    email: str


# Dashboard

class DashboardStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_customers: int
    total_products: int
    total_orders: int
    total_revenue: float
    total_stock: int
    pending_orders: int
    unread_messages: int
    avg_order_value: float
    revenue_change: str
    orders_change: str
    customers_change: str


class NamedValue(BaseModel):
    name: str
    value: float


class MonthlyPerformance(BaseModel):
    month: str
    sort_key: str
    orders: int
    revenue: float


class TopProduct(BaseModel):
    id: int
    name: str
    price: float
    total_sold: int
    total_revenue: float


class LowStockProduct(BaseModel):
    id: int
    name: str
    stock_quantity: int
    price: float
