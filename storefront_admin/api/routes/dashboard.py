from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront_admin.core.config import Settings, get_settings
from storefront_admin.core.database import get_db
from storefront_admin.models.schemas import (
    DashboardStats,
    LowStockProduct,
    MonthlyPerformance,
    NamedValue,
    Order,
    TopProduct,
)
from storefront_admin.services.dashboard_service import DashboardService

router = APIRouter()


def get_dashboard_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> DashboardService:
    return DashboardService(
        db,
        low_stock_threshold=settings.low_stock_threshold,
        list_limit=settings.dashboard_list_limit,
    )


@router.get("/stats", response_model=DashboardStats)
def get_stats(service: DashboardService = Depends(get_dashboard_service)):
    """Totals plus month-over-month changes for revenue, orders and customers"""
    return service.get_stats()


@router.get("/sales-by-category", response_model=List[NamedValue])
def get_sales_by_category(service: DashboardService = Depends(get_dashboard_service)):
    return service.sales_by_category()


@router.get("/monthly-performance", response_model=List[MonthlyPerformance])
def get_monthly_performance(service: DashboardService = Depends(get_dashboard_service)):
    return service.monthly_performance()


@router.get("/order-status", response_model=List[NamedValue])
def get_order_status(service: DashboardService = Depends(get_dashboard_service)):
    return service.order_status_distribution()


@router.get("/top-products", response_model=List[TopProduct])
def get_top_products(service: DashboardService = Depends(get_dashboard_service)):
    return service.top_products()


@router.get("/recent-orders", response_model=List[Order])
def get_recent_orders(service: DashboardService = Depends(get_dashboard_service)):
    return service.recent_orders()


@router.get("/low-stock", response_model=List[LowStockProduct])
def get_low_stock(service: DashboardService = Depends(get_dashboard_service)):
    return service.low_stock()
