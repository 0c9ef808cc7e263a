from fastapi import APIRouter, Query

from models.order import AnalyticsResponse
from repository import analytics as analytics_repo

router = APIRouter(prefix="/admin/analytics")


@router.get("/recent-orders", response_model=AnalyticsResponse, tags=["analytics"])
def recent_orders(limit: int = Query(10, ge=1, le=100, description="Maximum number of orders to return")):
    return AnalyticsResponse(data=analytics_repo.recent_orders(limit))


@router.get("/top-products", response_model=AnalyticsResponse, tags=["analytics"])
def top_products(limit: int = Query(10, ge=1, le=100, description="Maximum number of products to return")):
    return AnalyticsResponse(data=analytics_repo.top_products(limit))
