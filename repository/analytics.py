from typing import List, Dict, Any

from managers.data_service import DataServiceManager

RECENT_ORDERS_VIEW = "recent_orders_view"
TOP_PRODUCTS_VIEW = "top_products_view"


def recent_orders(limit: int = 10) -> List[Dict[str, Any]]:
    """直近の注文（recent_orders_view）"""
    return DataServiceManager().select(RECENT_ORDERS_VIEW, limit=limit)


def top_products(limit: int = 10) -> List[Dict[str, Any]]:
    """売れ筋商品（top_products_view）"""
    return DataServiceManager().select(TOP_PRODUCTS_VIEW, limit=limit)
