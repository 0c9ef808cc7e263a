from typing import Optional, Dict, Any
from datetime import datetime, timezone

from managers.data_service import DataServiceManager
from models.order import Order
from utils.errors import NotFound


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_order(order_id: str) -> Optional[Order]:
    """注文IDで注文を取得する"""
    manager = DataServiceManager()
    row = manager.select_one("orders", filters={"id": order_id})
    return Order.from_row(row) if row else None


def get_order_by_gateway_order_id(razorpay_order_id: str) -> Optional[Order]:
    manager = DataServiceManager()
    row = manager.select_one("orders", filters={"razorpay_order_id": razorpay_order_id})
    return Order.from_row(row) if row else None


def find_order_with_payment(payment_id: str, exclude_order_id: Optional[str] = None) -> Optional[Order]:
    """指定の決済IDが紐づいた注文（exclude_order_id以外）を探す"""
    manager = DataServiceManager()
    row = manager.select_one(
        "orders",
        filters={"razorpay_payment_id": payment_id},
        exclude={"id": exclude_order_id} if exclude_order_id else None,
    )
    return Order.from_row(row) if row else None


def _update_order(order_id: str, values: Dict[str, Any]) -> Order:
    manager = DataServiceManager()
    values["updated_at"] = _now()
    rows = manager.update("orders", values, filters={"id": order_id})
    if not rows:
        raise NotFound("Order not found", detail=f"order {order_id} not updated")
    return Order.from_row(rows[0])


def mark_order_paid(order_id: str, payment_id: Optional[str], razorpay_order_id: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> Order:
    values: Dict[str, Any] = {
        "payment_status": "paid",
        "razorpay_payment_id": payment_id,
        "payment_details": details,
        "payment_error": None,
    }
    if razorpay_order_id:
        values["razorpay_order_id"] = razorpay_order_id
    return _update_order(order_id, values)


def mark_order_failed(order_id: str, error: str, details: Optional[Dict[str, Any]] = None) -> Order:
    values: Dict[str, Any] = {
        "payment_status": "failed",
        "payment_error": error,
    }
    if details is not None:
        values["payment_details"] = details
    return _update_order(order_id, values)


def mark_order_refunded(order_id: str) -> Order:
    """全額返金済みにする。決済詳細は支払時のものを残す"""
    return _update_order(order_id, {"payment_status": "refunded"})
