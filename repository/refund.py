from typing import Optional, Dict, Any
from datetime import datetime, timezone

from managers.data_service import DataServiceManager
from models.refund import Refund, RefundTransaction

REFUND_TABLE = "razorpay_refund_transactions"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def record_refund(refund: Refund, order_id: Optional[str] = None) -> RefundTransaction:
    """作成した返金を記録する"""
    transaction = RefundTransaction(
        razorpay_refund_id=refund.id,
        razorpay_payment_id=refund.payment_id,
        order_id=order_id,
        amount=refund.amount,
        status=refund.status,
        razorpay_status=refund.status,
        razorpay_response=refund.model_dump(mode="json"),
    )
    manager = DataServiceManager()
    rows = manager.insert(REFUND_TABLE, transaction.model_dump())
    return RefundTransaction.model_validate(rows[0]) if rows else transaction


def update_refund_status(refund_id: str, status: str, response: Optional[Dict[str, Any]] = None) -> int:
    """返金の状態を更新し、更新した行数を返す"""
    values: Dict[str, Any] = {
        "status": status,
        "razorpay_status": status,
        "processed_at": _now() if status == "processed" else None,
        "failed_at": _now() if status == "failed" else None,
    }
    if response is not None:
        values["razorpay_response"] = response
    manager = DataServiceManager()
    rows = manager.update(REFUND_TABLE, values, filters={"razorpay_refund_id": refund_id})
    return len(rows)
