from pydantic import BaseModel, ValidationError
from typing import List, Optional, Dict, Any
from datetime import datetime

from utils.errors import DataServiceError

# payment_status は制約のないテキスト列。旧データには 'completed' も残っている
PAID_STATUSES = ('paid', 'completed')


class Order(BaseModel):
    """ordersテーブルの行。決済関連の列のみ扱う"""
    id: str
    order_number: Optional[str] = None
    customer_id: Optional[str] = None
    total_amount: Optional[float] = None
    payment_status: str = 'pending'
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    payment_error: Optional[str] = None
    payment_details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "extra": "ignore",
    }

    @property
    def is_paid(self) -> bool:
        return self.payment_status in PAID_STATUSES

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Order":
        try:
            return cls.model_validate({**row, "id": str(row["id"])})
        except (ValidationError, KeyError) as e:
            raise DataServiceError(detail=f"unreadable orders row {row.get('id')}: {str(e)}") from e


class AnalyticsResponse(BaseModel):
    success: bool = True
    data: List[Dict[str, Any]]
