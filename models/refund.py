from pydantic import BaseModel, Field, StrictInt
from typing import Optional, Dict, Any, Literal

RefundSpeed = Literal['normal', 'optimum']


class Refund(BaseModel):
    id: str  # ゲートウェイが採番した返金ID (rfnd_xxx)
    entity: str = "refund"
    amount: int  # 最小通貨単位
    currency: Optional[str] = None
    payment_id: str
    status: str  # pending / processed / failed
    speed_processed: Optional[str] = None
    notes: Optional[Dict[str, Any]] = None
    receipt: Optional[str] = None
    created_at: Optional[int] = None

    @classmethod
    def from_gateway(cls, payload: Dict[str, Any]) -> "Refund":
        data = dict(payload)
        if not isinstance(data.get("notes"), dict):
            data["notes"] = None
        return cls.model_validate(data)


class RefundRequest(BaseModel):
    """返金作成リクエスト。amountは最小通貨単位"""
    payment_id: str = Field(..., min_length=1)
    amount: StrictInt = Field(..., gt=0)
    speed: RefundSpeed = 'normal'
    notes: Optional[Dict[str, str]] = None
    receipt: Optional[str] = None


class RefundStatusRequest(BaseModel):
    payment_id: str = Field(..., min_length=1)
    refund_id: str = Field(..., min_length=1)


class RefundResponse(BaseModel):
    success: bool = True
    refund: Refund


class RefundTransaction(BaseModel):
    """razorpay_refund_transactionsテーブルの行"""
    razorpay_refund_id: str
    razorpay_payment_id: str
    order_id: Optional[str] = None
    amount: int
    status: str
    razorpay_status: Optional[str] = None
    razorpay_response: Optional[Dict[str, Any]] = None
    processed_at: Optional[str] = None
    failed_at: Optional[str] = None
