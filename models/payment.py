from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, Literal

PaymentStatus = Literal['created', 'attempted', 'paid', 'failed']


class PaymentOrder(BaseModel):
    id: str  # ゲートウェイが採番した注文ID (order_xxx)
    entity: str = "order"
    amount: int  # 最小通貨単位（パイサ等）
    amount_paid: int = 0
    amount_due: Optional[int] = None
    currency: str
    receipt: str
    status: PaymentStatus = 'created'
    notes: Optional[Dict[str, Any]] = None
    created_at: Optional[int] = None  # UNIX時刻

    @classmethod
    def from_gateway(cls, payload: Dict[str, Any]) -> "PaymentOrder":
        data = dict(payload)
        # ゲートウェイは未設定のnotesを空配列で返す
        if not isinstance(data.get("notes"), dict):
            data["notes"] = None
        return cls.model_validate(data)


class PaymentVerificationRequest(BaseModel):
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1)  # 自システムの注文ID


class PaymentVerificationResponse(BaseModel):
    success: bool = True
    verified: bool = True
    order: Optional[Dict[str, Any]] = None
    payment_details: Optional[Dict[str, Any]] = None


class WebhookResponse(BaseModel):
    success: bool = True
    event: Optional[str] = None
