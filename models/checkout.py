from pydantic import BaseModel, Field, EmailStr, StrictInt, field_validator
from typing import Optional, Dict

from models.payment import PaymentOrder

SUPPORTED_CURRENCIES = {"INR", "USD", "EUR", "GBP", "AED", "SGD", "AUD", "CAD"}
MAX_RECEIPT_LENGTH = 40  # ゲートウェイ側の上限


class CheckoutRequest(BaseModel):
    """チェックアウト注文作成リクエスト。amountは最小通貨単位（INRならパイサ）"""
    amount: StrictInt = Field(..., gt=0)
    currency: str
    receipt: str
    customer_email: EmailStr
    customer_phone: Optional[str] = None
    customer_first_name: Optional[str] = None
    customer_last_name: Optional[str] = None
    notes: Optional[Dict[str, str]] = None

    @field_validator('currency')
    @classmethod
    def check_currency(cls, value: str) -> str:
        code = value.strip().upper()
        if code not in SUPPORTED_CURRENCIES:
            raise ValueError(f"unsupported currency '{value}'")
        return code

    @field_validator('receipt')
    @classmethod
    def check_receipt(cls, value: str) -> str:
        receipt = value.strip()
        if not receipt:
            raise ValueError("receipt must not be blank")
        if len(receipt) > MAX_RECEIPT_LENGTH:
            raise ValueError(f"receipt must be at most {MAX_RECEIPT_LENGTH} characters")
        return receipt

    @field_validator('customer_phone', 'customer_first_name', 'customer_last_name')
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class Prefill(BaseModel):
    email: Optional[str] = None
    contact: Optional[str] = None


class Theme(BaseModel):
    color: str


class CheckoutConfig(BaseModel):
    """クライアント側のチェックアウトウィジェットに渡す設定"""
    key: str  # 公開キーID
    order_id: str
    currency: str
    amount: int
    name: str
    description: str
    image: Optional[str] = None
    prefill: Prefill
    theme: Theme
    timeout: int = 900


class CheckoutResponse(BaseModel):
    success: bool = True
    order: PaymentOrder
    checkout_config: CheckoutConfig
    customer_id: Optional[str] = None
