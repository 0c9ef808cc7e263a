from fastapi import APIRouter, Body

from models.checkout import CheckoutRequest, CheckoutResponse
from services import checkout as checkout_service

router = APIRouter()


@router.post("/create-razorpay-order", response_model=CheckoutResponse, tags=["checkout"])
def create_razorpay_order(checkout: CheckoutRequest = Body(..., description="Checkout to create. amount is in minor currency units")):
    """ゲートウェイ注文を作成し、クライアント用のチェックアウト設定を返す"""
    return checkout_service.create_checkout_order(checkout)
