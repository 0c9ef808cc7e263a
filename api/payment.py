from fastapi import APIRouter, Body, BackgroundTasks

from models.payment import PaymentVerificationRequest, PaymentVerificationResponse
from services import payment as payment_service
from services.email import send_payment_confirmation

router = APIRouter()


@router.post("/verify-razorpay-payment", response_model=PaymentVerificationResponse, tags=["payments"])
def verify_razorpay_payment(
    background_tasks: BackgroundTasks,
    verification: PaymentVerificationRequest = Body(...),
):
    """決済署名を検証して注文を支払済みにする"""
    response, order, details, settings = payment_service.verify_payment(verification)
    background_tasks.add_task(send_payment_confirmation, order, details, settings.company_name)
    return response
