from fastapi import APIRouter, Request

from models.payment import WebhookResponse
from services import webhook as webhook_service

router = APIRouter()


@router.post("/razorpay-webhook", response_model=WebhookResponse, tags=["webhooks"])
async def razorpay_webhook(request: Request):
    payload = await request.body()
    sig_header = request.headers.get('x-razorpay-signature')
    return webhook_service.handle_webhook(payload, sig_header)
