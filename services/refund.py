from typing import Optional, Dict, Any
import logging

from managers import payment_gateway
from models.refund import RefundRequest, RefundResponse, RefundStatusRequest
from repository import order as order_repo
from repository import refund as refund_repo
from repository import settings as settings_repo
from utils.errors import AppError

logger = logging.getLogger(__name__)


def create_refund(request: RefundRequest) -> RefundResponse:
    """決済に対する返金をゲートウェイに作成し、返金記録を残す"""
    settings = settings_repo.load_payment_settings()
    gateway = payment_gateway.get_payment_gateway(settings)

    logger.info("Creating refund payment_id=%s amount=%s speed=%s", request.payment_id, request.amount, request.speed)
    refund = gateway.create_refund(
        request.payment_id,
        request.amount,
        speed=request.speed,
        notes=request.notes,
        receipt=request.receipt,
    )
    logger.info("Refund %s created for payment %s (%s)", refund.id, refund.payment_id, refund.status)

    # ゲートウェイ側の返金は作成済みなので、記録に失敗してもレスポンスは返す
    try:
        order = order_repo.find_order_with_payment(request.payment_id)
        refund_repo.record_refund(refund, order.id if order else None)
    except AppError as e:
        logger.error("Could not record refund %s: %s", refund.id, e.detail or e.public_message)

    return RefundResponse(refund=refund)


def check_refund_status(request: RefundStatusRequest) -> RefundResponse:
    settings = settings_repo.load_payment_settings()
    gateway = payment_gateway.get_payment_gateway(settings)

    refund = gateway.fetch_refund(request.payment_id, request.refund_id)
    logger.info("Refund %s status: %s", refund.id, refund.status)

    try:
        refund_repo.update_refund_status(refund.id, refund.status, refund.model_dump(mode="json"))
    except AppError as e:
        logger.warning("Could not refresh stored status of refund %s: %s", refund.id, e.detail or e.public_message)

    return RefundResponse(refund=refund)


def handle_refund_event(refund: Dict[str, Any], payment: Optional[Dict[str, Any]]):
    """refund.processed / refund.failed のWebhookを処理する"""
    refund_id = refund.get("id")
    status = refund.get("status")
    updated = refund_repo.update_refund_status(refund_id, status, refund)
    if not updated:
        logger.warning("No stored refund transaction for %s", refund_id)

    if status == "failed":
        logger.warning("Refund %s failed for payment %s", refund_id, refund.get("payment_id"))
        return

    if status != "processed" or (payment or {}).get("refund_status") != "full":
        return

    order = order_repo.find_order_with_payment(refund.get("payment_id"))
    if order is None:
        logger.error("Order not found for refunded payment: %s", refund.get("payment_id"))
        return
    order_repo.mark_order_refunded(order.id)
    logger.info("Order %s marked refunded (%s)", order.order_number or order.id, refund_id)
