from typing import Optional, Dict, Any
import json
import logging

from managers import payment_gateway
from models.payment import WebhookResponse
from repository import order as order_repo
from repository import settings as settings_repo
from services import refund as refund_service
from utils.errors import AppError, ConfigurationError, InvalidRequest

logger = logging.getLogger(__name__)


def _entity(payload: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    return (payload.get("payload", {}).get(name) or {}).get("entity")


def handle_payment_captured(payment: Dict[str, Any]):
    order = order_repo.get_order_by_gateway_order_id(payment.get("order_id"))
    if order is None:
        logger.error("Order not found for captured payment: %s", payment.get("order_id"))
        return
    if order.is_paid:
        return
    order_repo.mark_order_paid(order.id, payment_id=payment.get("id"), details=payment)
    logger.info("Order %s marked paid (payment.captured)", order.order_number or order.id)


def handle_payment_failed(payment: Dict[str, Any]):
    order = order_repo.get_order_by_gateway_order_id(payment.get("order_id"))
    if order is None:
        logger.error("Order not found for failed payment: %s", payment.get("order_id"))
        return
    order_repo.mark_order_failed(order.id, payment.get("error_description") or "Payment failed", details=payment)
    logger.info("Order %s marked failed (payment.failed)", order.order_number or order.id)


def handle_order_paid(gateway_order: Dict[str, Any], payment: Optional[Dict[str, Any]]):
    order = order_repo.get_order_by_gateway_order_id(gateway_order.get("id"))
    if order is None:
        logger.error("Order not found for order.paid event: %s", gateway_order.get("id"))
        return
    if order.is_paid:
        return
    order_repo.mark_order_paid(
        order.id,
        payment_id=(payment or {}).get("id"),
        details={"order": gateway_order, "payment": payment},
    )
    logger.info("Order %s marked paid (order.paid)", order.order_number or order.id)


def handle_webhook(body: bytes, signature: Optional[str]) -> WebhookResponse:
    """ゲートウェイからのWebhookを検証して注文の決済状態を更新する"""
    if not body:
        raise InvalidRequest("Empty webhook body")
    if not signature:
        raise InvalidRequest("Missing webhook signature")

    settings = settings_repo.load_payment_settings()
    if not settings.webhook_secret:
        raise ConfigurationError(detail="Webhook secret not configured")

    gateway = payment_gateway.get_payment_gateway(settings)
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidRequest("Invalid webhook payload", detail=f"body is not UTF-8: {str(e)}") from e
    if not gateway.verify_webhook_signature(text, signature, settings.webhook_secret):
        logger.error("Invalid webhook signature")
        raise InvalidRequest("Invalid signature")

    try:
        payload = json.loads(text)
    except ValueError as e:
        raise InvalidRequest("Invalid webhook payload", detail=str(e)) from e

    event = payload.get("event")
    logger.info("Webhook event: %s", event)

    try:
        if event == "payment.captured":
            handle_payment_captured(_entity(payload, "payment") or {})
        elif event == "payment.failed":
            handle_payment_failed(_entity(payload, "payment") or {})
        elif event == "order.paid":
            handle_order_paid(_entity(payload, "order") or {}, _entity(payload, "payment"))
        elif event in ("refund.processed", "refund.failed"):
            refund_service.handle_refund_event(_entity(payload, "refund") or {}, _entity(payload, "payment"))
        else:
            logger.info("Unhandled webhook event: %s", event)
    except AppError as e:
        # 処理に失敗しても受信自体は成功として返す
        logger.error("Failed to process webhook event %s: %s", event, e.detail or e.public_message)

    return WebhookResponse(event=event)
