from typing import Optional, Dict, Any, Tuple
import logging

from managers import payment_gateway
from models.order import Order
from models.payment import PaymentVerificationRequest, PaymentVerificationResponse
from models.settings import PaymentSettings
from repository import order as order_repo
from repository import settings as settings_repo
from utils.errors import AppError, ConstraintViolation, DuplicatePayment, InvalidRequest, NotFound

logger = logging.getLogger(__name__)


def _load_order(order_id: str) -> Order:
    try:
        order = order_repo.get_order(order_id)
    except ConstraintViolation as e:
        # 不正な形式のIDはDB側で型エラーになる
        raise NotFound("Order not found", detail=e.detail) from e
    if order is None:
        raise NotFound("Order not found", detail=f"order {order_id} does not exist")
    return order


def _fetch_payment_details(gateway, payment_id: str) -> Optional[Dict[str, Any]]:
    try:
        return gateway.fetch_payment(payment_id)
    except AppError as e:
        logger.warning("Could not fetch payment details for %s: %s", payment_id, e.detail)
        return None


def verify_payment(request: PaymentVerificationRequest) -> Tuple[PaymentVerificationResponse, Order, Optional[Dict[str, Any]], PaymentSettings]:
    """クライアントから戻ってきた決済結果を検証し、注文を支払済みにする

    Returns:
        レスポンス、更新後の注文、ゲートウェイの決済詳細、決済設定
    """
    settings = settings_repo.load_payment_settings()
    gateway = payment_gateway.get_payment_gateway(settings)

    if not gateway.verify_payment_signature(request.razorpay_order_id, request.razorpay_payment_id, request.razorpay_signature):
        logger.error(
            "Payment signature verification failed order_id=%s razorpay_order_id=%s razorpay_payment_id=%s",
            request.order_id, request.razorpay_order_id, request.razorpay_payment_id,
        )
        try:
            order_repo.mark_order_failed(request.order_id, "Invalid payment signature")
        except AppError as e:
            logger.warning("Could not mark order %s as failed: %s", request.order_id, e.detail or e.public_message)
        raise InvalidRequest("Payment verification failed", extra={"verified": False})

    order = _load_order(request.order_id)
    if order.is_paid:
        logger.warning(
            "Duplicate payment attempt blocked order_id=%s existing_payment_id=%s new_payment_id=%s",
            order.id, order.razorpay_payment_id, request.razorpay_payment_id,
        )
        raise DuplicatePayment("Order has already been paid", extra={
            "verified": False,
            "duplicate_payment": True,
            "existing_payment_id": order.razorpay_payment_id,
            "order_number": order.order_number,
        })

    other = order_repo.find_order_with_payment(request.razorpay_payment_id, exclude_order_id=order.id)
    if other is not None:
        logger.warning("Payment id %s already used by order %s", request.razorpay_payment_id, other.order_number or other.id)
        raise DuplicatePayment("Payment ID has already been used for another order", extra={
            "verified": False,
            "duplicate_payment_id": True,
            "existing_order": other.order_number or other.id,
        })

    details = _fetch_payment_details(gateway, request.razorpay_payment_id)
    updated = order_repo.mark_order_paid(
        order.id,
        payment_id=request.razorpay_payment_id,
        razorpay_order_id=request.razorpay_order_id,
        details=details,
    )
    logger.info("Payment verified order_id=%s razorpay_payment_id=%s", updated.id, request.razorpay_payment_id)

    response = PaymentVerificationResponse(
        order=updated.model_dump(mode="json"),
        payment_details=details,
    )
    return response, updated, details, settings
