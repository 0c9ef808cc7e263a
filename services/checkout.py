from typing import Optional
import logging

from managers import payment_gateway
from models.checkout import CheckoutRequest, CheckoutConfig, CheckoutResponse, Prefill, Theme
from models.customer import CustomerContact
from models.payment import PaymentOrder
from models.settings import PaymentSettings
from repository import customer as customer_repo
from repository import settings as settings_repo
from utils.errors import AppError, InvalidRequest

logger = logging.getLogger(__name__)


def build_checkout_config(request: CheckoutRequest, order: PaymentOrder, settings: PaymentSettings) -> CheckoutConfig:
    return CheckoutConfig(
        key=settings.key_id,
        order_id=order.id,
        currency=request.currency,
        amount=request.amount,
        name=settings.company_name,
        description=settings.description,
        image=settings.company_logo,
        prefill=Prefill(email=request.customer_email, contact=request.customer_phone),
        theme=Theme(color=settings.theme_color),
        timeout=settings.timeout,
    )


def upsert_checkout_customer(request: CheckoutRequest) -> Optional[str]:
    """チェックアウトの連絡先で顧客を登録する。失敗してもチェックアウトは止めない"""
    contact = CustomerContact(
        email=request.customer_email,
        first_name=request.customer_first_name,
        last_name=request.customer_last_name,
        phone=request.customer_phone,
    )
    try:
        return customer_repo.upsert_customer(contact)
    except AppError as e:
        logger.warning("Customer upsert failed for receipt %s: %s", request.receipt, e.detail or e.public_message)
    except Exception:
        logger.exception("Unexpected error during customer upsert for receipt %s", request.receipt)
    return None


def create_checkout_order(request: CheckoutRequest) -> CheckoutResponse:
    """ゲートウェイ注文を作成し、チェックアウト設定を返す

    receiptはゲートウェイ側の冪等キーとしてそのまま渡す。ここでは重複排除しない。
    """
    settings = settings_repo.load_payment_settings()
    if not settings.enabled:
        raise InvalidRequest("Payment gateway is disabled")

    gateway = payment_gateway.get_payment_gateway(settings)
    logger.info(
        "Creating payment order receipt=%s amount=%s currency=%s phone=%s",
        request.receipt, request.amount, request.currency,
        "provided" if request.customer_phone else "not provided",
    )
    order = gateway.create_order(
        amount=request.amount,
        currency=request.currency,
        receipt=request.receipt,
        notes=request.notes,
        payment_capture=settings.auto_capture,
    )
    logger.info("Payment order %s created for receipt %s", order.id, request.receipt)

    customer_id = upsert_checkout_customer(request)

    return CheckoutResponse(
        order=order,
        checkout_config=build_checkout_config(request, order, settings),
        customer_id=customer_id,
    )
