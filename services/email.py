from typing import Optional, Dict, Any
import logging

from managers.email_manager import EmailManager
from models.email import EmailRequest, EmailContent, EmailRecipients, EmailAddress
from models.order import Order
from utils.settings import get_settings

logger = logging.getLogger(__name__)


def format_amount(minor_units: Optional[int]) -> str:
    if minor_units is None:
        return "-"
    return f"{minor_units / 100:.2f}"


def build_payment_confirmation(order: Order, payment_details: Dict[str, Any], company_name: str) -> Optional[EmailRequest]:
    """決済完了メールを組み立てる。宛先が分からなければNone"""
    settings = get_settings()
    to_address = payment_details.get("email")
    if not to_address or not settings.sender_address:
        return None

    bcc = []
    if settings.recipients_address:
        bcc.append(EmailAddress(address=settings.recipients_address, displayName=settings.recipients_address))

    return EmailRequest(
        content=EmailContent.payment_confirmation(
            name=to_address,
            order_number=order.order_number or order.id,
            amount=format_amount(payment_details.get("amount")),
            currency=(payment_details.get("currency") or "INR").upper(),
            payment_id=order.razorpay_payment_id or "-",
            company_name=company_name,
        ),
        recipients=EmailRecipients(
            to=[EmailAddress(address=to_address, displayName=to_address)],
            bcc=bcc,
        ),
        senderAddress=settings.sender_address,
    )


#決済完了メール送信
def send_payment_confirmation(order: Order, payment_details: Optional[Dict[str, Any]], company_name: str = "Nirchal"):
    try:
        message = build_payment_confirmation(order, payment_details or {}, company_name)
        if message is None:
            logger.info("Skipping payment confirmation for order %s: no recipient", order.id)
            return None

        email_manager = EmailManager()
        poller = email_manager.client.begin_send(message.model_dump())
        return poller.result()

    except Exception as e:
        logger.error("Payment confirmation email failed for order %s: %s", order.id, str(e))
