from typing import Any, Dict, Optional
import logging
import razorpay
from razorpay.errors import BadRequestError, SignatureVerificationError

from models.payment import PaymentOrder
from models.refund import Refund
from models.settings import PaymentSettings
from utils.errors import ConfigurationError, GatewayError, NotFound

logger = logging.getLogger(__name__)


class PaymentGatewayManager:
    """決済ゲートウェイ（Razorpay）APIのラッパー"""

    def __init__(self, key_id: str, key_secret: str):
        self.key_id = key_id
        self.client = razorpay.Client(auth=(key_id, key_secret))

    def create_order(
            self,
            amount: int,
            currency: str,
            receipt: str,
            notes: Optional[Dict[str, str]] = None,
            payment_capture: bool = True,
        ) -> PaymentOrder:
        """ゲートウェイ側に注文を作成する。amountは最小通貨単位で渡すこと"""
        data = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
            "payment_capture": 1 if payment_capture else 0,
        }
        try:
            payload = self.client.order.create(data=data)
        except BadRequestError as e:
            raise GatewayError("Payment gateway rejected the order", detail=f"order.create rejected: {str(e)}") from e
        except Exception as e:
            raise GatewayError("Payment gateway unavailable", detail=f"order.create failed: {str(e)}") from e

        try:
            return PaymentOrder.from_gateway(payload)
        except Exception as e:
            raise GatewayError("Payment gateway returned an invalid response", detail=f"unexpected order payload: {str(e)}") from e

    def create_refund(
            self,
            payment_id: str,
            amount: int,
            speed: str = "normal",
            notes: Optional[Dict[str, str]] = None,
            receipt: Optional[str] = None,
        ) -> Refund:
        """決済に対して返金を作成する。amountは最小通貨単位"""
        data: Dict[str, Any] = {"amount": amount, "speed": speed}
        if notes:
            data["notes"] = notes
        if receipt:
            data["receipt"] = receipt
        try:
            payload = self.client.payment.refund(payment_id, data=data)
        except BadRequestError as e:
            raise GatewayError("Payment gateway rejected the refund", detail=f"payment.refund {payment_id} rejected: {str(e)}") from e
        except Exception as e:
            raise GatewayError("Payment gateway unavailable", detail=f"payment.refund {payment_id} failed: {str(e)}") from e

        try:
            return Refund.from_gateway(payload)
        except Exception as e:
            raise GatewayError("Payment gateway returned an invalid response", detail=f"unexpected refund payload: {str(e)}") from e

    def fetch_refund(self, payment_id: str, refund_id: str) -> Refund:
        """返金の状態を取得する。別の決済の返金ならNotFound"""
        try:
            payload = self.client.refund.fetch(refund_id)
        except BadRequestError as e:
            raise NotFound("Refund not found", detail=f"refund.fetch {refund_id} rejected: {str(e)}") from e
        except Exception as e:
            raise GatewayError("Payment gateway unavailable", detail=f"refund.fetch {refund_id} failed: {str(e)}") from e

        try:
            refund = Refund.from_gateway(payload)
        except Exception as e:
            raise GatewayError("Payment gateway returned an invalid response", detail=f"unexpected refund payload: {str(e)}") from e
        if refund.payment_id != payment_id:
            raise NotFound("Refund not found", detail=f"refund {refund_id} belongs to {refund.payment_id}, not {payment_id}")
        return refund

    def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        try:
            return self.client.payment.fetch(payment_id)
        except Exception as e:
            raise GatewayError("Could not fetch payment details", detail=f"payment.fetch {payment_id} failed: {str(e)}") from e

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """決済完了時の署名（order_id|payment_id のHMAC-SHA256）を検証する"""
        try:
            self.client.utility.verify_payment_signature({
                "razorpay_order_id": order_id,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
            })
            return True
        except SignatureVerificationError:
            return False

    def verify_webhook_signature(self, body: str, signature: str, secret: str) -> bool:
        try:
            self.client.utility.verify_webhook_signature(body, signature, secret)
            return True
        except SignatureVerificationError:
            return False


def get_payment_gateway(settings: PaymentSettings) -> PaymentGatewayManager:
    if not settings.has_credentials:
        raise ConfigurationError(detail=f"Razorpay {settings.environment} credentials not configured")
    return PaymentGatewayManager(settings.key_id, settings.key_secret)
