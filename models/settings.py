from pydantic import BaseModel
from typing import Dict, Optional

from utils.settings import Settings

PAYMENT_SETTING_KEYS = [
    'razorpay_enabled',
    'razorpay_environment',
    'razorpay_key_id',
    'razorpay_key_secret',
    'razorpay_auto_capture',
    'razorpay_company_name',
    'razorpay_company_logo',
    'razorpay_theme_color',
    'razorpay_description',
    'razorpay_timeout',
    'razorpay_webhook_secret',
]


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return str(value).strip().lower() in ("true", "1", "yes", "on")


class PaymentSettings(BaseModel):
    """決済ゲートウェイの設定（settingsテーブル category=payment）"""
    enabled: bool = False
    environment: str = "test"
    key_id: Optional[str] = None
    key_secret: Optional[str] = None
    webhook_secret: Optional[str] = None
    auto_capture: bool = True
    company_name: str = "Nirchal"
    company_logo: Optional[str] = None
    theme_color: str = "#f59e0b"
    description: str = "Payment for Nirchal order"
    timeout: int = 900

    @property
    def has_credentials(self) -> bool:
        return bool(self.key_id and self.key_secret)

    @classmethod
    def from_rows(cls, values: Dict[str, str], env: Settings) -> "PaymentSettings":
        """settings行（key → value）と環境変数から組み立てる。DBの値を優先する"""
        key_id = values.get('razorpay_key_id') or env.razorpay_key_id
        key_secret = values.get('razorpay_key_secret') or env.razorpay_key_secret
        timeout = values.get('razorpay_timeout')
        return cls(
            enabled=_as_bool(values.get('razorpay_enabled'), bool(key_id and key_secret)),
            environment=values.get('razorpay_environment') or "test",
            key_id=key_id,
            key_secret=key_secret,
            webhook_secret=values.get('razorpay_webhook_secret') or env.razorpay_webhook_secret,
            auto_capture=_as_bool(values.get('razorpay_auto_capture'), True),
            company_name=values.get('razorpay_company_name') or "Nirchal",
            company_logo=values.get('razorpay_company_logo') or None,
            theme_color=values.get('razorpay_theme_color') or "#f59e0b",
            description=values.get('razorpay_description') or "Payment for Nirchal order",
            timeout=int(timeout) if timeout and str(timeout).isdigit() else 900,
        )
