from typing import Dict
import logging

from managers.data_service import DataServiceManager
from models.settings import PaymentSettings, PAYMENT_SETTING_KEYS
from utils.errors import InternalError
from utils.settings import get_settings

logger = logging.getLogger(__name__)


def get_settings_by_category(category: str, keys=None) -> Dict[str, str]:
    """settingsテーブルから key → value の辞書を取得する"""
    manager = DataServiceManager()
    rows = manager.select(
        "settings",
        "key, value",
        filters={"category": category},
        in_filters={"key": keys} if keys else None,
    )
    return {row["key"]: row["value"] for row in rows if row.get("key")}


def load_payment_settings() -> PaymentSettings:
    try:
        values = get_settings_by_category("payment", PAYMENT_SETTING_KEYS)
    except InternalError as e:
        logger.error("Failed to load payment settings: %s", e.detail)
        raise InternalError("Failed to load payment settings", detail=e.detail) from e
    return PaymentSettings.from_rows(values, get_settings())
