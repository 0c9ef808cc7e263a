from typing import Optional
from email_validator import validate_email, EmailNotValidError
import logging

from managers.data_service import DataServiceManager
from models.customer import Customer, CustomerContact
from utils.errors import ConstraintViolation, DataServiceError

logger = logging.getLogger(__name__)

UPSERT_FUNCTION = "create_checkout_customer"


def normalize_email(email: str) -> str:
    """照合キーとしてのメールアドレスを正規化する。不正な形式ならConstraintViolation"""
    candidate = (email or "").strip().lower()
    try:
        validate_email(candidate, check_deliverability=False)
    except EmailNotValidError as e:
        raise ConstraintViolation("Invalid email address", detail=f"malformed email: {str(e)}") from e
    return candidate


def get_customer_by_email(email: str) -> Optional[Customer]:
    manager = DataServiceManager()
    row = manager.select_one("customers", filters={"email": normalize_email(email)})
    return Customer.from_row(row) if row else None


def upsert_customer(contact: CustomerContact) -> str:
    """メールアドレスをキーに顧客を作成または更新し、顧客IDを返す

    処理本体はストアドプロシージャ create_checkout_customer。
    同じ新規メールアドレスで同時に挿入された場合は一意制約違反になるので、
    その場合はプロシージャを一度だけ呼び直す（2回目は既存行の更新になり、
    この呼び出しの氏名・電話番号も反映される）。
    """
    contact = contact.model_copy(update={"email": normalize_email(contact.email)})
    manager = DataServiceManager()

    try:
        customer_id = manager.rpc(UPSERT_FUNCTION, contact.to_rpc_params())
    except ConstraintViolation as e:
        if not e.is_unique_violation:
            raise
        logger.info("Concurrent customer insert detected; retrying upsert once")
        customer_id = manager.rpc(UPSERT_FUNCTION, contact.to_rpc_params())

    if customer_id is None:
        raise DataServiceError(detail=f"{UPSERT_FUNCTION} returned no id")
    return str(customer_id)
