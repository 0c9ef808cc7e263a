import copy
import uuid
import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch

from api import app
from managers.data_service import DataServiceManager
from managers.image_store import InMemoryImageStore, get_image_store
from models.payment import PaymentOrder
from models.refund import Refund
from utils.errors import ConstraintViolation, DataServiceError


class FakeDataService:
    """DataServiceManagerと同じ操作を持つインメモリ実装

    customers.email の一意制約と create_checkout_customer プロシージャを再現する。
    """

    def __init__(self):
        self.tables = {}
        self.executed_sql = []
        self.failing_sql = []
        self.rpc_calls = []
        self.rpc_errors = []

    def rows(self, table):
        return self.tables.setdefault(table, [])

    def seed(self, table, *rows):
        for row in rows:
            self.rows(table).append(dict(row))

    def _matches(self, row, filters, in_filters, exclude):
        for column, value in (filters or {}).items():
            if row.get(column) != value:
                return False
        for column, values in (in_filters or {}).items():
            if row.get(column) not in list(values):
                return False
        for column, value in (exclude or {}).items():
            if row.get(column) == value:
                return False
        return True

    def select(self, table, columns="*", filters=None, in_filters=None, exclude=None, order_by=None, descending=False, limit=None):
        found = [copy.deepcopy(r) for r in self.rows(table) if self._matches(r, filters, in_filters, exclude)]
        if order_by:
            found.sort(key=lambda r: r.get(order_by), reverse=descending)
        if limit is not None:
            found = found[:limit]
        return found

    def select_one(self, table, filters, columns="*", exclude=None):
        rows = self.select(table, columns, filters=filters, exclude=exclude, limit=1)
        return rows[0] if rows else None

    def insert(self, table, rows):
        rows = rows if isinstance(rows, list) else [rows]
        inserted = []
        for row in rows:
            row = dict(row)
            row.setdefault("id", str(uuid.uuid4()))
            if table == "customers" and any(r["email"] == row["email"] for r in self.rows(table)):
                raise ConstraintViolation(detail="duplicate key value violates unique constraint", code="23505")
            self.rows(table).append(row)
            inserted.append(copy.deepcopy(row))
        return inserted

    def update(self, table, values, filters):
        updated = []
        for row in self.rows(table):
            if self._matches(row, filters, None, None):
                row.update(values)
                updated.append(copy.deepcopy(row))
        return updated

    def rpc(self, function_name, params=None):
        self.rpc_calls.append((function_name, params))
        if self.rpc_errors:
            raise self.rpc_errors.pop(0)
        if function_name == "create_checkout_customer":
            return self._create_checkout_customer(**params)
        if function_name == "exec_sql":
            return self.execute_sql(params["sql"])
        raise DataServiceError(detail=f"unknown function {function_name}")

    def execute_sql(self, sql):
        if any(marker in sql for marker in self.failing_sql):
            raise DataServiceError(detail=f"syntax error near '{sql[:20]}'")
        self.executed_sql.append(sql)
        return None

    def _create_checkout_customer(self, p_email, p_first_name="", p_last_name="", p_phone=""):
        for row in self.rows("customers"):
            if row["email"] == p_email:
                for column, value in (("first_name", p_first_name), ("last_name", p_last_name), ("phone", p_phone)):
                    if value:
                        row[column] = value
                return row["id"]
        inserted = self.insert("customers", {
            "email": p_email,
            "first_name": p_first_name or None,
            "last_name": p_last_name or None,
            "phone": p_phone or None,
        })
        return inserted[0]["id"]


PAYMENT_SETTING_ROWS = [
    {"category": "payment", "key": "razorpay_enabled", "value": "true"},
    {"category": "payment", "key": "razorpay_environment", "value": "test"},
    {"category": "payment", "key": "razorpay_key_id", "value": "rzp_test_key"},
    {"category": "payment", "key": "razorpay_key_secret", "value": "secret"},
    {"category": "payment", "key": "razorpay_company_name", "value": "Nirchal"},
    {"category": "payment", "key": "razorpay_theme_color", "value": "#f59e0b"},
    {"category": "payment", "key": "razorpay_webhook_secret", "value": "whsec"},
]


@pytest.fixture(autouse=True)
def env(monkeypatch):
    """外部サービスの接続情報はテスト用の値にする"""
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
    for name in ("RAZORPAY_KEY_ID", "RAZORPAY_KEY_SECRET", "RAZORPAY_WEBHOOK_SECRET", "SENDER_ADDRESS", "RECIPIENTS_ADDRESS", "EMAIL_CONNECTION_STRING"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def data_service():
    fake = FakeDataService()
    fake.seed("settings", *PAYMENT_SETTING_ROWS)
    with patch.object(DataServiceManager, "_instance", fake):
        yield fake


def make_payment_order(amount=49900, currency="INR", receipt="rcpt_1001"):
    return PaymentOrder(
        id="order_TEST123",
        entity="order",
        amount=amount,
        amount_due=amount,
        currency=currency,
        receipt=receipt,
        status="created",
        created_at=1700000000,
    )


def make_refund(payment_id="pay_1", amount=49900, refund_id="rfnd_TEST1", status="pending"):
    return Refund(
        id=refund_id,
        amount=amount,
        currency="INR",
        payment_id=payment_id,
        status=status,
        created_at=1700000100,
    )


@pytest.fixture
def gateway():
    """決済ゲートウェイのモック"""
    mock = MagicMock()
    mock.key_id = "rzp_test_key"
    mock.create_order.side_effect = lambda amount, currency, receipt, notes=None, payment_capture=True: make_payment_order(amount, currency, receipt)
    mock.verify_payment_signature.return_value = True
    mock.verify_webhook_signature.return_value = True
    mock.fetch_payment.return_value = {"id": "pay_1", "amount": 49900, "currency": "INR", "email": "asha@example.com", "status": "captured"}
    mock.create_refund.side_effect = lambda payment_id, amount, speed="normal", notes=None, receipt=None: make_refund(payment_id, amount)
    mock.fetch_refund.side_effect = lambda payment_id, refund_id: make_refund(payment_id, 49900, refund_id=refund_id, status="processed")
    with patch("managers.payment_gateway.get_payment_gateway", return_value=mock):
        yield mock


@pytest.fixture
def image_store():
    return InMemoryImageStore()


@pytest.fixture
def client(image_store):
    """FastAPIテストクライアント"""
    app.dependency_overrides[get_image_store] = lambda: image_store
    yield TestClient(app)
    app.dependency_overrides.clear()
