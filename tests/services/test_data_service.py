import pytest
from unittest.mock import MagicMock, patch
from postgrest.exceptions import APIError

from managers.data_service import DataServiceManager, translate_api_error
from models.order import Order
from utils.errors import ConfigurationError, ConstraintViolation, DataServiceError


@pytest.fixture
def manager():
    DataServiceManager.reset()
    with patch("managers.data_service.create_client") as mock_create:
        mock_create.return_value = MagicMock()
        yield DataServiceManager()
    DataServiceManager.reset()


class TestTranslateApiError:
    """postgrestエラー変換のテスト"""

    @pytest.mark.parametrize("code", ["23505", "23502", "23514", "23503", "22P02"])
    def test_constraint_codes(self, code):
        error = translate_api_error(APIError({"message": "violation", "code": code}), "insert customers")

        assert isinstance(error, ConstraintViolation)
        assert error.code == code

    def test_other_codes_are_data_service_errors(self):
        error = translate_api_error(APIError({"message": "permission denied", "code": "42501"}), "select orders")

        assert isinstance(error, DataServiceError)
        assert "permission denied" in error.detail


class TestDataServiceManager:
    """データサービスクライアントのテスト"""

    def test_missing_configuration_is_fatal(self, monkeypatch):
        DataServiceManager.reset()
        monkeypatch.delenv("SUPABASE_URL")

        with pytest.raises(ConfigurationError):
            DataServiceManager()

    def test_is_singleton(self, manager):
        assert DataServiceManager() is manager

    def test_select_builds_query(self, manager):
        query = manager.client.table.return_value.select.return_value
        query.eq.return_value = query
        query.in_.return_value = query
        query.limit.return_value = query
        query.execute.return_value = MagicMock(data=[{"key": "razorpay_enabled", "value": "true"}])

        rows = manager.select("settings", "key, value", filters={"category": "payment"}, in_filters={"key": ["razorpay_enabled"]}, limit=5)

        manager.client.table.assert_called_with("settings")
        query.eq.assert_called_once_with("category", "payment")
        query.in_.assert_called_once_with("key", ["razorpay_enabled"])
        query.limit.assert_called_once_with(5)
        assert rows == [{"key": "razorpay_enabled", "value": "true"}]

    def test_unique_violation_on_insert(self, manager):
        manager.client.table.return_value.insert.return_value.execute.side_effect = APIError({"message": "duplicate key", "code": "23505"})

        with pytest.raises(ConstraintViolation) as excinfo:
            manager.insert("customers", {"email": "asha@example.com"})

        assert excinfo.value.is_unique_violation

    def test_update_requires_filter(self, manager):
        with pytest.raises(DataServiceError):
            manager.update("orders", {"payment_status": "paid"}, {})

    def test_execute_sql_goes_through_exec_sql(self, manager):
        manager.client.rpc.return_value.execute.return_value = MagicMock(data=None)

        manager.execute_sql("select 1")

        manager.client.rpc.assert_called_once_with("exec_sql", {"sql": "select 1"})

    def test_transport_error_is_data_service_error(self, manager):
        manager.client.rpc.return_value.execute.side_effect = RuntimeError("connection refused")

        with pytest.raises(DataServiceError):
            manager.rpc("create_checkout_customer", {"p_email": "asha@example.com"})


class TestOrderRows:
    """ordersの行の読み取りのテスト"""

    @pytest.mark.parametrize("status,paid", [("paid", True), ("completed", True), ("pending", False), ("refunded", False), ("on_hold", False)])
    def test_status_is_free_text(self, status, paid):
        order = Order.from_row({"id": "ord-1", "payment_status": status})

        assert order.payment_status == status
        assert order.is_paid is paid

    def test_unreadable_row_is_data_service_error(self):
        with pytest.raises(DataServiceError):
            Order.from_row({"id": "ord-1", "created_at": "not-a-date"})
