import logging
import pytest
from unittest.mock import patch

from utils.errors import DataServiceError, GatewayError


def checkout_payload(**overrides):
    payload = {
        "amount": 49900,
        "currency": "INR",
        "receipt": "rcpt_1001",
        "customer_email": "Asha@example.com",
        "customer_phone": "+919876543210",
        "customer_first_name": "Asha",
        "customer_last_name": "Rao",
    }
    payload.update(overrides)
    return payload


class TestCreateRazorpayOrder:
    """チェックアウト注文作成APIのテスト"""

    def test_valid_request_returns_checkout_config(self, client, data_service, gateway):
        response = client.post("/create-razorpay-order", json=checkout_payload())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["order"]["id"] == "order_TEST123"
        assert body["order"]["receipt"] == "rcpt_1001"
        config = body["checkout_config"]
        assert config["amount"] == 49900
        assert config["currency"] == "INR"
        assert config["key"] == "rzp_test_key"
        assert config["order_id"] == "order_TEST123"
        assert config["name"] == "Nirchal"
        assert config["prefill"] == {"email": "Asha@example.com", "contact": "+919876543210"}
        assert config["theme"] == {"color": "#f59e0b"}

    def test_amount_is_forwarded_in_minor_units(self, client, data_service, gateway):
        client.post("/create-razorpay-order", json=checkout_payload(amount=1250, notes={"cart": "c-1"}))

        gateway.create_order.assert_called_once_with(
            amount=1250,
            currency="INR",
            receipt="rcpt_1001",
            notes={"cart": "c-1"},
            payment_capture=True,
        )

    @pytest.mark.parametrize("amount,currency", [(1, "INR"), (99999, "usd"), (500, "Eur")])
    def test_amount_and_currency_echo_input(self, client, data_service, gateway, amount, currency):
        response = client.post("/create-razorpay-order", json=checkout_payload(amount=amount, currency=currency))

        assert response.status_code == 200
        config = response.json()["checkout_config"]
        assert config["amount"] == amount
        assert config["currency"] == currency.upper()

    def test_customer_is_upserted(self, client, data_service, gateway):
        response = client.post("/create-razorpay-order", json=checkout_payload())

        customers = data_service.rows("customers")
        assert len(customers) == 1
        assert customers[0]["email"] == "asha@example.com"
        assert response.json()["customer_id"] == customers[0]["id"]

    def test_null_email_is_rejected(self, client, data_service, gateway):
        response = client.post("/create-razorpay-order", json=checkout_payload(customer_email=None))

        assert response.status_code == 400
        assert "customer_email" in response.json()["error"]
        assert data_service.rows("customers") == []
        gateway.create_order.assert_not_called()

    @pytest.mark.parametrize("missing", ["amount", "currency", "receipt", "customer_email"])
    def test_missing_field_is_rejected_without_gateway_call(self, client, data_service, gateway, missing):
        payload = checkout_payload()
        del payload[missing]

        response = client.post("/create-razorpay-order", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert missing in body["error"]
        gateway.create_order.assert_not_called()

    @pytest.mark.parametrize("overrides", [
        {"amount": 0},
        {"amount": -100},
        {"amount": "100"},
        {"currency": "XYZ"},
        {"currency": ""},
        {"receipt": "   "},
        {"receipt": "r" * 41},
        {"customer_email": "not-an-email"},
    ])
    def test_invalid_field_is_rejected_without_gateway_call(self, client, data_service, gateway, overrides):
        response = client.post("/create-razorpay-order", json=checkout_payload(**overrides))

        assert response.status_code == 400
        assert response.json()["success"] is False
        gateway.create_order.assert_not_called()

    def test_gateway_failure_returns_opaque_error(self, client, data_service, gateway):
        gateway.create_order.side_effect = GatewayError("Payment gateway unavailable", detail="order.create failed: 503 upstream trace id=abc")

        response = client.post("/create-razorpay-order", json=checkout_payload())

        assert response.status_code == 502
        assert response.json() == {"success": False, "error": "Payment gateway unavailable"}
        assert "upstream" not in response.text

    def test_customer_upsert_failure_does_not_block_checkout(self, client, data_service, gateway, caplog):
        with patch("repository.customer.upsert_customer", side_effect=DataServiceError(detail="rpc create_checkout_customer failed: timeout")):
            with caplog.at_level(logging.WARNING, logger="services.checkout"):
                response = client.post("/create-razorpay-order", json=checkout_payload())

        assert response.status_code == 200
        assert response.json()["customer_id"] is None
        assert "Customer upsert failed" in caplog.text

    def test_disabled_gateway_is_rejected(self, client, data_service, gateway):
        data_service.update("settings", {"value": "false"}, {"key": "razorpay_enabled"})

        response = client.post("/create-razorpay-order", json=checkout_payload())

        assert response.status_code == 400
        assert response.json()["error"] == "Payment gateway is disabled"
        gateway.create_order.assert_not_called()

    def test_settings_failure_returns_500(self, client, data_service, gateway):
        with patch.object(data_service, "select", side_effect=DataServiceError(detail="select settings failed")):
            response = client.post("/create-razorpay-order", json=checkout_payload())

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to load payment settings"}
