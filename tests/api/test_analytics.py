class TestAnalyticsViews:
    """分析ビュー取得APIのテスト"""

    def test_recent_orders(self, client, data_service):
        data_service.seed("recent_orders_view", *[{"order_number": f"NIR-{i}"} for i in range(5)])

        response = client.get("/admin/analytics/recent-orders", params={"limit": 3})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert [row["order_number"] for row in response.json()["data"]] == ["NIR-0", "NIR-1", "NIR-2"]

    def test_top_products(self, client, data_service):
        data_service.seed("top_products_view", {"product_name": "Silk Saree", "units_sold": 12})

        response = client.get("/admin/analytics/top-products")

        assert response.status_code == 200
        assert response.json()["data"] == [{"product_name": "Silk Saree", "units_sold": 12}]

    def test_limit_is_bounded(self, client, data_service):
        response = client.get("/admin/analytics/top-products", params={"limit": 1000})

        assert response.status_code == 400
