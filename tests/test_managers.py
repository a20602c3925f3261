from datetime import date

import pytest

from conftest import FakeClient
from dairyflow.managers import (
    DeliveryOrderManager,
    LoadingOrderManager,
    PricePlanManager,
    ProductManager,
    PurchaseOrderManager,
    ReportManager,
    RouteManager,
    SalesOrderManager,
    SellerManager,
    UserManager,
)


def test_resource_crud_paths():
    client = FakeClient({"routes/": {"results": [{"id": 1, "name": "North"}], "count": 1}})
    routes = RouteManager(client)

    assert routes.get_all() == [{"id": 1, "name": "North"}]
    routes.save({"name": "South"})
    routes.save({"name": "East"}, record_id=4)
    assert routes.delete(4) is True

    assert client.calls == [
        ("GET", "routes/", None),
        ("POST", "routes/", {"name": "South"}),
        ("PUT", "routes/4/", {"name": "East"}),
        ("DELETE", "routes/4/", None),
    ]


def test_product_payload_carries_category_name():
    payload = ProductManager.build_payload(
        " MLK1 ", "Milk ", 2, [{"id": 2, "name": "Dairy"}], True, " 500ml", True
    )
    assert payload == {
        "code": "MLK1",
        "name": "Milk",
        "category": 2,
        "category_name": "Dairy",
        "is_liquid": True,
        "unit_size": "500ml",
        "is_active": True,
    }


def test_seller_page_and_payload():
    client = FakeClient({"sellers/": {"results": [{"id": 1}], "count": 21, "next": "p2", "previous": None}})
    page = SellerManager(client).get_page(2)
    assert client.calls == [("GET", "sellers/", {"page": 2})]
    assert page["count"] == 21
    assert page["next"] == "p2"

    payload = SellerManager.build_payload({"store_name": "Metro", "route": 3}, [{"id": 3, "name": "North"}])
    assert payload["route_name"] == "North"
    assert payload["lat"] is None and payload["lan"] is None


def test_user_update_only_sends_password_when_given():
    client = FakeClient()
    users = UserManager(client)
    users.update_user(5, "Asha", "Rao", "sales")
    users.update_user(5, "Asha", "Rao", "sales", password="secret")
    assert "password" not in client.calls[0][2]
    assert client.calls[1][2]["password"] == "secret"


@pytest.mark.parametrize("payload", [
    {"id": 1, "is_general": True, "product_prices": [{"product": 1, "price": "28.00"}]},
    [{"id": 1, "is_general": True, "product_prices": [{"product": 1, "price": "28.00"}]}],
])
def test_general_prices_accepts_bare_or_listed_plan(payload):
    client = FakeClient({"price-plans/": payload})
    assert PricePlanManager(client).get_general_prices() == [{"product": 1, "price": "28.00"}]
    assert client.calls[0][2] == {"is_general": "true"}


def test_general_prices_empty():
    assert PricePlanManager(FakeClient({"price-plans/": []})).get_general_prices() == []


def test_price_plan_upload():
    client = FakeClient({("UPLOAD", "price-plans/upload/"): {"updated": 3}})
    assert PricePlanManager(client).upload_sheet("plan.xlsx", b"data") == {"updated": 3}
    assert client.calls[0][2][0] == "plan.xlsx"


def test_order_search_params():
    client = FakeClient({"orders/sales/": []})
    SalesOrderManager(client).search("route_name", " North ")
    SalesOrderManager(client).search("delivery_date", "")
    assert client.calls[0][2] == {"route_name": "North"}
    assert client.calls[1][2] is None

    with pytest.raises(ValueError):
        LoadingOrderManager(client).search("delivery_date", "2024-05-01")
    with pytest.raises(ValueError):
        DeliveryOrderManager(client).search("loading_date", "2024-05-01")


def test_sales_report_filters_use_date_range():
    client = FakeClient({"orders/sales/": []})
    SalesOrderManager(client).filter(from_date=date(2024, 5, 1), to_date=None, route=3, seller="Metro", status="")
    params = client.calls[0][2]
    assert params["delivery_date__gte"] == "2024-05-01"
    assert params["delivery_date__lte"] is None
    assert params["route"] == 3
    assert params["seller_store"] == "Metro"


def test_create_sales_order_sends_only_positive_lines():
    client = FakeClient()
    items = [
        {"product": 1, "product_name": "Milk", "quantity": "4", "unit_price": "28.00"},
        {"product": 2, "product_name": "Curd", "quantity": "", "unit_price": "40.00"},
    ]
    SalesOrderManager(client).create_order(9, date(2024, 5, 1), items)
    method, path, payload = client.calls[0]
    assert (method, path) == ("POST", "orders/sales/")
    assert payload == {
        "seller": 9,
        "delivery_date": "2024-05-01",
        "status": "draft",
        "items": [{"product": 1, "quantity": "4", "unit_price": "28.00"}],
    }


def test_sales_order_needs_a_quantity():
    with pytest.raises(ValueError):
        SalesOrderManager(FakeClient()).create_order(9, "2024-05-01", [{"product": 1, "quantity": "0"}])


def test_update_sales_order_status():
    client = FakeClient()
    order = {"id": 11, "order_number": "SO-11", "seller": 9, "delivery_date": "2024-05-01"}
    items = [{"id": 1, "product": 1, "product_name": "Milk", "quantity": "2", "unit_price": "28.00"}]
    SalesOrderManager(client).update_order(order, items, "confirmed")
    method, path, payload = client.calls[0]
    assert (method, path) == ("PUT", "orders/sales/11/")
    assert payload["status"] == "confirmed"
    assert payload["items"][0]["id"] == 1


def test_purchase_order_helpers_hit_host_root_endpoints():
    client = FakeClient({
        "/delivery-get-route-sales-summary/": {"items": [{"product_id": 1, "sales_quantity": "3.000"}]},
    })
    purchases = PurchaseOrderManager(client)
    assert purchases.check_existing(1, date(2024, 5, 1), 2) == {"exists": False}
    assert purchases.get_route_sales_summary(1, "2024-05-01") == [{"product_id": 1, "sales_quantity": "3.000"}]
    assert client.calls[0][2] == {"route": 1, "delivery_date": "2024-05-01", "team": 2}


def test_purchase_order_payload():
    items = [{
        "product_id": 1,
        "product_name": "Milk",
        "sales_quantity": "3.000",
        "extra_quantity": "1",
        "remaining_quantity": "0.000",
        "total_quantity": "4.000",
    }]
    payload = PurchaseOrderManager.build_payload("2", "5", date(2024, 5, 1), " early ", items)
    assert payload["route"] == 2
    assert payload["delivery_team"] == 5
    assert payload["notes"] == "early"
    assert payload["items"] == items


@pytest.mark.parametrize("route_id,team_id,notes,items", [
    (None, 5, "n", [{}]),
    (2, None, "n", [{}]),
    (2, 5, "  ", [{}]),
    (2, 5, "n", []),
])
def test_purchase_order_payload_requires_fields(route_id, team_id, notes, items):
    with pytest.raises(ValueError, match="required fields"):
        PurchaseOrderManager.build_payload(route_id, team_id, "2024-05-01", notes, items)


def test_period_reports():
    client = FakeClient({"admin/top-sellers/": {"period": "month", "sellers": []}})
    reports = ReportManager(client)
    assert reports.top_sellers("month") == {"period": "month", "sellers": []}
    assert reports.balance_aging() == {}
    assert client.calls[0] == ("GET", "admin/top-sellers/", {"period": "month"})
    with pytest.raises(ValueError):
        reports.route_performance("year")


def test_heatmap_and_delivery_report_params():
    client = FakeClient()
    reports = ReportManager(client)
    reports.order_status_heatmap(date(2024, 5, 1))
    reports.delivery_report(3, date(2024, 5, 2))
    assert client.calls == [
        ("GET", "admin/order-status-heatmap/", {"date": "2024-05-01"}),
        ("GET", "delivery-reports/", {"delivery_date": "2024-05-02", "route": 3}),
    ]


USER_FORM = {
    "username": " asha ",
    "first_name": "Asha",
    "last_name": "Rao",
    "email": "asha@example.com",
    "role": "sales",
    "password": " pass word ",
    "mobile_number": "9876543210",
}


def test_user_payload_strips_everything_but_password():
    payload = UserManager.build_payload(USER_FORM)
    assert payload["username"] == "asha"
    assert payload["password"] == " pass word "


@pytest.mark.parametrize("field", ["last_name", "mobile_number", "password"])
def test_user_payload_requires_every_field(field):
    form = dict(USER_FORM, **{field: "   "})
    with pytest.raises(ValueError, match=field):
        UserManager.build_payload(form)


def test_general_plan_returned_whole():
    plan = {"id": 1, "is_general": True, "product_prices": []}
    assert PricePlanManager(FakeClient({"price-plans/": [plan]})).get_general_plan() == plan
    assert PricePlanManager(FakeClient({"price-plans/": []})).get_general_plan() == {}
