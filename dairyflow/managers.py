from datetime import date

from .api import results
from .helpers import build_search_params, positive_lines

# ============================================
# MASTER DATA
# ============================================

class ResourceManager:
    path = ""

    def __init__(self, client):
        self.client = client

    def detail_path(self, record_id):
        return f"{self.path}{record_id}/"

    def get_all(self, **params):
        return results(self.client.get(self.path, params or None))

    def get(self, record_id):
        return self.client.get(self.detail_path(record_id))

    def create(self, payload):
        return self.client.post(self.path, payload)

    def update(self, record_id, payload):
        return self.client.put(self.detail_path(record_id), payload)

    def delete(self, record_id):
        self.client.delete(self.detail_path(record_id))
        return True

    def save(self, payload, record_id=None):
        if record_id is None:
            return self.create(payload)
        return self.update(record_id, payload)


class RouteManager(ResourceManager):
    path = "routes/"


class CategoryManager(ResourceManager):
    path = "categories/"


class DistributorManager(ResourceManager):
    path = "distributors/"


class DeliveryTeamManager(ResourceManager):
    path = "delivery-teams/"


class ProductManager(ResourceManager):
    path = "products/"

    @staticmethod
    def build_payload(code, name, category, categories, is_liquid, unit_size, is_active):
        selected = next((c for c in categories if c["id"] == category), None)
        return {
            "code": code.strip(),
            "name": name.strip(),
            "category": category,
            "category_name": selected["name"] if selected else "",
            "is_liquid": is_liquid,
            "unit_size": unit_size.strip(),
            "is_active": is_active,
        }


class SellerManager(ResourceManager):
    path = "sellers/"

    def get_page(self, page=1):
        data = self.client.get(self.path, {"page": page})
        if isinstance(data, list):
            return {"results": data, "count": len(data), "next": None, "previous": None}
        return {
            "results": data.get("results") or [],
            "count": data.get("count", 0),
            "next": data.get("next"),
            "previous": data.get("previous"),
        }

    def get_by_route(self, route_id):
        return self.get_all(route=route_id)

    @staticmethod
    def build_payload(form, routes):
        route_id = form["route"]
        selected = next((r for r in routes if r["id"] == route_id), None)
        payload = dict(form)
        payload.update(
            route=route_id,
            route_name=selected["name"] if selected else "",
            lat=None,
            lan=None,
        )
        return payload


class UserManager(ResourceManager):
    path = "users/"

    REQUIRED_FIELDS = ("username", "first_name", "last_name", "email", "role", "password", "mobile_number")

    @classmethod
    def build_payload(cls, form):
        payload = {k: v.strip() if isinstance(v, str) and k != "password" else v for k, v in form.items()}
        missing = [f for f in cls.REQUIRED_FIELDS if not str(payload.get(f) or "").strip()]
        if missing:
            raise ValueError(f"Please fill all required fields: {', '.join(missing)}")
        return payload

    def get_roles(self):
        return results(self.client.get("users/roles/"))

    def update_user(self, user_id, first_name, last_name, role, password=""):
        payload = {"first_name": first_name, "last_name": last_name, "role": role}
        if password:
            payload["password"] = password
        return self.update(user_id, payload)


class PricePlanManager(ResourceManager):
    path = "price-plans/"

    def get_general_plan(self):
        data = self.client.get(self.path, {"is_general": "true"})
        # the general plan comes back either bare or as a one element list
        if isinstance(data, dict) and "product_prices" in data:
            return data
        plans = results(data)
        return plans[0] if plans else {}

    def get_general_prices(self):
        return self.get_general_plan().get("product_prices") or []

    def get_seller_plans(self):
        return [p for p in self.get_all() if not p.get("is_general")]

    def upload_sheet(self, file_name, data):
        return self.client.upload(
            f"{self.path}upload/",
            file_name,
            data,
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

# ============================================
# ORDERS
# ============================================

SALES_SEARCH_TYPES = ("route_name", "route", "seller_store", "delivery_date")
LOADING_SEARCH_TYPES = ("route_name", "loading_date")
DELIVERY_SEARCH_TYPES = ("route_name", "delivery_date", "seller_store_name")


class SalesOrderManager(ResourceManager):
    path = "orders/sales/"

    def search(self, search_type="route_name", term=""):
        return self.get_all(**build_search_params(search_type, term, SALES_SEARCH_TYPES))

    def get_for_route(self, route_id, delivery_date):
        return self.get_all(route=route_id, delivery_date=_iso(delivery_date))

    def get_for_seller(self, seller_id):
        return self.get_all(seller_id=seller_id)

    def filter(self, from_date=None, to_date=None, route=None, seller=None, status=None):
        return self.get_all(
            delivery_date__gte=_iso(from_date),
            delivery_date__lte=_iso(to_date),
            route=route,
            seller_store=seller,
            status=status,
        )

    def create_order(self, seller_id, delivery_date, items):
        lines = positive_lines(items, keep=("product", "quantity", "unit_price"))
        if not lines:
            raise ValueError("Please enter at least one product quantity.")
        return self.create({
            "seller": seller_id,
            "delivery_date": _iso(delivery_date),
            "status": "draft",
            "items": lines,
        })

    def update_order(self, order, items, status):
        lines = positive_lines(items)
        if not lines:
            raise ValueError("Please enter at least one product quantity.")
        return self.update(order["id"], {
            "id": order["id"],
            "order_number": order.get("order_number"),
            "seller": order.get("seller"),
            "seller_name": order.get("seller_name"),
            "delivery_date": order.get("delivery_date"),
            "total_amount": order.get("total_amount"),
            "status": status,
            "items": lines,
        })


class PurchaseOrderManager(ResourceManager):
    path = "orders/purchase/"

    def check_existing(self, route_id, delivery_date, team_id):
        data = self.client.get(
            "/delivery-check-existing-purchase-order/",
            {"route": route_id, "delivery_date": _iso(delivery_date), "team": team_id},
        )
        return data or {"exists": False}

    def get_route_sales_summary(self, route_id, delivery_date):
        data = self.client.get(
            "/delivery-get-route-sales-summary/",
            {"route": route_id, "delivery_date": _iso(delivery_date)},
        )
        return (data or {}).get("items") or []

    @staticmethod
    def build_payload(route_id, team_id, delivery_date, notes, items):
        missing = not (route_id and team_id and delivery_date and notes and notes.strip() and items)
        if missing:
            raise ValueError("Please fill all required fields and add at least one item.")
        return {
            "route": int(route_id),
            "delivery_team": int(team_id),
            "delivery_date": _iso(delivery_date),
            "notes": notes.strip(),
            "items": [
                {
                    "product_id": item["product_id"],
                    "product_name": item["product_name"],
                    "sales_quantity": item["sales_quantity"],
                    "extra_quantity": item["extra_quantity"],
                    "remaining_quantity": item["remaining_quantity"],
                    "total_quantity": item["total_quantity"],
                }
                for item in items
            ],
        }


class LoadingOrderManager(ResourceManager):
    path = "orders/loading/"

    def search(self, search_type="route_name", term=""):
        return self.get_all(**build_search_params(search_type, term, LOADING_SEARCH_TYPES))


class DeliveryOrderManager(ResourceManager):
    path = "orders/delivery/"

    def search(self, search_type="route_name", term=""):
        return self.get_all(**build_search_params(search_type, term, DELIVERY_SEARCH_TYPES))

# ============================================
# REPORTS
# ============================================

PERIODS = ("week", "month")


class ReportManager:
    def __init__(self, client):
        self.client = client

    def _period_report(self, name, period):
        if period not in PERIODS:
            raise ValueError(f"Unsupported period: {period}")
        return self.client.get(f"admin/{name}/", {"period": period}) or {}

    def balance_aging(self, period="week"):
        return self._period_report("balance-aging", period)

    def route_performance(self, period="week"):
        return self._period_report("route-performance", period)

    def top_sellers(self, period="week"):
        return self._period_report("top-sellers", period)

    def product_movement(self, period="week"):
        return self._period_report("product-movement", period)

    def order_status_heatmap(self, day=None):
        return self.client.get("admin/order-status-heatmap/", {"date": _iso(day or date.today())}) or {}

    def delivery_report(self, route_id, delivery_date):
        return self.client.get(
            "delivery-reports/",
            {"delivery_date": _iso(delivery_date), "route": route_id},
        ) or {}


def _iso(value):
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
