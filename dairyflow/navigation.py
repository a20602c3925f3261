from collections import namedtuple

from .auth import ADMIN, DELIVERY, SALES, can_access
from .screens import masters, orders, reports, users

Page = namedtuple("Page", "key label icon roles group screen")

PAGES = [
    Page("dashboard", "Dashboard", "🏠", (), "Overview", reports.dashboard_screen),
    Page("routes", "Routes", "🗺️", (ADMIN,), "Master Data", masters.routes_screen),
    Page("categories", "Categories", "📂", (ADMIN,), "Master Data", masters.categories_screen),
    Page("products", "Products", "📦", (ADMIN,), "Master Data", masters.products_screen),
    Page("sellers", "Sellers", "🏪", (ADMIN,), "Master Data", masters.sellers_screen),
    Page("price_plans", "Price Plans", "🏷️", (ADMIN,), "Master Data", masters.price_plans_screen),
    Page("distributors", "Distributors", "🚚", (ADMIN,), "Master Data", masters.distributors_screen),
    Page("delivery_teams", "Delivery Teams", "👷", (ADMIN,), "Master Data", masters.delivery_teams_screen),
    Page("users", "Users", "👥", (ADMIN,), "Master Data", users.users_screen),
    Page("sales_dashboard", "Sales Dashboard", "🛒", (ADMIN, SALES), "Orders", orders.sales_dashboard_screen),
    Page("sales_orders", "Sales Orders", "🧾", (ADMIN, SALES), "Orders", orders.sales_orders_screen),
    Page("create_purchase_order", "New Purchase Order", "📝", (ADMIN,), "Orders",
         orders.create_purchase_order_screen),
    Page("purchase_orders", "Purchase Orders", "📦", (ADMIN, DELIVERY), "Orders", orders.purchase_orders_screen),
    Page("loading_orders", "Loading Orders", "🚛", (ADMIN, DELIVERY), "Orders", orders.loading_orders_screen),
    Page("delivery_orders", "Delivery Orders", "🚚", (ADMIN, DELIVERY), "Orders", orders.delivery_orders_screen),
    Page("sales_report", "Sales Report", "📊", (ADMIN, SALES), "Reports", reports.sales_report_screen),
    Page("delivery_summary", "Delivery Summary", "📋", (ADMIN,), "Reports",
         reports.delivery_summary_report_screen),
]

PAGES_BY_KEY = {page.key: page for page in PAGES}

GROUPS = ("Overview", "Master Data", "Orders", "Reports")


def get_page(key):
    return PAGES_BY_KEY.get(key)


def visible_pages(state=None):
    """Pages the current user may open, grouped in sidebar order."""
    grouped = {}
    for page in PAGES:
        if can_access(page.roles, state):
            grouped.setdefault(page.group, []).append(page)
    return [(group, grouped[group]) for group in GROUPS if group in grouped]
