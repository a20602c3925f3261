from datetime import date

import pandas as pd
import streamlit as st

from ..api import ApiError
from ..auth import ADMIN, DELIVERY, SALES, has_role
from ..helpers import (
    MISSING,
    format_money,
    heatmap_frame,
    pivot_breakdowns,
    report_sections,
    sections_to_excel,
    status_counts,
    to_float,
)
from ..managers import (
    PERIODS,
    DeliveryOrderManager,
    PurchaseOrderManager,
    ReportManager,
    RouteManager,
    SalesOrderManager,
)
from .common import client, go_to, load, pick, show_error, status_badge, table

PERIOD_LABELS = {"week": "This Week", "month": "This Month"}

# ============================================
# DASHBOARD
# ============================================

def dashboard_screen():
    st.title("🏠 Dashboard")
    if has_role(ADMIN):
        admin_dashboard()
    if has_role(SALES):
        sales_summary()
    if has_role(DELIVERY):
        delivery_summary()


def _period_select(key):
    return st.selectbox(
        "Period",
        PERIODS,
        format_func=PERIOD_LABELS.get,
        key=key,
        label_visibility="collapsed",
    )


def _panel(title, key, fetch, render):
    col1, col2 = st.columns([3, 1])
    with col1:
        st.subheader(title)
    with col2:
        period = _period_select(f"{key}_period")
    try:
        data = fetch(period)
    except ApiError as exc:
        show_error(f"Failed to load {title.lower()}", exc)
        return
    render(data)


def admin_dashboard():
    reports = ReportManager(client())

    _panel("Balance Aging Report", "aging", reports.balance_aging, render_balance_aging)
    st.markdown("---")
    _panel("Route Performance", "route_perf", reports.route_performance, render_route_performance)
    st.markdown("---")
    _panel("Top Sellers", "top_sellers", reports.top_sellers, render_top_sellers)
    st.markdown("---")
    _panel("Product Movement", "movement", reports.product_movement, render_product_movement)
    st.markdown("---")

    try:
        heatmap = reports.order_status_heatmap()
    except ApiError as exc:
        show_error("Failed to load order status heatmap", exc)
        return
    st.subheader(f"Order Status Heatmap ({heatmap.get('date', date.today().isoformat())})")
    render_heatmap(heatmap)


def render_balance_aging(data):
    sellers = data.get("sellers") or []
    if not sellers:
        st.info("No balance aging data available")
        return
    frame = pivot_breakdowns(
        sellers,
        "seller_name",
        "Seller",
        {"Total Balance": "total_balance"},
        {"": lambda s: s.get("overdue_breakdown")},
    )
    frame["Total Balance"] = frame["Total Balance"].map(format_money)
    for column in frame.columns[2:]:
        frame[column] = frame[column].map(lambda v: v if v == MISSING else format_money(v))
    st.dataframe(frame, use_container_width=True, hide_index=True)


def render_route_performance(data):
    routes = data.get("routes") or []
    if not routes:
        st.info("No route performance data available")
        return
    frame = pivot_breakdowns(
        routes,
        "route_name",
        "Route",
        {
            "Total Deliveries": "total_deliveries",
            "On-Time Deliveries": "on_time_deliveries",
            "On-Time %": "on_time_percent",
            "Total Delivered Qty": "total_delivered_quantity",
        },
        {
            "TD": lambda r: _breakdown_field(r, "total_deliveries"),
            "OTD": lambda r: _breakdown_field(r, "on_time_deliveries"),
            "Qty": lambda r: _breakdown_field(r, "total_delivered_quantity"),
        },
    )
    frame["On-Time %"] = frame["On-Time %"].map(lambda v: f"{to_float(v):.2f}%")
    st.dataframe(frame, use_container_width=True, hide_index=True)

    chart = pd.DataFrame(
        {"Route": [r["route_name"] for r in routes], "On-Time %": [to_float(r.get("on_time_percent")) for r in routes]}
    ).set_index("Route")
    st.bar_chart(chart)


def _breakdown_field(route, field):
    return {period: values.get(field, MISSING) for period, values in (route.get("performance_breakdown") or {}).items()}


def _quantity_value_table(rows, name_key, name_label, breakdown_key):
    frame = pivot_breakdowns(
        rows,
        name_key,
        name_label,
        {"Total Qty": "total_quantity", "Total Value": "total_value"},
        {
            "Qty": lambda r: (r.get(breakdown_key) or {}).get("quantity"),
            "Value": lambda r: (r.get(breakdown_key) or {}).get("value"),
        },
    )
    frame["Total Value"] = frame["Total Value"].map(format_money)
    for column in [c for c in frame.columns if c.startswith("Value ")]:
        frame[column] = frame[column].map(lambda v: v if v == MISSING else format_money(v))
    st.dataframe(frame, use_container_width=True, hide_index=True)


def render_top_sellers(data):
    sellers = data.get("sellers") or []
    if not sellers:
        st.info("No top sellers data available")
        return
    _quantity_value_table(sellers, "seller_name", "Seller", "delivery_breakdown")


def render_product_movement(data):
    products = data.get("products") or []
    if not products:
        st.info("No product movement data available")
        return
    _quantity_value_table(products, "product_name", "Product", "movement_breakdown")


def render_heatmap(data):
    frame = heatmap_frame(data)
    if frame.empty:
        st.info("No heatmap data available")
        return
    st.dataframe(frame, use_container_width=True, hide_index=True)


def sales_summary():
    st.subheader("🛒 Today's Sales Orders")
    orders = load(
        "Could not load today's sales orders",
        SalesOrderManager(client()).get_all,
        delivery_date=date.today().isoformat(),
    )
    counts = status_counts(orders)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Orders Created", len(orders))
    with col2:
        st.metric("Draft / Pending", counts.get("draft", 0) + counts.get("pending", 0))
    with col3:
        st.metric("Completed", counts.get("completed", 0))

    col1, col2 = st.columns(2)
    with col1:
        if st.button("🛒 Create Orders", use_container_width=True, type="primary"):
            go_to("sales_dashboard")
    with col2:
        if st.button("🧾 All Sales Orders", use_container_width=True):
            go_to("sales_orders")

    table(orders, ["order_number", "seller_name", "delivery_date", "total_amount", "status"])


def delivery_summary():
    st.subheader("🚚 Today's Deliveries")
    api = client()
    today = date.today().isoformat()
    purchase_orders = [
        o for o in load("Could not load purchase orders", PurchaseOrderManager(api).get_all)
        if o.get("delivery_date") == today
    ]
    deliveries = load(
        "Could not load delivery orders",
        DeliveryOrderManager(api).search,
        "delivery_date",
        today,
    )
    po_counts = status_counts(purchase_orders)
    delivery_counts = status_counts(deliveries)
    collected = sum(to_float(d.get("amount_collected")) for d in deliveries)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Pending POs", po_counts.get("pending", 0))
    with col2:
        st.metric("Approved POs", po_counts.get("approved", 0))
    with col3:
        st.metric("Completed Deliveries", delivery_counts.get("completed", 0) + delivery_counts.get("delivered", 0))
    with col4:
        st.metric("Cash Collected", format_money(collected))

    st.write("**Purchase Orders**")
    table(purchase_orders, ["order_number", "route", "status", "notes"])

    st.write("**Delivery Orders**")
    for order in deliveries:
        col1, col2, col3 = st.columns([3, 2, 1])
        with col1:
            st.write(f"**{order.get('seller_name')}** · {order.get('route_name', '')}")
        with col2:
            st.caption(format_money(order.get("total_price")))
        with col3:
            status_badge(order.get("status"))

# ============================================
# SALES REPORT
# ============================================

SALES_REPORT_STATUSES = ["", "draft", "confirmed", "pending", "completed", "cancelled"]


def sales_report_screen():
    st.title("📊 Sales Report")
    api = client()
    manager = SalesOrderManager(api)
    routes = load("Could not load routes", RouteManager(api).get_all)

    with st.form("sales_report_filters"):
        col1, col2, col3 = st.columns(3)
        with col1:
            from_date = st.date_input("From", value=None)
        with col2:
            to_date = st.date_input("To", value=None)
        with col3:
            route = pick("Route", routes, allow_none=True, key="report_route")

        col1, col2 = st.columns(2)
        with col1:
            seller = st.text_input("Seller store")
        with col2:
            status = st.selectbox("Status", SALES_REPORT_STATUSES, format_func=lambda s: s.title() or "All")

        st.form_submit_button("Apply Filters", type="primary", use_container_width=True)

    orders = load(
        "Could not load sales orders",
        manager.filter,
        from_date=from_date,
        to_date=to_date,
        route=route,
        seller=seller.strip(),
        status=status,
    )

    if not orders:
        st.info("No sales orders match these filters")
        return

    total = sum(to_float(o.get("total_amount")) for o in orders)
    col1, col2 = st.columns(2)
    with col1:
        st.metric("Orders", len(orders))
    with col2:
        st.metric("Total Amount", format_money(total))

    columns = ["order_number", "seller_name", "route_name", "delivery_date", "status", "total_amount"]
    table(orders, columns)

    frame = pd.DataFrame(orders)
    st.download_button(
        "⬇️ Download CSV",
        frame[[c for c in columns if c in frame.columns]].to_csv(index=False).encode("utf-8"),
        file_name=f"sales-report-{date.today().isoformat()}.csv",
        mime="text/csv",
    )

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        order_names = {o["id"]: o.get("order_number") for o in orders}
        order_id = st.selectbox("Order details", list(order_names), format_func=order_names.get)
        order = load("Could not load order details", manager.get, order_id, default={})
        if order:
            st.caption(f"{order.get('seller_name')} · {order.get('delivery_date')} · {order.get('status')}")
            table(order.get("items") or [], ["product_name", "quantity", "unit_price", "total_amount"])
    with col2:
        sellers = {}
        for o in orders:
            if o.get("seller") is not None:
                sellers[o["seller"]] = o.get("seller_name") or str(o["seller"])
        if sellers:
            seller_id = st.selectbox("Seller history", list(sellers), format_func=sellers.get)
            history = load("Could not load sales orders for this seller", manager.get_for_seller, seller_id)
            table(history, ["order_number", "delivery_date", "status", "total_amount"])

# ============================================
# DELIVERY SUMMARY REPORT
# ============================================

def delivery_summary_report_screen():
    st.title("📋 Delivery Summary Report")
    api = client()
    routes = load("Failed to load routes", RouteManager(api).get_all)

    with st.form("delivery_report_form"):
        col1, col2 = st.columns(2)
        with col1:
            route_id = pick("Route", routes, key="delivery_report_route")
        with col2:
            delivery_date = st.date_input("Delivery Date", value=date.today())
        submitted = st.form_submit_button("Get Report", type="primary", use_container_width=True)

    if submitted:
        if route_id is None or delivery_date is None:
            st.error("❌ Please select a route and date")
            return
        try:
            st.session_state.delivery_report = ReportManager(api).delivery_report(route_id, delivery_date)
        except ApiError as exc:
            st.session_state.pop("delivery_report", None)
            show_error("Failed to load report", exc)
            return

    report = st.session_state.get("delivery_report")
    if not report:
        return

    route = report.get("route") or {}
    st.subheader(f"{route.get('name', '')} · {report.get('delivery_date', '')}")

    sections = report_sections(report)
    for title, frame in sections.items():
        with st.expander(f"{title} ({len(frame)})", expanded=not frame.empty):
            if frame.empty:
                st.caption("Nothing recorded")
            else:
                st.dataframe(frame, use_container_width=True, hide_index=True)

    st.download_button(
        "⬇️ Download Excel",
        sections_to_excel(sections),
        file_name=f"delivery-summary-{route.get('name', '')}-{report.get('delivery_date', '')}.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
