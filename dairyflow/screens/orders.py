from datetime import date

import streamlit as st

from ..api import ApiError
from ..auth import ADMIN, has_role
from ..helpers import (
    available_products,
    find_price,
    format_money,
    format_quantity,
    lines_from_price_plan,
    new_purchase_line,
    search_records,
    to_float,
    with_extra_quantity,
)
from ..managers import (
    DELIVERY_SEARCH_TYPES,
    LOADING_SEARCH_TYPES,
    SALES_SEARCH_TYPES,
    DeliveryOrderManager,
    DeliveryTeamManager,
    LoadingOrderManager,
    PricePlanManager,
    ProductManager,
    PurchaseOrderManager,
    RouteManager,
    SalesOrderManager,
    SellerManager,
)
from .common import client, go_to, load, pick, reset_on_change, show_error, status_badge, table

SALES_STATUSES = ["draft", "confirmed", "pending", "completed", "cancelled"]


def _search_bar(prefix, search_types):
    col1, col2, col3 = st.columns([2, 3, 1])
    with col1:
        search_type = st.selectbox(
            "Search by",
            search_types,
            format_func=lambda s: s.replace("_", " ").title(),
            key=f"{prefix}_search_type",
            label_visibility="collapsed",
        )
    with col2:
        term = st.text_input(
            "Search",
            placeholder=f"Search by {search_type.replace('_', ' ')}",
            key=f"{prefix}_search_term",
            label_visibility="collapsed",
        )
    with col3:
        st.button("🔍 Search", key=f"{prefix}_search_btn", use_container_width=True)
    return search_type, term


# ============================================
# SALES ORDERS
# ============================================

def sales_orders_screen():
    st.title("🧾 Sales Orders")
    st.caption("View and search all sales orders")
    manager = SalesOrderManager(client())

    search_type, term = _search_bar("sales", SALES_SEARCH_TYPES)
    orders = load("Could not load sales orders", manager.search, search_type, term)

    if not orders:
        st.info("No sales orders found")
        return

    for order in orders:
        label = (
            f"{order.get('order_number')} · {order.get('seller_name', '')} · "
            f"{order.get('delivery_date', '')} · {format_money(order.get('total_amount'))}"
        )
        with st.expander(label):
            col1, col2 = st.columns([3, 1])
            with col1:
                st.write(f"**Seller:** {order.get('seller_name', '-')}")
                st.write(f"**Delivery Date:** {order.get('delivery_date', '-')}")
            with col2:
                status_badge(order.get("status"))
            table(order.get("items") or [], ["product_name", "quantity", "unit_price", "total_amount"])

# ============================================
# SALES DASHBOARD (ORDER ENTRY)
# ============================================

def sales_dashboard_screen():
    st.title("🛒 Sales Dashboard")
    api = client()
    sellers_manager = SellerManager(api)
    orders_manager = SalesOrderManager(api)

    routes = load("Could not load routes", RouteManager(api).get_all)

    col1, col2 = st.columns(2)
    with col1:
        route_id = pick("Route", routes, key="sales_route")
    with col2:
        delivery_date = st.date_input("Delivery Date", value=date.today(), key="sales_date")

    reset_on_change("sales_selection", (route_id, delivery_date), ("sales_create_seller", "sales_selected_order"))

    if route_id is None:
        st.info("📍 Select a route to see its sellers")
        return

    sellers = load("Could not load sellers", sellers_manager.get_by_route, route_id)
    orders = load("Could not load sales orders", orders_manager.get_for_route, route_id, delivery_date)
    orders_by_seller = {o.get("seller"): o for o in orders}

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("🏪 Sellers", len(sellers))
    with col2:
        st.metric("🧾 Orders", len(orders))
    with col3:
        st.metric("⏳ Without Order", len([s for s in sellers if s["id"] not in orders_by_seller]))

    st.markdown("---")

    term = st.text_input("Search sellers", placeholder="Store name", key="sales_seller_search")
    sellers = search_records(sellers, term, ("store_name",))

    for seller in sellers:
        order = orders_by_seller.get(seller["id"])
        col1, col2, col3 = st.columns([4, 2, 2])
        with col1:
            st.write(f"**{seller.get('store_name')}**")
        with col2:
            if order:
                status_badge(order.get("status"))
            else:
                st.caption("No order")
        with col3:
            if order:
                if st.button("View Order", key=f"view_order_{seller['id']}", use_container_width=True):
                    st.session_state.sales_selected_order = order["id"]
                    st.session_state.pop("sales_create_seller", None)
                    st.rerun()
            elif st.button("➕ Create Order", key=f"create_order_{seller['id']}", use_container_width=True):
                st.session_state.sales_create_seller = seller
                st.session_state.pop("sales_selected_order", None)
                st.rerun()

    st.markdown("---")

    if st.session_state.get("sales_create_seller"):
        create_sales_order_form(api, st.session_state.sales_create_seller, delivery_date)
    elif st.session_state.get("sales_selected_order"):
        sales_order_detail(api, st.session_state.sales_selected_order)


def create_sales_order_form(api, seller, delivery_date):
    st.subheader(f"New order for {seller.get('store_name')}")
    prices = load("Could not load price plan", PricePlanManager(api).get_general_prices)
    if not prices:
        st.warning("⚠️ No general price plan found. Cannot create an order.")
        return

    lines = lines_from_price_plan(prices)

    with st.form("create_sales_order_form"):
        for i, line in enumerate(lines):
            col1, col2, col3 = st.columns([3, 1, 2])
            with col1:
                st.write(line["product_name"])
            with col2:
                st.caption(format_money(line["unit_price"]))
            with col3:
                qty = st.number_input(
                    "Quantity",
                    min_value=0.0,
                    step=1.0,
                    key=f"new_qty_{line['product']}",
                    label_visibility="collapsed",
                )
                lines[i]["quantity"] = str(qty) if qty else ""

        col1, col2 = st.columns(2)
        with col1:
            submitted = st.form_submit_button("Create Order", type="primary", use_container_width=True)
        with col2:
            cancel = st.form_submit_button("Cancel", use_container_width=True)

        if submitted:
            try:
                order = SalesOrderManager(api).create_order(seller["id"], delivery_date, lines)
                st.toast("✅ Sales order created.")
                st.session_state.pop("sales_create_seller", None)
                st.session_state.sales_selected_order = order["id"]
                st.rerun()
            except ValueError as exc:
                st.error(f"❌ {exc}")
            except ApiError as exc:
                show_error("Could not create sales order", exc)
        if cancel:
            st.session_state.pop("sales_create_seller", None)
            st.rerun()


def sales_order_detail(api, order_id):
    manager = SalesOrderManager(api)
    order = load("Could not load sales order detail", manager.get, order_id, default={})
    if not order:
        return

    st.subheader(f"Order {order.get('order_number')}")
    col1, col2, col3 = st.columns(3)
    with col1:
        st.write(f"**Seller:** {order.get('seller_name')}")
    with col2:
        st.write(f"**Total:** {format_money(order.get('total_amount'))}")
    with col3:
        status_badge(order.get("status"))

    items = [dict(i) for i in order.get("items") or []]
    table(items, ["product_name", "quantity", "unit_price", "total_amount"])

    with st.expander("✏️ Edit Order"):
        with st.form(f"edit_sales_order_{order_id}"):
            for item in items:
                item["quantity"] = str(
                    st.number_input(
                        item.get("product_name", str(item["product"])),
                        min_value=0.0,
                        step=1.0,
                        value=to_float(item.get("quantity")),
                        key=f"edit_qty_{order_id}_{item['product']}",
                    )
                )
            current = order.get("status") or "draft"
            statuses = SALES_STATUSES if current in SALES_STATUSES else SALES_STATUSES + [current]
            status = st.selectbox("Status", statuses, index=statuses.index(current))

            if st.form_submit_button("Save Changes", type="primary", use_container_width=True):
                try:
                    manager.update_order(order, items, status)
                    st.toast("✅ Sales order updated.")
                    st.rerun()
                except ValueError as exc:
                    st.error(f"❌ {exc}")
                except ApiError as exc:
                    show_error("Could not update sales order", exc)

    with st.expander("➕ Add Product"):
        add_product_to_order(api, order, items)


def add_product_to_order(api, order, items):
    products = load("Could not load products", ProductManager(api).get_all)
    products = available_products(products, items, key="product")
    if not products:
        st.caption("All products are already on this order")
        return

    with st.form(f"add_product_{order['id']}"):
        product_id = pick("Product", products, key=f"add_product_id_{order['id']}")
        qty = st.number_input("Quantity", min_value=0.0, step=1.0)

        if st.form_submit_button("Add", use_container_width=True):
            if not qty:
                st.error("❌ Please enter a quantity")
                return
            prices = load("Could not load price plan", PricePlanManager(api).get_general_prices)
            price = find_price(prices, product_id)
            if not price:
                st.error("❌ No price found for selected product.")
                return
            new_items = items + [{
                "product": product_id,
                "product_name": price.get("product_name"),
                "quantity": str(qty),
                "unit_price": price.get("price"),
            }]
            try:
                SalesOrderManager(api).update_order(order, new_items, order.get("status") or "draft")
                st.toast("✅ Product added")
                st.rerun()
            except ApiError as exc:
                show_error("Could not add product", exc)

# ============================================
# PURCHASE ORDERS
# ============================================

def purchase_orders_screen():
    st.title("📦 Purchase Orders")
    manager = PurchaseOrderManager(client())

    if has_role(ADMIN):
        if st.button("➕ Create Purchase Order", type="primary"):
            go_to("create_purchase_order")

    orders = load("Could not load purchase orders", manager.get_all)
    if not orders:
        st.info("No purchase orders found")
        return

    for order in orders:
        with st.expander(f"{order.get('order_number')} · {order.get('delivery_date', '')} · {order.get('status', '')}"):
            if order.get("notes"):
                st.caption(order["notes"])
            table(
                order.get("items") or [],
                ["product_name", "sales_order_quantity", "extra_quantity", "remaining_quantity", "total_quantity"],
            )


def _purchase_selection_key(route_id, team_id, delivery_date):
    return f"{route_id}|{team_id}|{delivery_date}"


def create_purchase_order_screen():
    st.title("📝 Create Purchase Order")
    api = client()
    manager = PurchaseOrderManager(api)

    routes = load("Could not load routes", RouteManager(api).get_all)
    teams = load("Could not load delivery teams", DeliveryTeamManager(api).get_all)
    products = load("Could not load products", ProductManager(api).get_all)

    col1, col2, col3 = st.columns(3)
    with col1:
        route_id = pick("Route *", routes, key="po_route", allow_none=True, none_label="Select route")
    with col2:
        team_id = pick("Delivery Team *", teams, key="po_team", allow_none=True, none_label="Select team")
    with col3:
        delivery_date = st.date_input("Delivery Date *", value=None, key="po_date")

    if route_id is None or team_id is None or delivery_date is None:
        st.session_state.pop("po_items", None)
        st.session_state.pop("po_selection", None)
        st.info("Select a route, team and delivery date to load items")
        return

    selection = _purchase_selection_key(route_id, team_id, delivery_date)
    if st.session_state.get("po_selection") != selection:
        try:
            existing = manager.check_existing(route_id, delivery_date, team_id)
            if existing.get("exists"):
                items = existing.get("items") or []
                st.session_state.po_order_id = existing.get("order_id")
            else:
                items = manager.get_route_sales_summary(route_id, delivery_date)
                st.session_state.po_order_id = None
        except ApiError as exc:
            show_error("Could not load purchase order items", exc)
            return
        st.session_state.po_items = items
        st.session_state.po_selection = selection

    if st.session_state.get("po_order_id"):
        st.info("ℹ️ A purchase order already exists for this route and date. You can edit it below.")

    items = st.session_state.get("po_items", [])

    st.subheader(f"Items ({len(items)})")
    updated = []
    for i, item in enumerate(items):
        col1, col2, col3, col4 = st.columns([3, 1, 2, 1])
        with col1:
            st.write(f"**{item.get('product_name')}**")
        with col2:
            st.caption(f"Sales {format_quantity(item.get('sales_quantity'))}")
        with col3:
            extra = st.number_input(
                "Extra",
                min_value=0.0,
                step=1.0,
                value=to_float(item.get("extra_quantity")),
                key=f"po_extra_{selection}_{i}",
                label_visibility="collapsed",
            )
        updated_item = with_extra_quantity(item, format_quantity(extra))
        with col4:
            st.write(updated_item["total_quantity"])
        updated.append(updated_item)
    st.session_state.po_items = updated

    with st.expander("➕ Add Product"):
        remaining = available_products(products, updated)
        if not remaining:
            st.caption("All products are already listed")
        else:
            with st.form("po_add_product", clear_on_submit=True):
                product_id = pick("Product", remaining, key="po_add_product_id")
                col1, col2, col3 = st.columns(3)
                with col1:
                    sales_qty = st.number_input("Sales Quantity", min_value=0.0, step=1.0)
                with col2:
                    extra_qty = st.number_input("Extra Quantity", min_value=0.0, step=1.0)
                with col3:
                    remaining_qty = st.number_input("Remaining Quantity", min_value=0.0, step=1.0)
                if st.form_submit_button("Add", use_container_width=True):
                    product = next(p for p in remaining if p["id"] == product_id)
                    st.session_state.po_items = updated + [
                        new_purchase_line(
                            product,
                            format_quantity(sales_qty),
                            format_quantity(extra_qty),
                            format_quantity(remaining_qty),
                        )
                    ]
                    st.rerun()

    notes = st.text_area("Notes *", key="po_notes")

    if st.button("✅ Save Purchase Order", type="primary", use_container_width=True):
        try:
            payload = PurchaseOrderManager.build_payload(route_id, team_id, delivery_date, notes, updated)
        except ValueError as exc:
            st.error(f"❌ {exc}")
            return
        try:
            order = manager.save(payload, st.session_state.get("po_order_id"))
            st.success(f"✅ Purchase order {(order or {}).get('order_number', '')} saved.")
            for key in ("po_items", "po_selection", "po_order_id"):
                st.session_state.pop(key, None)
        except ApiError as exc:
            show_error("Failed to save purchase order", exc)

# ============================================
# LOADING ORDERS
# ============================================

def loading_orders_screen():
    st.title("🚛 Loading Orders")
    st.caption("View and search all loading orders")
    manager = LoadingOrderManager(client())

    search_type, term = _search_bar("loading", LOADING_SEARCH_TYPES)
    orders = load("Could not load loading orders", manager.search, search_type, term)

    if not orders:
        st.info("No loading orders found")
        return

    for order in orders:
        with st.expander(f"{order.get('order_number')} · {order.get('route_name', '')} · {order.get('loading_date', '')}"):
            col1, col2, col3 = st.columns(3)
            with col1:
                st.write(f"**Crates Loaded:** {order.get('crates_loaded', '-')}")
            with col2:
                st.write(f"**Loading Time:** {order.get('loading_time') or '-'}")
            with col3:
                status_badge(order.get("status"))
            table(
                order.get("items") or [],
                [
                    "product_name",
                    "purchase_order_quantity",
                    "loaded_quantity",
                    "remaining_quantity",
                    "delivered_quantity",
                    "return_quantity",
                    "unit_price",
                ],
            )

# ============================================
# DELIVERY ORDERS
# ============================================

def delivery_orders_screen():
    st.title("🚚 Delivery Orders")
    st.caption("View and search all delivery orders")
    manager = DeliveryOrderManager(client())

    search_type, term = _search_bar("delivery", DELIVERY_SEARCH_TYPES)
    orders = load("Could not load delivery orders", manager.search, search_type, term)

    if not orders:
        st.info("No delivery orders found")
        return

    for order in orders:
        label = (
            f"{order.get('order_number')} · {order.get('seller_name', '')} · "
            f"{order.get('route_name', '')} · {order.get('delivery_date', '')}"
        )
        with st.expander(label):
            col1, col2, col3, col4 = st.columns(4)
            with col1:
                st.metric("Total", format_money(order.get("total_price")))
            with col2:
                st.metric("Opening Balance", format_money(order.get("opening_balance")))
            with col3:
                st.metric("Collected", format_money(order.get("amount_collected")))
            with col4:
                st.metric("Balance", format_money(order.get("balance_amount")))

            st.caption(
                f"Payment: {order.get('payment_method') or '-'} · Status: {order.get('status', '-')} · "
                f"Delivered: {order.get('actual_delivery_date') or '-'} {order.get('actual_delivery_time') or ''}"
            )
            if order.get("notes"):
                st.write(order["notes"])
            table(
                order.get("items") or [],
                ["product_name", "ordered_quantity", "extra_quantity", "delivered_quantity", "unit_price", "total_price"],
            )
