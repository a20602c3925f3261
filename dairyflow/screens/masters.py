import streamlit as st

from ..api import ApiError
from ..helpers import (
    format_money,
    group_by,
    parse_price,
    read_price_sheet,
    search_records,
    seller_price_rows,
    with_product_price,
)
from ..managers import (
    CategoryManager,
    DeliveryTeamManager,
    DistributorManager,
    PricePlanManager,
    ProductManager,
    RouteManager,
    SellerManager,
)
from .common import client, load, pick, search_box, show_error, table


def _editing(key):
    return st.session_state.get(key)


def _start_edit(key, record):
    st.session_state[key] = record
    st.rerun()


def _stop_edit(key):
    st.session_state.pop(key, None)


def _delete(manager, record, label, name):
    try:
        manager.delete(record["id"])
        st.toast(f"{label} '{name}' deleted")
        st.rerun()
    except ApiError as exc:
        show_error(f"Could not delete {label.lower()}", exc)

# ============================================
# ROUTES
# ============================================

def routes_screen():
    st.title("🗺️ Routes Management")
    manager = RouteManager(client())
    editing = _editing("editing_route")

    with st.expander("✏️ Edit Route" if editing else "➕ Add Route", expanded=bool(editing)):
        with st.form("route_form", clear_on_submit=not editing):
            col1, col2 = st.columns(2)
            with col1:
                name = st.text_input("Route Name *", value=(editing or {}).get("name", ""))
            with col2:
                code = st.text_input("Route Code *", value=(editing or {}).get("code", ""))

            col1, col2 = st.columns(2)
            with col1:
                submitted = st.form_submit_button("Save", type="primary", use_container_width=True)
            with col2:
                cancel = st.form_submit_button("Cancel", use_container_width=True)

            if submitted:
                if not name.strip() or not code.strip():
                    st.error("❌ Name and code are required")
                else:
                    try:
                        manager.save({"name": name.strip(), "code": code.strip()}, (editing or {}).get("id"))
                        st.toast(f"✅ Route '{name}' has been {'updated' if editing else 'created'}")
                        _stop_edit("editing_route")
                        st.rerun()
                    except ApiError as exc:
                        show_error(f"There was an error {'updating' if editing else 'creating'} the route", exc)
            if cancel:
                _stop_edit("editing_route")
                st.rerun()

    st.markdown("---")

    routes = load("Failed to fetch routes", manager.get_all)
    term = search_box("route_search", "Search routes by name or code")
    routes = search_records(routes, term, ("name", "code"))

    if not routes:
        st.info("No routes found")
        return

    for route in routes:
        col1, col2, col3, col4 = st.columns([3, 2, 1, 1])
        with col1:
            st.write(f"**{route['name']}**")
        with col2:
            st.caption(route.get("code", ""))
        with col3:
            if st.button("✏️", key=f"edit_route_{route['id']}"):
                _start_edit("editing_route", route)
        with col4:
            if st.button("🗑️", key=f"del_route_{route['id']}"):
                _delete(manager, route, "Route", route["name"])

# ============================================
# CATEGORIES
# ============================================

def categories_screen():
    st.title("📂 Categories")
    manager = CategoryManager(client())
    editing = _editing("editing_category")

    with st.expander("✏️ Edit Category" if editing else "➕ Add Category", expanded=bool(editing)):
        with st.form("category_form", clear_on_submit=not editing):
            col1, col2 = st.columns(2)
            with col1:
                name = st.text_input("Name *", value=(editing or {}).get("name", ""))
            with col2:
                code = st.text_input("Code *", value=(editing or {}).get("code", ""))
            submitted = st.form_submit_button("Save", type="primary", use_container_width=True)

            if submitted:
                if not name.strip() or not code.strip():
                    st.error("❌ Name and code are required")
                else:
                    try:
                        manager.save({"name": name.strip(), "code": code.strip()}, (editing or {}).get("id"))
                        st.toast(f"✅ Category '{name}' saved")
                        _stop_edit("editing_category")
                        st.rerun()
                    except ApiError as exc:
                        show_error(f"There was an error {'updating' if editing else 'creating'} the category", exc)

    st.markdown("---")

    categories = load("Failed to fetch categories", manager.get_all)
    if not categories:
        st.info("No categories yet")
        return

    for category in categories:
        col1, col2, col3 = st.columns([4, 2, 1])
        with col1:
            st.write(f"**{category['name']}**")
        with col2:
            st.caption(category.get("code", ""))
        with col3:
            if st.button("✏️", key=f"edit_category_{category['id']}"):
                _start_edit("editing_category", category)

# ============================================
# PRODUCTS
# ============================================

def products_screen():
    st.title("📦 Products")
    api = client()
    manager = ProductManager(api)
    categories = load("Failed to fetch categories", CategoryManager(api).get_all)
    editing = _editing("editing_product") or {}

    with st.expander("✏️ Edit Product" if editing else "➕ Add Product", expanded=bool(editing)):
        with st.form("product_form", clear_on_submit=not editing):
            col1, col2 = st.columns(2)
            with col1:
                code = st.text_input("Code *", value=editing.get("code", ""))
            with col2:
                name = st.text_input("Name *", value=editing.get("name", ""))

            col1, col2 = st.columns(2)
            with col1:
                category = pick("Category", categories, editing.get("category"), key="product_category")
            with col2:
                unit_size = st.text_input("Unit Size", value=editing.get("unit_size", ""), placeholder="e.g., 500ml")

            col1, col2 = st.columns(2)
            with col1:
                is_liquid = st.checkbox("Liquid product", value=editing.get("is_liquid", False))
            with col2:
                is_active = st.checkbox("Active", value=editing.get("is_active", True))

            submitted = st.form_submit_button("Save", type="primary", use_container_width=True)

            if submitted:
                if not code.strip() or not name.strip() or category is None:
                    st.error("❌ Code, name and category are required")
                else:
                    payload = ProductManager.build_payload(
                        code, name, category, categories, is_liquid, unit_size, is_active
                    )
                    try:
                        manager.save(payload, editing.get("id"))
                        st.toast(f"✅ Product '{name}' has been {'updated' if editing else 'created'}")
                        _stop_edit("editing_product")
                        st.rerun()
                    except ApiError as exc:
                        show_error(f"There was an error {'updating' if editing else 'creating'} the product", exc)

    st.markdown("---")

    products = load("Failed to fetch products", manager.get_all)
    term = search_box("product_search", "Search by name, code or unit size")
    products = search_records(products, term, ("name", "code", "unit_size"))

    if not products:
        st.info("No products found")
        return

    for category_name, items in group_by(products, "category_name").items():
        with st.expander(f"{category_name} ({len(items)} products)", expanded=True):
            for product in items:
                col1, col2, col3, col4, col5 = st.columns([3, 2, 2, 1, 1])
                with col1:
                    st.write(f"**{product['name']}**")
                    st.caption(product.get("code", ""))
                with col2:
                    st.write(product.get("unit_size", ""))
                with col3:
                    flags = ["Liquid" if product.get("is_liquid") else "Solid"]
                    flags.append("Active" if product.get("is_active") else "Inactive")
                    st.caption(" · ".join(flags))
                with col4:
                    if st.button("✏️", key=f"edit_product_{product['id']}"):
                        _start_edit("editing_product", product)
                with col5:
                    if st.button("🗑️", key=f"del_product_{product['id']}"):
                        _delete(manager, product, "Product", product["name"])

# ============================================
# SELLERS
# ============================================

SELLER_FIELDS = ("store_name", "first_name", "last_name", "mobileno", "store_address")


def sellers_screen():
    st.title("🏪 Sellers")
    api = client()
    manager = SellerManager(api)
    routes = load("Failed to fetch routes", RouteManager(api).get_all)
    editing = _editing("editing_seller") or {}

    if "seller_page" not in st.session_state:
        st.session_state.seller_page = 1

    with st.expander("✏️ Edit Seller" if editing else "➕ Add Seller", expanded=bool(editing)):
        with st.form("seller_form", clear_on_submit=not editing):
            route = pick("Route *", routes, editing.get("route"), key="seller_route")
            col1, col2 = st.columns(2)
            with col1:
                store_name = st.text_input("Store Name *", value=editing.get("store_name", ""))
                first_name = st.text_input("First Name", value=editing.get("first_name", ""))
                mobileno = st.text_input("Mobile Number", value=editing.get("mobileno", ""))
            with col2:
                store_address = st.text_input("Store Address", value=editing.get("store_address", ""))
                last_name = st.text_input("Last Name", value=editing.get("last_name", ""))

            submitted = st.form_submit_button("Save", type="primary", use_container_width=True)

            if submitted:
                if route is None or not store_name.strip():
                    st.error("❌ Route and store name are required")
                else:
                    form = {
                        "route": route,
                        "store_name": store_name.strip(),
                        "first_name": first_name.strip(),
                        "last_name": last_name.strip(),
                        "mobileno": mobileno.strip(),
                        "store_address": store_address.strip(),
                    }
                    try:
                        manager.save(SellerManager.build_payload(form, routes), editing.get("id"))
                        st.toast(f"✅ Seller '{store_name}' has been {'updated' if editing else 'created'}")
                        _stop_edit("editing_seller")
                        st.rerun()
                    except ApiError as exc:
                        show_error(f"There was an error {'updating' if editing else 'creating'} the seller", exc)

    st.markdown("---")

    page = load(
        "Failed to fetch sellers",
        manager.get_page,
        st.session_state.seller_page,
        default={"results": [], "count": 0, "next": None, "previous": None},
    )
    term = search_box("seller_search", "Search sellers")
    sellers = search_records(
        page["results"], term, ("id", "store_name", "first_name", "last_name", "route_name", "store_address")
    )

    table(sellers, ["id", "store_name", "first_name", "last_name", "route_name", "mobileno", "store_address"])

    for seller in sellers:
        col1, col2, col3 = st.columns([4, 1, 1])
        with col1:
            st.caption(f"#{seller['id']} {seller.get('store_name', '')}")
        with col2:
            if st.button("✏️", key=f"edit_seller_{seller['id']}"):
                _start_edit("editing_seller", seller)
        with col3:
            if st.button("🗑️", key=f"del_seller_{seller['id']}"):
                _delete(manager, seller, "Seller", seller.get("store_name", ""))

    col1, col2, col3 = st.columns([1, 2, 1])
    with col1:
        if st.button("← Previous", disabled=not page["previous"], use_container_width=True):
            st.session_state.seller_page -= 1
            st.rerun()
    with col2:
        st.caption(f"Page {st.session_state.seller_page} · {page['count']} sellers")
    with col3:
        if st.button("Next →", disabled=not page["next"], use_container_width=True):
            st.session_state.seller_page += 1
            st.rerun()

# ============================================
# DISTRIBUTORS
# ============================================

def distributors_screen():
    st.title("🚚 Distributors")
    manager = DistributorManager(client())
    editing = _editing("editing_distributor") or {}

    with st.expander("✏️ Edit Distributor" if editing else "➕ Add Distributor", expanded=bool(editing)):
        with st.form("distributor_form", clear_on_submit=not editing):
            col1, col2 = st.columns(2)
            with col1:
                name = st.text_input("Name *", value=editing.get("name", ""))
                contact_person = st.text_input("Contact Person", value=editing.get("contact_person", ""))
            with col2:
                code = st.text_input("Code *", value=editing.get("code", ""))
                mobile = st.text_input("Mobile", value=editing.get("mobile", ""))
            address = st.text_area("Address", value=editing.get("address", ""))

            col1, col2 = st.columns(2)
            with col1:
                is_internal = st.checkbox("Internal", value=editing.get("is_internal", False))
            with col2:
                is_active = st.checkbox("Active", value=editing.get("is_active", True))

            submitted = st.form_submit_button("Save", type="primary", use_container_width=True)

            if submitted:
                if not name.strip() or not code.strip():
                    st.error("❌ Name and code are required")
                else:
                    payload = {
                        "name": name.strip(),
                        "code": code.strip(),
                        "contact_person": contact_person.strip(),
                        "mobile": mobile.strip(),
                        "address": address.strip(),
                        "is_internal": is_internal,
                        "is_active": is_active,
                    }
                    try:
                        manager.save(payload, editing.get("id"))
                        st.toast(f"✅ Distributor '{name}' saved")
                        _stop_edit("editing_distributor")
                        st.rerun()
                    except ApiError as exc:
                        show_error("Failed to save distributor", exc)

    st.markdown("---")

    distributors = load("Failed to fetch distributors", manager.get_all)
    if not distributors:
        st.info("No distributors yet")
        return

    for distributor in distributors:
        with st.expander(f"🚚 {distributor['name']} ({distributor.get('code', '')})"):
            col1, col2 = st.columns([3, 1])
            with col1:
                st.write(f"**Contact:** {distributor.get('contact_person') or '-'}")
                st.write(f"**Mobile:** {distributor.get('mobile') or '-'}")
                st.write(f"**Address:** {distributor.get('address') or '-'}")
                st.caption(
                    f"{'Internal' if distributor.get('is_internal') else 'External'} · "
                    f"{'Active' if distributor.get('is_active') else 'Inactive'}"
                )
            with col2:
                if st.button("✏️ Edit", key=f"edit_distributor_{distributor['id']}"):
                    _start_edit("editing_distributor", distributor)
                if st.button("🗑️ Delete", key=f"del_distributor_{distributor['id']}"):
                    _delete(manager, distributor, "Distributor", distributor["name"])

# ============================================
# DELIVERY TEAMS
# ============================================

def delivery_teams_screen():
    st.title("👷 Delivery Teams")
    api = client()
    manager = DeliveryTeamManager(api)
    editing = _editing("editing_team") or {}

    distributors = load("Failed to fetch distributors", DistributorManager(api).get_all)
    routes = load("Failed to fetch routes", RouteManager(api).get_all)

    with st.expander("✏️ Edit Team" if editing else "➕ Add Team", expanded=bool(editing)):
        with st.form("team_form", clear_on_submit=not editing):
            name = st.text_input("Team Name *", value=editing.get("name", ""))
            col1, col2 = st.columns(2)
            with col1:
                distributor = pick("Distributor *", distributors, editing.get("distributor"), key="team_distributor")
            with col2:
                route = pick("Route *", routes, editing.get("route"), key="team_route")

            submitted = st.form_submit_button("Save", type="primary", use_container_width=True)

            if submitted:
                if not name.strip() or distributor is None or route is None:
                    st.error("❌ Name, distributor and route are required")
                else:
                    payload = {"name": name.strip(), "distributor": distributor, "route": route}
                    try:
                        manager.save(payload, editing.get("id"))
                        st.toast(f"✅ Team '{name}' saved")
                        _stop_edit("editing_team")
                        st.rerun()
                    except ApiError as exc:
                        show_error("Failed to save delivery team", exc)

    st.markdown("---")

    teams = load("Failed to fetch delivery teams", manager.get_all)
    if not teams:
        st.info("No delivery teams yet")
        return

    for team in teams:
        col1, col2, col3, col4, col5 = st.columns([3, 2, 2, 1, 1])
        with col1:
            st.write(f"**{team['name']}**")
        with col2:
            st.caption(team.get("distributor_name", ""))
        with col3:
            st.caption(team.get("route_name", ""))
        with col4:
            if st.button("✏️", key=f"edit_team_{team['id']}"):
                _start_edit("editing_team", team)
        with col5:
            if st.button("🗑️", key=f"del_team_{team['id']}"):
                _delete(manager, team, "Team", team["name"])

# ============================================
# PRICE PLANS
# ============================================

def price_plans_screen():
    st.title("🏷️ Price Plans")
    manager = PricePlanManager(client())

    general_tab, seller_tab, import_tab = st.tabs(["General Price Plan", "Seller Price Plans", "Import from Excel"])

    general_plan = load("Failed to fetch general price plan", manager.get_general_plan, default={})
    general_prices = general_plan.get("product_prices") or []

    with general_tab:
        term = search_box("general_price_search", "Search products")
        prices = search_records(general_prices, term, ("product_name",))
        if prices:
            table(
                [{"product": p.get("product_name"), "price": format_money(p.get("price"))} for p in prices],
            )
            edit_price_form(manager, general_plan)
        else:
            st.info("No general price plan found")

    with seller_tab:
        plans = load("Failed to fetch seller price plans", manager.get_seller_plans)
        if not plans:
            st.info("No seller specific price plans")
        for plan in plans:
            title = plan.get("seller_name") or plan.get("name") or f"Plan #{plan.get('id')}"
            with st.expander(f"🏪 {title}"):
                table(seller_price_rows(plan.get("product_prices") or [], general_prices))
                edit_price_form(manager, plan)

    with import_tab:
        price_import_form(manager)


def edit_price_form(manager, plan):
    product_prices = plan.get("product_prices") or []
    if not product_prices:
        return
    with st.form(f"price_form_{plan['id']}"):
        names = {p["product"]: p.get("product_name", str(p["product"])) for p in product_prices}
        product = st.selectbox("Product", list(names), format_func=names.get)
        price_text = st.text_input("New price")
        submitted = st.form_submit_button("Update price", use_container_width=True)

        if submitted:
            try:
                price = parse_price(price_text)
            except ValueError as exc:
                st.error(f"❌ {exc}")
                return
            try:
                manager.update(plan["id"], with_product_price(plan, product, price))
                st.toast(f"✅ Price for {names[product]} updated")
                st.rerun()
            except ApiError as exc:
                show_error("Failed to update price plan", exc)


def price_import_form(manager):
    st.caption("Upload an .xlsx workbook with `product` and `price` columns.")
    uploaded = st.file_uploader("Price plan workbook", type=["xlsx", "xlsm"])
    if uploaded is None:
        return

    data = uploaded.getvalue()
    try:
        frame = read_price_sheet(uploaded.name, data)
    except ValueError as exc:
        st.error(f"❌ {exc}")
        return

    st.write(f"**{len(frame)} rows** found")
    st.dataframe(frame.head(50), use_container_width=True, hide_index=True)

    if st.button("📤 Upload Price Plan", type="primary"):
        try:
            result = manager.upload_sheet(uploaded.name, data)
            st.success("✅ Price plan imported")
            if isinstance(result, dict) and result.get("message"):
                st.caption(result["message"])
        except ApiError as exc:
            show_error("Price plan import failed", exc)
