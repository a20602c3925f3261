import streamlit as st

from ..api import ApiError
from ..auth import ROLES
from ..helpers import search_records
from ..managers import UserManager
from .common import client, load, search_box, show_error, table


def _role_options(manager):
    roles = load("Failed to fetch roles", manager.get_roles)
    if not roles:
        return [{"value": r, "label": r.title()} for r in ROLES]
    return roles


def _role_select(label, roles, value=None, key=None):
    values = [r["value"] for r in roles]
    labels = {r["value"]: r.get("label", r["value"]) for r in roles}
    index = values.index(value) if value in values else 0
    return st.selectbox(label, values, index=index, format_func=labels.get, key=key)


def users_screen():
    st.title("👥 Users")
    manager = UserManager(client())
    roles = _role_options(manager)

    with st.expander("➕ Create User"):
        with st.form("create_user_form", clear_on_submit=True):
            col1, col2 = st.columns(2)
            with col1:
                username = st.text_input("Username *")
                first_name = st.text_input("First Name *")
                email = st.text_input("Email *")
                password = st.text_input("Password *", type="password")
            with col2:
                role = _role_select("Role *", roles, key="create_user_role")
                last_name = st.text_input("Last Name *")
                mobile_number = st.text_input("Mobile Number *")

            submitted = st.form_submit_button("Create User", type="primary", use_container_width=True)

            if submitted:
                try:
                    payload = UserManager.build_payload({
                        "username": username,
                        "first_name": first_name,
                        "last_name": last_name,
                        "email": email,
                        "role": role,
                        "password": password,
                        "mobile_number": mobile_number,
                    })
                except ValueError as exc:
                    st.error(f"❌ {exc}")
                else:
                    try:
                        manager.create(payload)
                        st.toast(f"✅ User '{payload['username']}' created")
                        st.rerun()
                    except ApiError as exc:
                        show_error("Failed to create user", exc)

    st.markdown("---")

    users = load("Failed to fetch users", manager.get_all)
    term = search_box("user_search", "Search users")
    users = search_records(users, term, ("username", "first_name", "last_name", "email", "role", "mobile_number"))

    table(users, ["username", "first_name", "last_name", "email", "role", "mobile_number"])

    for user in users:
        with st.expander(f"✏️ {user.get('username')} ({user.get('role')})"):
            with st.form(f"edit_user_{user['id']}"):
                col1, col2 = st.columns(2)
                with col1:
                    first_name = st.text_input("First Name", value=user.get("first_name", ""))
                    role = _role_select("Role", roles, user.get("role"), key=f"edit_user_role_{user['id']}")
                with col2:
                    last_name = st.text_input("Last Name", value=user.get("last_name", ""))
                    password = st.text_input("New Password", type="password", help="Leave blank to keep the current password")

                if st.form_submit_button("Save", use_container_width=True):
                    try:
                        manager.update_user(user["id"], first_name.strip(), last_name.strip(), role, password)
                        st.toast("✅ User updated")
                        st.rerun()
                    except ApiError as exc:
                        show_error("Failed to update user", exc)
