import streamlit as st

from .api import ApiClient
from .config import load_settings
from .logging_config import get_logger

log = get_logger(__name__)

ADMIN = "admin"
SALES = "sales"
DELIVERY = "delivery"
ROLES = (ADMIN, SALES, DELIVERY)

DEFAULT_PAGE = "dashboard"


def _state(state):
    return st.session_state if state is None else state


def init_session(state=None):
    state = _state(state)
    for key, value in (
        ("logged_in", False),
        ("user", None),
        ("token", None),
        ("current_page", DEFAULT_PAGE),
    ):
        if key not in state:
            state[key] = value


def api_client(state=None, settings=None):
    state = _state(state)
    settings = settings or load_settings()
    return ApiClient(
        settings.api_base_url,
        token=state.get("token"),
        timeout=settings.request_timeout,
    )


def login(client, email, password, state=None):
    state = _state(state)
    user, token = client.login(email.strip(), password)
    state["user"] = user
    state["token"] = token
    state["logged_in"] = True
    state["current_page"] = DEFAULT_PAGE
    return user


def logout(state=None):
    state = _state(state)
    user = state.get("user") or {}
    if user:
        log.info("Logged out %s", user.get("username") or user.get("email"))
    state["user"] = None
    state["token"] = None
    state["logged_in"] = False
    state["current_page"] = DEFAULT_PAGE


def is_authenticated(state=None):
    state = _state(state)
    return bool(state.get("logged_in") and state.get("user") and state.get("token"))


def current_user(state=None):
    return _state(state).get("user")


def display_name(user):
    if not user:
        return ""
    name = f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip()
    return name or user.get("username") or user.get("email") or ""


def has_role(roles, state=None):
    user = current_user(state)
    if not user:
        return False
    if isinstance(roles, str):
        roles = [roles]
    return user.get("role") in roles


def can_access(required_roles, state=None):
    if not is_authenticated(state):
        return False
    if not required_roles:
        return True
    return has_role(list(required_roles), state)
