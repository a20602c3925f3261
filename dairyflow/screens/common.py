import pandas as pd
import streamlit as st

from .. import auth
from ..api import ApiError, AuthenticationError
from ..logging_config import get_logger

log = get_logger(__name__)


def go_to(page):
    st.session_state.current_page = page
    st.rerun()


def client():
    return auth.api_client()


def show_error(title, exc):
    # session expiry is handled by the router
    if isinstance(exc, AuthenticationError):
        raise exc
    log.warning("%s: %s", title, exc)
    st.error(f"❌ {title}: {exc}")


def load(title, fn, *args, default=None, **kwargs):
    """Run an API call, showing an error and returning ``default`` on failure."""
    try:
        return fn(*args, **kwargs)
    except ApiError as exc:
        show_error(title, exc)
        return [] if default is None else default


def search_box(key, placeholder="Search..."):
    return st.text_input("Search", placeholder=placeholder, key=key, label_visibility="collapsed")


def pick(label, options, value=None, label_key="name", key=None, allow_none=False, none_label="All"):
    """Selectbox over a list of API records, returning the chosen id."""
    choices = ([None] if allow_none else []) + [o["id"] for o in options]
    if not choices:
        st.selectbox(label, ["No options"], disabled=True, key=key)
        return None
    names = {o["id"]: o.get(label_key) or str(o["id"]) for o in options}
    index = choices.index(value) if value in choices else 0
    return st.selectbox(
        label,
        choices,
        index=index,
        format_func=lambda v: none_label if v is None else names.get(v, str(v)),
        key=key,
    )


def table(records, columns=None):
    if not records:
        st.info("No records found")
        return
    frame = pd.DataFrame(records)
    if columns:
        frame = frame[[c for c in columns if c in frame.columns]]
        frame = frame.rename(columns={c: c.replace("_", " ").title() for c in frame.columns})
    st.dataframe(frame, use_container_width=True, hide_index=True)


def status_badge(status):
    status = (status or "").lower()
    css = {
        "draft": "status-draft",
        "pending": "status-draft",
        "approved": "status-approved",
        "completed": "status-approved",
        "delivered": "status-approved",
        "cancelled": "status-cancelled",
    }.get(status, "status-draft")
    st.markdown(f'<span class="{css}">{status.title() or "Unknown"}</span>', unsafe_allow_html=True)


def reset_on_change(key, value, dependents, state=None):
    """Drop ``dependents`` from session state when the value under ``key`` changes."""
    state = st.session_state if state is None else state
    if key in state and state[key] == value:
        return False
    for name in dependents:
        state.pop(name, None)
    state[key] = value
    return True
