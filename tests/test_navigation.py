import pytest

from dairyflow import auth
from dairyflow.navigation import GROUPS, PAGES, get_page, visible_pages


def _state(role):
    state = {}
    auth.init_session(state)
    state["logged_in"] = True
    state["token"] = "tok"
    state["user"] = {"id": 1, "email": "x@example.com", "role": role}
    return state


def _keys(state):
    return {page.key for _, pages in visible_pages(state) for page in pages}


def test_page_keys_are_unique():
    assert len({page.key for page in PAGES}) == len(PAGES)
    assert all(page.group in GROUPS for page in PAGES)


def test_get_page():
    assert get_page("sellers").label == "Sellers"
    assert get_page("nope") is None


def test_admin_sees_everything():
    assert _keys(_state(auth.ADMIN)) == {page.key for page in PAGES}


def test_sales_pages():
    assert _keys(_state(auth.SALES)) == {"dashboard", "sales_dashboard", "sales_orders", "sales_report"}


def test_delivery_pages():
    assert _keys(_state(auth.DELIVERY)) == {"dashboard", "purchase_orders", "loading_orders", "delivery_orders"}


@pytest.mark.parametrize("role", [auth.SALES, auth.DELIVERY])
def test_master_data_is_admin_only(role):
    groups = [group for group, _ in visible_pages(_state(role))]
    assert "Master Data" not in groups


def test_groups_follow_sidebar_order():
    groups = [group for group, _ in visible_pages(_state(auth.ADMIN))]
    assert groups == list(GROUPS)
