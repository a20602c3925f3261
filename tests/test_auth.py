import pytest

from dairyflow import auth
from dairyflow.api import ApiClient, AuthenticationError
from dairyflow.config import Settings

from conftest import FakeResponse, FakeSession


def logged_in(role="admin"):
    state = {}
    auth.init_session(state)
    state.update(
        logged_in=True,
        token="tok",
        user={"username": "asha", "first_name": "Asha", "last_name": "Patil", "role": role},
    )
    return state


def test_init_session_sets_defaults_once():
    state = {"current_page": "products"}
    auth.init_session(state)
    assert state == {"logged_in": False, "user": None, "token": None, "current_page": "products"}


def test_login_stores_user_and_token():
    session = FakeSession([FakeResponse(200, {"user": {"role": "sales", "first_name": "Ravi"}, "token": "t1"})])
    client = ApiClient("https://example.test/apiapp", session=session)
    state = {"current_page": "users"}

    user = auth.login(client, "  ravi@example.test ", "secret", state)

    assert user["first_name"] == "Ravi"
    assert state["token"] == "t1"
    assert state["current_page"] == auth.DEFAULT_PAGE
    assert auth.is_authenticated(state)
    assert session.calls[0][2]["json"]["email"] == "ravi@example.test"


def test_failed_login_leaves_session_anonymous():
    session = FakeSession([FakeResponse(401, {"detail": "Invalid credentials"})])
    client = ApiClient("https://example.test/apiapp", session=session)
    state = {}
    auth.init_session(state)

    with pytest.raises(AuthenticationError):
        auth.login(client, "x@example.test", "bad", state)
    assert not auth.is_authenticated(state)


def test_logout_clears_credentials():
    state = logged_in()
    state["current_page"] = "sellers"
    auth.logout(state)
    assert state["user"] is None
    assert state["token"] is None
    assert state["current_page"] == auth.DEFAULT_PAGE
    assert not auth.is_authenticated(state)


def test_has_role_accepts_single_role_or_list():
    state = logged_in("delivery")
    assert auth.has_role("delivery", state)
    assert auth.has_role(["admin", "delivery"], state)
    assert not auth.has_role("admin", state)
    assert not auth.has_role("admin", {})


def test_can_access():
    assert auth.can_access((), logged_in("sales"))
    assert auth.can_access(("admin", "sales"), logged_in("sales"))
    assert not auth.can_access(("admin",), logged_in("sales"))
    assert not auth.can_access((), {"logged_in": False})


def test_display_name_falls_back_to_username():
    assert auth.display_name({"first_name": "Asha", "last_name": "Patil"}) == "Asha Patil"
    assert auth.display_name({"first_name": "", "last_name": None, "username": "asha"}) == "asha"
    assert auth.display_name(None) == ""


def test_api_client_uses_session_token():
    settings = Settings(api_base_url="https://example.test/apiapp", request_timeout=5)
    client = auth.api_client(logged_in(), settings=settings)
    assert client.token == "tok"
    assert client.timeout == 5
    assert client.base_url == "https://example.test/apiapp"
