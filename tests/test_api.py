import pytest
import requests

from dairyflow.api import ApiError, AuthenticationError, PermissionDeniedError, results

from conftest import FakeResponse


def test_get_sends_bearer_token_and_drops_empty_params(make_client):
    client, session = make_client(FakeResponse(200, [{"id": 1}]))
    data = client.get("routes/", {"route": 3, "delivery_date": "", "status": None})

    assert data == [{"id": 1}]
    method, url, kwargs = session.calls[0]
    assert method == "GET"
    assert url == "https://example.test/apiapp/routes/"
    assert kwargs["params"] == {"route": 3}
    assert kwargs["headers"]["Authorization"] == "Bearer tok"


def test_no_authorization_header_without_token(make_client):
    client, session = make_client(FakeResponse(200, []), token=None)
    client.get("routes/")
    assert "Authorization" not in session.calls[0][2]["headers"]


def test_leading_slash_resolves_against_host_root(make_client):
    client, _ = make_client()
    assert client.url("/delivery-get-route-sales-summary/") == (
        "https://example.test/delivery-get-route-sales-summary/"
    )
    assert client.url("orders/sales/4/") == "https://example.test/apiapp/orders/sales/4/"


def test_post_sends_json_body(make_client):
    client, session = make_client(FakeResponse(201, {"id": 9, "name": "North"}))
    created = client.post("routes/", {"name": "North", "code": "N"})
    assert created["id"] == 9
    assert session.calls[0][2]["json"] == {"name": "North", "code": "N"}


def test_delete_no_content_returns_none(make_client):
    client, _ = make_client(FakeResponse(204))
    assert client.delete("routes/3/") is None


def test_unauthorized_raises_authentication_error(make_client):
    client, _ = make_client(FakeResponse(401, {"detail": "Token expired"}))
    with pytest.raises(AuthenticationError) as info:
        client.get("products/")
    assert info.value.status == 401
    assert str(info.value) == "Token expired"


def test_forbidden_raises_permission_error(make_client):
    client, _ = make_client(FakeResponse(403, {"detail": "Nope"}))
    with pytest.raises(PermissionDeniedError):
        client.get("users/")


def test_validation_error_detail_is_flattened(make_client):
    client, _ = make_client(FakeResponse(400, {"code": ["This field must be unique."], "name": "Required"}))
    with pytest.raises(ApiError) as info:
        client.post("routes/", {})
    assert info.value.status == 400
    assert info.value.detail == "code: This field must be unique.; name: Required"


def test_plain_text_error_body(make_client):
    client, _ = make_client(FakeResponse(500, None, text="Server Error"))
    with pytest.raises(ApiError) as info:
        client.get("routes/")
    assert info.value.detail == "Server Error"


def test_network_failure_becomes_api_error(make_client):
    client, _ = make_client(requests.ConnectionError("down"))
    with pytest.raises(ApiError) as info:
        client.get("routes/")
    assert info.value.status is None
    assert "Could not reach the server" in str(info.value)


def test_upload_sends_multipart_file(make_client):
    client, session = make_client(FakeResponse(200, {"message": "ok"}))
    client.upload("price-plans/upload/", "plan.xlsx", b"data", "application/x")
    assert session.calls[0][2]["files"] == {"file": ("plan.xlsx", b"data", "application/x")}


def test_login_accepts_token_key(make_client):
    client, session = make_client(FakeResponse(200, {"user": {"role": "admin"}, "token": "abc"}), token=None)
    user, token = client.login("a@b.c", "pw")
    assert token == "abc"
    assert client.token == "abc"
    assert user["role"] == "admin"
    assert session.calls[0][2]["json"] == {"email": "a@b.c", "password": "pw"}


def test_login_accepts_jwt_access_key(make_client):
    client, _ = make_client(FakeResponse(200, {"user": {"role": "sales"}, "access": "jwt", "refresh": "r"}))
    _, token = client.login("a@b.c", "pw")
    assert token == "jwt"


def test_login_without_token_fails(make_client):
    client, _ = make_client(FakeResponse(200, {"user": {"role": "sales"}}))
    with pytest.raises(AuthenticationError):
        client.login("a@b.c", "pw")


def test_results_handles_list_and_paginated_payloads():
    assert results([1, 2]) == [1, 2]
    assert results({"count": 2, "results": [1, 2]}) == [1, 2]
    assert results({"count": 0, "results": None}) == []
    assert results(None) == []
