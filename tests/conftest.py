import pytest

from dairyflow.api import ApiClient


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ""

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeSession:
    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeClient:
    """Records manager calls and replays canned payloads keyed by path."""

    def __init__(self, payloads=None):
        self.payloads = payloads or {}
        self.calls = []

    def _reply(self, method, path, data):
        self.calls.append((method, path, data))
        return self.payloads.get((method, path), self.payloads.get(path))

    def get(self, path, params=None):
        return self._reply("GET", path, params)

    def post(self, path, payload):
        return self._reply("POST", path, payload)

    def put(self, path, payload):
        return self._reply("PUT", path, payload)

    def delete(self, path):
        return self._reply("DELETE", path, None)

    def upload(self, path, file_name, data, content_type="application/octet-stream"):
        return self._reply("UPLOAD", path, (file_name, data, content_type))


@pytest.fixture
def make_client():
    def _make(*responses, token="tok"):
        session = FakeSession(responses)
        return ApiClient("https://example.test/apiapp/", token=token, session=session), session

    return _make
