"""Thin HTTP client for the dairy backend.

Every screen talks to the backend through :class:`ApiClient`. Paths are
relative to the configured API base (``routes/``, ``orders/sales/12/``);
a path starting with ``/`` is resolved against the host root instead, which
is where a couple of legacy delivery endpoints live.
"""

from urllib.parse import urlsplit

import requests

from .logging_config import get_logger

log = get_logger(__name__)


class ApiError(Exception):
    def __init__(self, message, status=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    @property
    def detail(self):
        """Human readable error text, flattening DRF style error bodies."""
        payload = self.payload
        if isinstance(payload, dict):
            if "detail" in payload:
                return str(payload["detail"])
            parts = []
            for field, errors in payload.items():
                if isinstance(errors, (list, tuple)):
                    errors = ", ".join(str(e) for e in errors)
                parts.append(f"{field}: {errors}")
            if parts:
                return "; ".join(parts)
        elif isinstance(payload, list) and payload:
            return ", ".join(str(p) for p in payload)
        elif isinstance(payload, str) and payload.strip():
            return payload.strip()
        return self.message

    def __str__(self):
        return self.detail


class AuthenticationError(ApiError):
    pass


class PermissionDeniedError(ApiError):
    pass


def results(data):
    """Return the record list from a plain or paginated payload."""
    if data is None:
        return []
    if isinstance(data, dict):
        return list(data.get("results") or [])
    return list(data)


class ApiClient:
    def __init__(self, base_url, token=None, timeout=15, session=None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def root_url(self):
        parts = urlsplit(self.base_url)
        return f"{parts.scheme}://{parts.netloc}"

    def url(self, path):
        if path.startswith(("http://", "https://")):
            return path
        if path.startswith("/"):
            return self.root_url + path
        return f"{self.base_url}/{path}"

    def _headers(self):
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method, path, params=None, payload=None, files=None):
        url = self.url(path)
        log.debug("%s %s params=%s", method, path, params)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                files=files,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            log.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Could not reach the server ({exc.__class__.__name__})") from exc

        if response.status_code == 204:
            return None

        try:
            body = response.json()
        except ValueError:
            body = response.text or None

        if response.ok:
            return body

        log.warning("%s %s -> HTTP %s", method, path, response.status_code)
        if response.status_code == 401:
            raise AuthenticationError("Your session has expired. Please login again.", 401, body)
        if response.status_code == 403:
            raise PermissionDeniedError("You don't have permission to do that.", 403, body)
        raise ApiError(f"Request failed with status {response.status_code}", response.status_code, body)

    def get(self, path, params=None):
        return self.request("GET", path, params=_clean(params))

    def post(self, path, payload):
        return self.request("POST", path, payload=payload)

    def put(self, path, payload):
        return self.request("PUT", path, payload=payload)

    def delete(self, path):
        return self.request("DELETE", path)

    def upload(self, path, file_name, data, content_type="application/octet-stream"):
        return self.request("POST", path, files={"file": (file_name, data, content_type)})

    def login(self, email, password):
        data = self.request("POST", "auth/login/", payload={"email": email, "password": password})
        if not isinstance(data, dict):
            raise ApiError("Unexpected login response", payload=data)
        token = data.get("token") or data.get("access")
        user = data.get("user")
        if not token or not user:
            raise AuthenticationError("Invalid email or password", payload=data)
        self.token = token
        log.info("Logged in as %s (%s)", user.get("username") or email, user.get("role"))
        return user, token


def _clean(params):
    if not params:
        return None
    return {k: v for k, v in params.items() if v not in (None, "")}
