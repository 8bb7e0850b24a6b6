"""HTTP helper utilities for tests."""

from __future__ import annotations

API = "/api/v1"
AUTH = f"{API}/auth"


def json_headers(auth_token: str | None = None) -> dict[str, str]:
    """Return standard JSON headers.

    Parameters
    ----------
    auth_token:
        Optional bearer token to include.

    Returns
    -------
    dict[str, str]
        HTTP headers dictionary.
    """

    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return headers


def assert_problem(resp, status: int, code: str) -> dict:
    """Assert ``resp`` is an RFC 7807 problem with ``status`` and ``code``.

    Returns
    -------
    dict
        The decoded problem body for further assertions.
    """

    assert resp.status_code == status, resp.get_data(as_text=True)
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["status"] == status
    assert body["code"] == code
    assert body["request_id"]
    return body
