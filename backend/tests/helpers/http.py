"""HTTP helper utilities for tests."""

from __future__ import annotations

AUTH_PREFIX = "/api/v1/auth"


def bearer(token: str) -> dict[str, str]:
    """Authorization header carrying ``token``."""

    return {"Authorization": f"Bearer {token}"}


def assert_problem(resp, status: int, code: str) -> dict:
    """Assert an RFC 7807 response with the given status and error code.

    Returns
    -------
    dict
        The decoded problem document.
    """

    assert resp.status_code == status, resp.get_data(as_text=True)
    assert resp.mimetype == "application/problem+json"
    problem = resp.get_json()
    assert problem["status"] == status
    assert problem["code"] == code
    assert problem["request_id"]
    return problem
