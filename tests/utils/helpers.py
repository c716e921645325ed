from typing import Any

import httpx


def create_auth_headers(token: str) -> dict[str, str]:
    """Create Authorization headers with Bearer token."""
    return {"Authorization": f"Bearer {token}"}


def set_access_token_cookie(client: httpx.AsyncClient, access_token: str) -> None:
    """Set the identity token cookie on the test client."""
    client.cookies.set("access_token", access_token)


def assert_error_response(data: dict[str, Any], code: str) -> None:
    assert data["success"] is False
    assert data["error"]["code"] == code
    assert data["error"]["message"]


def ticket_ids(data: dict[str, Any]) -> set[str]:
    return {item["id"] for item in data["data"]}
