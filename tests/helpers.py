"""
tests.helpers

Small HTTP helpers shared by API tests.
"""

from __future__ import annotations

import httpx


async def signup(client: httpx.AsyncClient, email: str, *roles: str) -> dict[str, str]:
    """Create a user through the dev endpoints and return auth headers for it."""
    r = await client.post("/v1/dev/users", json={"email": email})
    assert r.status_code == 201, r.text
    user_id = r.json()["id"]
    r = await client.post("/v1/dev/token", json={"user_id": user_id, "roles": list(roles)})
    assert r.status_code == 200, r.text
    # x-user-id is ignored by the API; tests read it back for assertions.
    return {"Authorization": f"Bearer {r.json()['access_token']}", "x-user-id": user_id}
