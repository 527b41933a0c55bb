"""GitHub identity lookup.

CONTRACT
- Inputs: bearer token, API base URL
- Outputs (required):
  - AuthUser(login, name, email) of the token's account
- Invariants:
  - One request to `GET <api>/user`, never retried
- Failure:
  - Raises AuthError on 401/403, other HTTP errors, network errors or a malformed body
"""

from __future__ import annotations

import httpx
from loguru import logger
from pydantic import ValidationError

from .errors import AuthError
from .schemas import AuthUser

DEFAULT_API_URL = "https://api.github.com"


async def get_auth_user(
    token: str,
    *,
    api_url: str = DEFAULT_API_URL,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AuthUser:
    if not token:
        raise AuthError("You need to provide a GitHub token in the `github-token` input")

    url = api_url.rstrip("/") + "/user"
    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    try:
        async with httpx.AsyncClient(timeout=30, transport=transport) as client:
            response = await client.get(url, headers=headers)
    except httpx.HTTPError as exc:
        raise AuthError(f"Unable to reach GitHub API at {api_url}: {exc}") from exc

    if response.status_code in (401, 403):
        raise AuthError(f"Invalid or expired GitHub token (HTTP {response.status_code})")
    if response.status_code >= 400:
        raise AuthError(f"GitHub API returned HTTP {response.status_code} for {url}")

    try:
        payload = response.json()
        if not isinstance(payload, dict) or not payload.get("login"):
            raise ValueError("missing login")
        user = AuthUser.from_github(payload)
    except (ValueError, ValidationError) as exc:
        raise AuthError(f"Unexpected response from {url}: {exc}") from exc

    logger.info(f"Authenticated as {user.login}")
    return user
