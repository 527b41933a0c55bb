from __future__ import annotations

"""Data schemas.

CONTRACT
- Inputs: Pydantic models
- Outputs:
  - Validated, JSON-serializable objects
- Invariants:
  - AuthUser is immutable once built
  - CacheManifest has a schema_version int field
- Failure:
  - Raises ValidationError on schema mismatch
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str
    name: str
    email: str

    @classmethod
    def from_github(cls, payload: dict[str, Any]) -> AuthUser:
        """Build from a `GET /user` body, filling the optional fields."""
        login = str(payload["login"])
        name = payload.get("name") or login
        email = payload.get("email")
        if not email:
            user_id = payload.get("id")
            prefix = f"{user_id}+" if user_id is not None else ""
            email = f"{prefix}{login}@users.noreply.github.com"
        return cls(login=login, name=str(name), email=str(email))


class CacheManifest(BaseModel):
    schema_version: int = 1
    key: str
    created_at: float
    size_bytes: int = 0
    files: int = Field(default=0, ge=0)
