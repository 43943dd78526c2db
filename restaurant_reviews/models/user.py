"""
Caller identity decoded from an access token issued by the auth service
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, field_validator


class User(BaseModel):
    """The authenticated caller; reviews and likes are keyed by its integer id"""

    id: int
    email: Optional[str] = None
    roles: List[str] = []

    @field_validator("roles", mode="before")
    @classmethod
    def normalize_roles(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [str(role).lower() for role in v]

    @classmethod
    def from_token_payload(cls, payload: Dict[str, Any]) -> "User":
        """
        Build the caller from a decoded token.

        The id may arrive as ``id``, ``user_id`` or ``sub``, and as an int or a
        numeric string. Roles may arrive as a ``roles`` list or a single
        ``role``.

        Raises:
            ValueError: no usable numeric user id in the payload
        """
        raw_id = payload.get("id") or payload.get("user_id") or payload.get("sub")
        if raw_id is None or isinstance(raw_id, bool):
            raise ValueError("Token carries no user identifier")
        try:
            user_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValueError(f"Token user identifier is not numeric: {raw_id!r}")

        return cls(
            id=user_id,
            email=payload.get("email"),
            roles=payload.get("roles") or payload.get("role"),
        )

    def is_admin(self) -> bool:
        return "admin" in self.roles
