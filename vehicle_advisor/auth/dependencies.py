from __future__ import annotations

from fastapi import Header, HTTPException

# Identity is established upstream; the gateway forwards it as headers.


def get_current_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> dict | None:
    """Return ``{user_id, role}`` from the forwarded headers, or ``None``."""
    if not x_user_id:
        return None
    return {"user_id": x_user_id, "role": x_user_role or "user"}


def require_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> dict:
    """Raise 401 if the request carries no user identity."""
    user = get_current_user(x_user_id, x_user_role)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> dict:
    """Raise 401 if anonymous, 403 if not admin."""
    user = require_user(x_user_id, x_user_role)
    if user["role"] != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
