from __future__ import annotations

from fastapi import Header, HTTPException

USER_HEADER = "X-BetterTodo-User"


def get_current_user_id(user_id: str | None = Header(default=None, alias=USER_HEADER)) -> str:
    # Identity is asserted by the fronting auth proxy.
    if not user_id or not user_id.strip():
        raise HTTPException(status_code=401, detail="unauthorized")
    return user_id.strip()
