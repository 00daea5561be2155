from typing import Optional

from fastapi import Header, HTTPException


def get_cart_session(x_cart_session: str = Header(default="")) -> str:
    session_id = x_cart_session.strip()
    if not session_id:
        raise HTTPException(status_code=400, detail="X-Cart-Session header is required")
    return session_id


def get_optional_cart_session(x_cart_session: Optional[str] = Header(default=None)) -> Optional[str]:
    """Catalog browsing works without a cart; the session only scopes request superseding."""
    if x_cart_session is None:
        return None
    return x_cart_session.strip() or None
