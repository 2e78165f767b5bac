"""
Utility helpers shared across routers/services.
"""

import math
from typing import Optional

from .config import get_settings


def asset_url(path: Optional[str], base: Optional[str] = None, fallback: str = "") -> str:
    """
    Turn a stored asset path (avatar, thumbnail) into an absolute URL using
    IMAGE_BASE_URL. Absolute URLs pass through; empty paths give ``fallback``.
    """
    p = (path or "").strip()
    if not p:
        return fallback
    if p.startswith("http://") or p.startswith("https://") or p.startswith("data:"):
        return p
    base_url = (base if base is not None else get_settings().image_base_url).rstrip("/")
    if not base_url:
        return p if p.startswith("/") else "/" + p
    return f"{base_url}/{p.lstrip('/')}"


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the credential from an ``Authorization: Bearer <token>`` header."""
    value = (authorization or "").strip()
    if not value:
        return None
    scheme, _, token = value.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def truthy(value) -> bool:
    """Read remote flags that arrive as bools, 0/1 or "0"/"1"."""
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def int_or_zero(value, default: int = 0) -> int:
    try:
        if value in (None, ""):
            return default
        return int(value)
    except (TypeError, ValueError):
        return default


def float_or_zero(value, default: float = 0.0) -> float:
    """Coerce to a finite float; NaN and infinities count as missing."""
    try:
        if value in (None, ""):
            return default
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default
