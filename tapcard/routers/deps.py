"""Lookup helpers for services stored on ``app.state``."""
from __future__ import annotations

from typing import Any

from starlette.requests import HTTPConnection


def get_service(conn: HTTPConnection, name: str) -> Any:
    svc = getattr(getattr(conn.app, "state", None), name, None)
    if svc is None:
        raise RuntimeError(f"{name} not configured")
    return svc
