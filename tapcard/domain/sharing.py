"""Canonical public profile URL, shared by QR codes, copy-link and share actions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .templates import Template

DEFAULT_SHARE_TITLE = "My Profile"


@dataclass(frozen=True)
class SharePayload:
    url: str
    qr_payload: str
    title: str
    text: str


def profile_url(origin: str, identifier: str) -> str:
    """
    ``{origin}/{identifier}`` with no trailing slash on the origin. The
    identifier is not encoded: usernames and slugs are already URL-safe.
    """
    base = (origin or "").strip().rstrip("/")
    ident = (identifier or "").strip().strip("/")
    return f"{base}/{ident}"


def share_payload(origin: str, identifier: str, template: Optional[Template] = None) -> SharePayload:
    url = profile_url(origin, identifier)
    title = (template.name if template else "") or DEFAULT_SHARE_TITLE
    text = template.description if template else ""
    return SharePayload(url=url, qr_payload=url, title=title, text=text)
