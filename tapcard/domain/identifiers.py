"""Domain helpers for slugs and usernames."""
from __future__ import annotations

import re

# Canonical bound shared by the write path and the editor input.
USERNAME_MAX_LENGTH = 15

_SLUG_RUN_RE = re.compile(r"[^a-z0-9]+")
_USERNAME_STRIP_RE = re.compile(r"[^A-Za-z0-9_]")
SLUG_PATTERN = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")


def generate_slug(name: str | None) -> str:
    """Lower-case ``name`` and collapse runs outside ``[a-z0-9]`` into single dashes."""
    slug = _SLUG_RUN_RE.sub("-", (name or "").lower())
    return slug.strip("-")


def is_valid_slug(value: str | None) -> bool:
    if not value:
        return False
    return bool(SLUG_PATTERN.fullmatch(value))


def normalize_username(raw: str | None, max_length: int = USERNAME_MAX_LENGTH) -> str:
    """Keep ``[A-Za-z0-9_]`` only and truncate to ``max_length``."""
    return _USERNAME_STRIP_RE.sub("", raw or "")[:max_length]


def username_available(candidate: str, found: bool, current_username: str | None = None) -> bool:
    """
    A candidate is available when the lookup found nothing, or when it is the
    current user's own username.
    """
    if current_username and candidate == current_username:
        return True
    return not found
