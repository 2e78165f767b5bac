"""User and profile records from the remote API, plus the editor write-back form."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

from tapcard.core.utils import truthy

from .platforms import SocialLink


@dataclass(frozen=True)
class Profile:
    bio: str = ""
    phone: str = ""
    website: str = ""
    location: str = ""
    social_links: Tuple[SocialLink, ...] = ()

    @property
    def visible_links(self) -> Tuple[SocialLink, ...]:
        return tuple(link for link in self.social_links if link.is_visible)


@dataclass(frozen=True)
class User:
    id: Optional[int] = None
    email: str = ""
    username: str = ""
    name: str = ""
    display_name: str = ""
    firstname: str = ""
    lastname: str = ""
    avatar_url: str = ""
    profile: Profile = field(default_factory=Profile)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _link_id(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def social_link_from_payload(data: Mapping[str, Any]) -> SocialLink:
    visible = data.get("is_visible", data.get("isVisible", True))
    return SocialLink(
        id=_link_id(data.get("id")),
        platform=_text(data.get("platform")),
        url=_text(data.get("url")),
        display_name=_text(data.get("display_name", data.get("username"))),
        is_visible=truthy(visible),
    )


def profile_from_payload(data: Optional[Mapping[str, Any]]) -> Profile:
    data = data or {}
    raw_links = data.get("social_links")
    if raw_links is None:
        raw_links = data.get("socialLinks")
    links: List[SocialLink] = []
    if isinstance(raw_links, list):
        links = [social_link_from_payload(item) for item in raw_links if isinstance(item, Mapping)]
    return Profile(
        bio=_text(data.get("bio")),
        phone=_text(data.get("phone")),
        website=_text(data.get("website")),
        location=_text(data.get("location")),
        social_links=tuple(links),
    )


def user_from_payload(data: Optional[Mapping[str, Any]]) -> Optional[User]:
    """Decode a remote user object; ``None`` or an empty payload means no user."""
    if not data:
        return None
    profile = data.get("profile")
    return User(
        id=_link_id(data.get("id")),
        email=_text(data.get("email")),
        username=_text(data.get("username")),
        name=_text(data.get("name")),
        display_name=_text(data.get("display_name")),
        firstname=_text(data.get("firstname")),
        lastname=_text(data.get("lastname")),
        avatar_url=_text(data.get("avatar_url") or data.get("profile_image")),
        profile=profile_from_payload(profile if isinstance(profile, Mapping) else None),
    )


def contact_name(user: Optional[User]) -> str:
    """display_name, then name, then username; empty when none is set."""
    if user is None:
        return ""
    for candidate in (user.display_name, user.name, user.username):
        value = (candidate or "").strip()
        if value:
            return value
    return ""


def split_entries(value: Optional[str]) -> List[str]:
    """Phones and emails may hold several comma-separated entries."""
    return [item.strip() for item in (value or "").split(",") if item.strip()]


def profile_to_form(user: User) -> List[Tuple[str, str]]:
    """
    Full form payload for ``POST /profile``. Every field and every link is
    sent; the remote API does not accept partial patches.
    """
    profile = user.profile
    form: List[Tuple[str, str]] = [
        ("name", user.name),
        ("firstname", user.firstname),
        ("lastname", user.lastname),
        ("display_name", user.display_name),
        ("username", user.username),
        ("bio", profile.bio),
        ("phone", profile.phone),
        ("website", profile.website),
        ("location", profile.location),
    ]
    for index, link in enumerate(profile.social_links):
        prefix = f"social_links[{index}]"
        if link.id is not None:
            form.append((f"{prefix}[id]", str(link.id)))
        form.append((f"{prefix}[platform]", link.platform))
        form.append((f"{prefix}[url]", link.url))
        form.append((f"{prefix}[display_name]", link.display_name))
        form.append((f"{prefix}[is_visible]", "1" if link.is_visible else "0"))
    return form
