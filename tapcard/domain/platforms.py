"""
Social link classification and messaging deep links.

A platform name is classified once into a ``Platform`` value; everything
downstream (deep links, editor resets, rendering, vCard) switches on
``Platform.kind`` instead of matching strings again.
"""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass, replace
from typing import Optional, Union

MAX_PHONE_DIGITS = 11

MESSAGING_RE = re.compile(
    r"^(whatsapp|whats\s*app|viber|kakaotalk|kakao\s*talk|wechat|we\s*chat|telegram)$",
    re.IGNORECASE,
)

ICON_KEYS = frozenset({"facebook", "instagram", "twitter", "linkedin", "github", "youtube", "tiktok"})
DEFAULT_ICON = "globe"

_EXTERNAL_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*:", re.IGNORECASE)
_WEB_SCHEME_RE = re.compile(r"^(https?://|mailto:|tel:|sms:)", re.IGNORECASE)


class PlatformKind(str, enum.Enum):
    INSTAGRAM = "instagram"
    WHATSAPP = "whatsapp"
    VIBER = "viber"
    TELEGRAM = "telegram"
    KAKAO = "kakao"
    WECHAT = "wechat"
    OTHER = "other"


MESSAGING_KINDS = frozenset(
    {PlatformKind.WHATSAPP, PlatformKind.VIBER, PlatformKind.TELEGRAM, PlatformKind.KAKAO, PlatformKind.WECHAT}
)

# Precedence when more than one key occurs in a compacted name.
_MESSAGING_PRECEDENCE = (
    ("whatsapp", PlatformKind.WHATSAPP),
    ("viber", PlatformKind.VIBER),
    ("telegram", PlatformKind.TELEGRAM),
    ("kakao", PlatformKind.KAKAO),
    ("wechat", PlatformKind.WECHAT),
)

_DEEP_LINKS = {
    PlatformKind.WHATSAPP: "https://wa.me/{digits}",
    PlatformKind.VIBER: "viber://chat?number={digits}",
    PlatformKind.TELEGRAM: "https://t.me/{digits}",
    PlatformKind.KAKAO: "https://open.kakao.com/o/{digits}",
    PlatformKind.WECHAT: "weixin://dl/chat?{digits}",
}


@dataclass(frozen=True)
class Platform:
    kind: PlatformKind
    name: str

    @property
    def is_messaging(self) -> bool:
        return self.kind in MESSAGING_KINDS

    @property
    def icon(self) -> str:
        key = self.name.strip().lower()
        return key if key in ICON_KEYS else DEFAULT_ICON

    @property
    def type_label(self) -> str:
        """Lower-cased name used as the vCard ``X-SOCIALPROFILE`` type."""
        return self.name.strip().lower() or "social"


def classify_platform(name: Optional[str]) -> Platform:
    """Classify a free-text platform name. Never raises; unknown names map to OTHER."""
    raw = name or ""
    trimmed = raw.strip()
    if MESSAGING_RE.match(trimmed):
        compact = re.sub(r"\s+", "", trimmed.lower())
        for key, kind in _MESSAGING_PRECEDENCE:
            if key in compact:
                return Platform(kind, raw)
    if trimmed.lower() == "instagram":
        return Platform(PlatformKind.INSTAGRAM, raw)
    return Platform(PlatformKind.OTHER, raw)


def is_messaging(name: Optional[str]) -> bool:
    return classify_platform(name).is_messaging


def _as_platform(platform: Union[Platform, str, None]) -> Platform:
    if isinstance(platform, Platform):
        return platform
    return classify_platform(platform)


def derive_deep_link(platform: Union[Platform, str, None], digits: str) -> str:
    """
    Build the deep link for a messaging platform from digits-only input.

    Digits are trusted (the caller strips them first). Empty digits or a
    non-messaging platform yield ``""``.
    """
    if not digits:
        return ""
    template = _DEEP_LINKS.get(_as_platform(platform).kind)
    if not template:
        return ""
    return template.format(digits=digits)


def sanitize_phone_digits(raw: Optional[str]) -> str:
    """Drop every non-digit and cap at MAX_PHONE_DIGITS."""
    return re.sub(r"\D", "", raw or "")[:MAX_PHONE_DIGITS]


def normalize_external_url(value: Optional[str]) -> str:
    """
    Make sure a web link carries a scheme (``https://`` when missing).
    Values that already have one (http, mailto, tel, app deep links) stay intact.
    """
    v = (value or "").strip()
    if not v:
        return ""
    if _WEB_SCHEME_RE.match(v):
        return v
    # host:port without a scheme
    if re.match(r"^[^:/]+:\d", v):
        return "https://" + v
    if _EXTERNAL_SCHEME_RE.match(v):
        return v
    return "https://" + v.lstrip("/")


@dataclass(frozen=True)
class SocialLink:
    id: Optional[int] = None
    platform: str = ""
    url: str = ""
    display_name: str = ""
    is_visible: bool = True

    @property
    def classified(self) -> Platform:
        return classify_platform(self.platform)


def change_platform(link: SocialLink, new_platform: str) -> SocialLink:
    """
    Rename a link's platform. When the messaging classification flips, the
    previous url/display_name no longer mean the same thing and are cleared.
    Between two messaging platforms the deep link is re-derived.
    """
    was_messaging = link.classified.is_messaging
    updated = replace(link, platform=new_platform)
    platform = updated.classified
    if platform.is_messaging != was_messaging:
        return replace(updated, url="", display_name="")
    if platform.is_messaging:
        return replace(updated, url=derive_deep_link(platform, updated.display_name))
    return updated


def change_handle(link: SocialLink, raw: str) -> SocialLink:
    """
    Update the display name. For messaging platforms the value is a phone
    number: it is reduced to digits and the url is re-derived from it.
    """
    platform = link.classified
    if platform.is_messaging:
        digits = sanitize_phone_digits(raw)
        return replace(link, display_name=digits, url=derive_deep_link(platform, digits))
    return replace(link, display_name=raw or "")


def change_url(link: SocialLink, raw: str) -> SocialLink:
    """Set a web link's url. Messaging links derive theirs and ignore this."""
    if link.classified.is_messaging:
        return link
    return replace(link, url=(raw or "").strip())


def set_visibility(link: SocialLink, visible: bool) -> SocialLink:
    return replace(link, is_visible=bool(visible))
