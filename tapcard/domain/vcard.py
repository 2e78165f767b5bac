"""
vCard 3.0 export for a user's card.

``build_vcard`` is pure: identical input always gives byte-identical output.
Text values follow the vCard 3.0 escaping rules (backslash, comma, semicolon,
newline); URI-like values only lose their control characters. Long lines are
folded at 75 octets with CRLF + space.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .platforms import SocialLink, normalize_external_url
from .profiles import Profile, User, contact_name, split_entries

FOLD_LIMIT = 75  # octets, excluding the CRLF
CRLF = "\r\n"

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_PARAM_UNSAFE_RE = re.compile(r"[\x00-\x1f\x7f;:,\"]")


class ContactCardError(Exception):
    """Base exception for contact card export."""


class MissingContactNameError(ContactCardError):
    """Raised when the user has no display name, name or username (FN is mandatory)."""


def escape_text(value: Optional[str]) -> str:
    if not value:
        return ""
    v = value.replace("\r\n", "\n").replace("\r", "\n")
    v = v.replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,").replace("\n", "\\n")
    return _CONTROL_RE.sub("", v)


def clean_uri(value: Optional[str]) -> str:
    return _CONTROL_RE.sub("", (value or "").strip())


def clean_param(value: Optional[str]) -> str:
    return _PARAM_UNSAFE_RE.sub("", value or "").strip()


def fold_line(line: str) -> str:
    """Fold on UTF-8 octet boundaries without splitting a character."""
    if len(line.encode("utf-8")) <= FOLD_LIMIT:
        return line
    parts: List[str] = []
    current = ""
    size = 0
    # continuation lines start with a space, which counts towards the limit
    limit = FOLD_LIMIT
    for ch in line:
        width = len(ch.encode("utf-8"))
        if size + width > limit:
            parts.append(current)
            current = ""
            size = 0
            limit = FOLD_LIMIT - 1
        current += ch
        size += width
    parts.append(current)
    return (CRLF + " ").join(parts)


def _name_line(user: User, full_name: str) -> str:
    last = (user.lastname or "").strip()
    first = (user.firstname or "").strip()
    if last or first:
        return f"N:{escape_text(last)};{escape_text(first)};;;"
    return f"N:{escape_text(full_name)};;;;"


def build_vcard(user: User, profile: Optional[Profile] = None, links: Optional[Iterable[SocialLink]] = None) -> str:
    """
    Assemble the vCard text for ``user``.

    ``profile`` defaults to ``user.profile`` and ``links`` to its visible
    links. Invisible links are skipped even when passed explicitly. Lines whose
    source value is empty are omitted.
    """
    full_name = contact_name(user)
    if not full_name:
        raise MissingContactNameError("Cannot build a contact card without a name")
    profile = profile if profile is not None else user.profile
    if links is None:
        links = profile.visible_links

    lines = [
        "BEGIN:VCARD",
        "VERSION:3.0",
        _name_line(user, full_name),
        f"FN:{escape_text(full_name)}",
    ]
    for phone in split_entries(profile.phone):
        lines.append(f"TEL;TYPE=CELL:{clean_uri(phone)}")
    for email in split_entries(user.email):
        lines.append(f"EMAIL;TYPE=INTERNET:{clean_uri(email)}")
    website = clean_uri(normalize_external_url(profile.website))
    if website:
        lines.append(f"URL:{website}")
    location = (profile.location or "").strip()
    if location:
        lines.append(f"ADR;TYPE=HOME:;;;{escape_text(location)};;;")
    bio = (profile.bio or "").strip()
    if bio:
        lines.append(f"NOTE:{escape_text(bio)}")
    for link in links:
        if not link.is_visible:
            continue
        url = clean_uri(link.url)
        if not url:
            continue
        kind = clean_param(link.classified.type_label) or "social"
        lines.append(f"X-SOCIALPROFILE;TYPE={kind}:{url}")
    lines.append("END:VCARD")
    return CRLF.join(fold_line(line) for line in lines).strip()


def vcard_filename(user: Optional[User]) -> str:
    """``{display_name or username}.vcf``, ``contact.vcf`` when neither is set."""
    base = ""
    if user is not None:
        base = (user.display_name or "").strip() or (user.username or "").strip()
    base = re.sub(r"[\\/\"\x00-\x1f\x7f]", "", base).strip() or "contact"
    return f"{base}.vcf"
