"""Color and font resolution for templates."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

COLOR_SLOTS = ("primary", "secondary", "accent", "background", "text")
FONT_SLOTS = ("heading", "body")

DEFAULT_COLORS = {
    "primary": "#1f2937",
    "secondary": "#4b5563",
    "accent": "#3b82f6",
    "background": "#ffffff",
    "text": "#111827",
}

DEFAULT_FONTS = {
    "heading": "Inter",
    "body": "Inter",
}

HEX6_RE = re.compile(r"#[0-9a-fA-F]{6}")


@dataclass(frozen=True)
class Colors:
    primary: str = DEFAULT_COLORS["primary"]
    secondary: str = DEFAULT_COLORS["secondary"]
    accent: str = DEFAULT_COLORS["accent"]
    background: str = DEFAULT_COLORS["background"]
    text: str = DEFAULT_COLORS["text"]


@dataclass(frozen=True)
class Fonts:
    heading: str = DEFAULT_FONTS["heading"]
    body: str = DEFAULT_FONTS["body"]


@dataclass(frozen=True)
class Theme:
    colors: Colors
    fonts: Fonts

    def as_dict(self) -> dict:
        return {
            "colors": {slot: getattr(self.colors, slot) for slot in COLOR_SLOTS},
            "fonts": {slot: getattr(self.fonts, slot) for slot in FONT_SLOTS},
        }


def _section(partial: Any, name: str) -> Mapping[str, Any]:
    if partial is None:
        return {}
    if isinstance(partial, Theme):
        return partial.as_dict()[name]
    if isinstance(partial, Mapping):
        value = partial.get(name)
        if isinstance(value, (Colors, Fonts)):
            slots = COLOR_SLOTS if name == "colors" else FONT_SLOTS
            return {slot: getattr(value, slot) for slot in slots}
        return value if isinstance(value, Mapping) else {}
    return {}


def _pick(section: Mapping[str, Any], slot: str, fallback: str) -> str:
    value = section.get(slot)
    if not isinstance(value, str):
        return fallback
    value = value.strip()
    return value or fallback


def resolve_theme(partial: Any = None) -> Theme:
    """
    Merge a partial theme (mapping with optional ``colors``/``fonts``, a Theme,
    or None) with the system defaults.

    Any slot that is missing, not a string, or blank falls back to its default.
    The input is never mutated and the function never raises.
    """
    colors = _section(partial, "colors")
    fonts = _section(partial, "fonts")
    return Theme(
        colors=Colors(**{slot: _pick(colors, slot, DEFAULT_COLORS[slot]) for slot in COLOR_SLOTS}),
        fonts=Fonts(**{slot: _pick(fonts, slot, DEFAULT_FONTS[slot]) for slot in FONT_SLOTS}),
    )


def tint(color: str, alpha: str = "15") -> str:
    """Append a hex alpha suffix to ``#rrggbb`` colors; other values pass through."""
    if HEX6_RE.fullmatch(color or ""):
        return f"{color}{alpha}"
    return color
