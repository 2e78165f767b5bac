"""Template records as served by the remote API, and their write-back payload."""
from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field, replace
from typing import Any, List, Mapping, Optional

from tapcard.core.utils import float_or_zero, int_or_zero, truthy

from .pricing import Category, Pricing
from .theme import COLOR_SLOTS, FONT_SLOTS


class Layout(str, enum.Enum):
    PROFESSIONAL = "professional"
    CREATIVE = "creative"

    @classmethod
    def parse(cls, value: Any) -> "Layout":
        text = str(value or "").strip().lower()
        for item in cls:
            if item.value == text:
                return item
        return cls.PROFESSIONAL


class ConnectStyle(str, enum.Enum):
    GRID = "grid"
    LIST = "list"

    @classmethod
    def parse(cls, value: Any) -> "ConnectStyle":
        text = str(value or "").strip().lower()
        return cls.LIST if text == cls.LIST.value else cls.GRID


def _decode_json(value: Any, expected: type) -> Any:
    # The remote API stores colors/fonts/features/tags as JSON strings.
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return expected()
    return value if isinstance(value, expected) else expected()


def _str_list(value: Any) -> List[str]:
    items = _decode_json(value, list)
    return [str(item).strip() for item in items if str(item or "").strip()]


def _partial_section(value: Any, slots: tuple) -> dict:
    section = _decode_json(value, dict)
    return {slot: section[slot] for slot in slots if slot in section}


@dataclass(frozen=True)
class Template:
    id: str = ""
    slug: str = ""
    name: str = ""
    description: str = ""
    preview_url: str = ""
    thumbnail_url: str = ""
    pricing: Pricing = field(default_factory=Pricing)
    layout: Layout = Layout.PROFESSIONAL
    connect_style: ConnectStyle = ConnectStyle.GRID
    # Partial theme exactly as stored; resolve_theme fills the gaps.
    colors: Mapping[str, Any] = field(default_factory=dict)
    fonts: Mapping[str, Any] = field(default_factory=dict)
    features: tuple = ()
    tags: tuple = ()
    is_popular: bool = False
    is_new: bool = False
    is_hidden: bool = False
    downloads: int = 0
    created_at: str = ""
    updated_at: str = ""

    @property
    def category(self) -> Category:
        return self.pricing.category

    @property
    def is_premium(self) -> bool:
        return self.pricing.is_premium

    @property
    def theme_input(self) -> dict:
        return {"colors": dict(self.colors), "fonts": dict(self.fonts)}

    def with_pricing(self, pricing: Pricing) -> "Template":
        return replace(self, pricing=pricing)


def template_from_payload(data: Optional[Mapping[str, Any]]) -> Template:
    """Decode a remote template object. Missing or malformed fields become defaults."""
    data = data or {}
    category = Category.parse(data.get("category"), data.get("is_premium"))
    pricing = Pricing(
        category=category,
        original_price=float_or_zero(data.get("original_price")),
        discount=float_or_zero(data.get("discount")),
        price=float_or_zero(data.get("price")),
    )
    connect = data.get("connectStyle", data.get("connect_style"))
    return Template(
        id=str(data.get("id") or ""),
        slug=str(data.get("slug") or ""),
        name=str(data.get("name") or ""),
        description=str(data.get("description") or ""),
        preview_url=str(data.get("preview_url") or ""),
        thumbnail_url=str(data.get("thumbnail_url") or ""),
        pricing=pricing,
        layout=Layout.parse(data.get("layout")),
        connect_style=ConnectStyle.parse(connect),
        colors=_partial_section(data.get("colors"), COLOR_SLOTS),
        fonts=_partial_section(data.get("fonts"), FONT_SLOTS),
        features=tuple(_str_list(data.get("features"))),
        tags=tuple(_str_list(data.get("tags"))),
        is_popular=truthy(data.get("is_popular")),
        is_new=truthy(data.get("is_new")),
        is_hidden=truthy(data.get("is_hidden")),
        downloads=int_or_zero(data.get("downloads")),
        created_at=str(data.get("created_at") or ""),
        updated_at=str(data.get("updated_at") or ""),
    )


def template_to_payload(template: Template) -> dict:
    """
    Full write-back payload. The remote API expects colors/fonts/features/tags
    JSON-encoded and boolean flags as 0/1; partial patches are not supported.
    """
    return {
        "id": template.id,
        "slug": template.slug,
        "name": template.name,
        "description": template.description,
        "preview_url": template.preview_url,
        "thumbnail_url": template.thumbnail_url,
        "category": template.category.value,
        "is_premium": 1 if template.is_premium else 0,
        "price": template.pricing.price,
        "original_price": template.pricing.original_price,
        "discount": template.pricing.discount,
        "layout": template.layout.value,
        "connectStyle": template.connect_style.value,
        "colors": json.dumps(dict(template.colors)),
        "fonts": json.dumps(dict(template.fonts)),
        "features": json.dumps(list(template.features)),
        "tags": json.dumps(list(template.tags)),
        "is_popular": 1 if template.is_popular else 0,
        "is_new": 1 if template.is_new else 0,
        "is_hidden": 1 if template.is_hidden else 0,
        "downloads": template.downloads,
        "created_at": template.created_at,
        "updated_at": template.updated_at,
    }
