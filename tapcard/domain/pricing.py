"""Template pricing: discounted price, category and display labels."""
from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Any

from tapcard.core.utils import float_or_zero, truthy


class Category(str, enum.Enum):
    FREE = "free"
    PREMIUM = "premium"

    @classmethod
    def parse(cls, value: Any, is_premium: Any = None) -> "Category":
        """Read a category, falling back to the legacy ``is_premium`` flag."""
        text = str(value or "").strip().lower()
        if text == cls.PREMIUM.value:
            return cls.PREMIUM
        if text == cls.FREE.value:
            return cls.FREE
        return cls.PREMIUM if truthy(is_premium) else cls.FREE

    @property
    def is_premium(self) -> bool:
        return self is Category.PREMIUM


def clamp_price(value: Any) -> float:
    return max(float_or_zero(value), 0.0)


def clamp_discount(value: Any) -> float:
    return min(max(float_or_zero(value), 0.0), 100.0)


def compute_price(original_price: Any, discount: Any) -> float:
    """
    ``original - original * discount / 100`` at full precision, with the inputs
    clamped to ``original >= 0`` and ``0 <= discount <= 100``.
    """
    original = clamp_price(original_price)
    pct = clamp_discount(discount)
    return original - original * pct / 100


def format_price(value: Any) -> str:
    """Two decimals with thousands separators, e.g. ``1,000.00``."""
    return f"{float_or_zero(value):,.2f}"


@dataclass(frozen=True)
class Pricing:
    category: Category = Category.FREE
    original_price: float = 0.0
    discount: float = 0.0
    price: float = 0.0

    @property
    def is_premium(self) -> bool:
        return self.category.is_premium

    def with_original_price(self, value: Any) -> "Pricing":
        original = clamp_price(value)
        if not self.is_premium:
            return replace(self, original_price=original)
        return replace(self, original_price=original, price=compute_price(original, self.discount))

    def with_discount(self, value: Any) -> "Pricing":
        pct = clamp_discount(value)
        if not self.is_premium:
            return replace(self, discount=pct)
        return replace(self, discount=pct, price=compute_price(self.original_price, pct))

    def with_category(self, value: Any) -> "Pricing":
        category = value if isinstance(value, Category) else Category.parse(value)
        updated = replace(self, category=category)
        if category.is_premium:
            return replace(updated, price=compute_price(updated.original_price, updated.discount))
        return updated

    def label(self, currency_symbol: str = "₱") -> str:
        return price_label(self, currency_symbol)


def price_label(pricing: Pricing, currency_symbol: str = "₱") -> str:
    if not pricing.is_premium:
        return "Free"
    return f"{currency_symbol}{format_price(pricing.price)}"
