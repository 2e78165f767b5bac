"""Template catalogue and admin editing use cases."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Tuple

from tapcard.domain.identifiers import generate_slug
from tapcard.domain.templates import ConnectStyle, Layout, Template, template_from_payload, template_to_payload
from tapcard.repositories.profile_api import ProfileAPI

logger = logging.getLogger(__name__)


class TemplateEditError(Exception):
    """Raised when a template cannot be saved as edited."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def filter_gallery(templates: Iterable[Template], query: str = "") -> Tuple[List[Template], List[Template]]:
    """Split visible templates into (free, premium), keeping those whose name contains ``query``."""
    needle = (query or "").strip().lower()
    free: List[Template] = []
    premium: List[Template] = []
    for template in templates:
        if template.is_hidden:
            continue
        if needle and needle not in template.name.lower():
            continue
        (premium if template.is_premium else free).append(template)
    return free, premium


class TemplateEditor:
    """
    Editing session for one template. Every change returns through ``template``;
    derived fields (slug, is_premium, price) are recomputed here and nowhere else.
    """

    def __init__(self, template: Optional[Template] = None) -> None:
        self.template = template or Template(created_at=_now(), updated_at=_now())

    def _update(self, **changes: Any) -> Template:
        self.template = replace(self.template, updated_at=_now(), **changes)
        return self.template

    def set_name(self, name: str) -> Template:
        # slug and id follow the name until the template has been saved once
        if not self.template.id:
            slug = generate_slug(name)
            return self._update(name=name, slug=slug, id=slug)
        return self._update(name=name)

    def set_description(self, description: str) -> Template:
        return self._update(description=description)

    def set_category(self, category: Any) -> Template:
        return self._update(pricing=self.template.pricing.with_category(category))

    def set_original_price(self, value: Any) -> Template:
        return self._update(pricing=self.template.pricing.with_original_price(value))

    def set_discount(self, value: Any) -> Template:
        return self._update(pricing=self.template.pricing.with_discount(value))

    def set_layout(self, value: Any) -> Template:
        return self._update(layout=Layout.parse(value))

    def set_connect_style(self, value: Any) -> Template:
        return self._update(connect_style=ConnectStyle.parse(value))

    def set_color(self, slot: str, value: str) -> Template:
        colors = dict(self.template.colors)
        colors[slot] = value
        return self._update(colors=colors)

    def set_font(self, slot: str, value: str) -> Template:
        fonts = dict(self.template.fonts)
        fonts[slot] = value
        return self._update(fonts=fonts)

    def add_feature(self, value: str) -> Template:
        text = (value or "").strip()
        if not text:
            return self.template
        return self._update(features=self.template.features + (text,))

    def remove_feature(self, index: int) -> Template:
        features = tuple(f for i, f in enumerate(self.template.features) if i != index)
        return self._update(features=features)

    def add_tag(self, value: str) -> Template:
        text = (value or "").strip()
        if not text:
            return self.template
        return self._update(tags=self.template.tags + (text,))

    def remove_tag(self, index: int) -> Template:
        tags = tuple(t for i, t in enumerate(self.template.tags) if i != index)
        return self._update(tags=tags)


class TemplateService:
    """Reads the catalogue and submits edited templates as full payloads."""

    def __init__(self, api: ProfileAPI) -> None:
        self.api = api

    def get(self, slug: str) -> Template:
        return template_from_payload(self.api.get_template(slug))

    def catalogue(self) -> List[Template]:
        return [template_from_payload(item) for item in self.api.list_templates()]

    def gallery(self, query: str = "") -> Tuple[List[Template], List[Template]]:
        return filter_gallery(self.catalogue(), query)

    def save(self, template: Template, credential: Optional[str], *, is_new: bool) -> Template:
        if not template.name.strip() or not template.description.strip():
            raise TemplateEditError("Name and description are required")
        slug = template.slug or generate_slug(template.name)
        if not slug:
            raise TemplateEditError("Template name must contain letters or digits")
        now = _now()
        template = replace(template, slug=slug, created_at=template.created_at or now, updated_at=now)
        payload = template_to_payload(template)
        if is_new:
            self.api.create_template(payload, credential=credential)
        else:
            self.api.update_template(template.id or slug, payload, credential=credential)
        logger.info("template %s saved", slug)
        return template
