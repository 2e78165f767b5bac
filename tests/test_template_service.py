from __future__ import annotations

import json

import pytest

from tapcard.domain.pricing import Category
from tapcard.domain.templates import Layout, template_from_payload
from tapcard.services.template_service import (
    TemplateEditError,
    TemplateEditor,
    TemplateService,
    filter_gallery,
)


def _catalogue(make_template_payload):
    return [
        template_from_payload(make_template_payload()),
        template_from_payload({"slug": "plain", "name": "Plain Card", "category": "free"}),
        template_from_payload({"slug": "secret", "name": "Secret", "is_hidden": 1}),
    ]


def test_gallery_splits_free_and_premium(make_template_payload):
    free, premium = filter_gallery(_catalogue(make_template_payload))

    assert [t.slug for t in free] == ["plain"]
    assert [t.slug for t in premium] == ["minimal-clean"]


def test_gallery_search_matches_name(make_template_payload):
    free, premium = filter_gallery(_catalogue(make_template_payload), " CLEAN ")

    assert free == []
    assert [t.slug for t in premium] == ["minimal-clean"]


def test_editor_slug_follows_name_until_saved():
    editor = TemplateEditor()
    editor.set_name("Minimal  Clean!!")
    assert editor.template.slug == "minimal-clean"
    assert editor.template.id == "minimal-clean"

    saved = TemplateEditor(template_from_payload({"id": "42", "slug": "old", "name": "Old"}))
    saved.set_name("New Name")
    assert saved.template.slug == "old"


def test_editor_recomputes_price():
    editor = TemplateEditor()
    editor.set_category("premium")
    editor.set_original_price(1000)
    editor.set_discount(20)
    assert editor.template.pricing.price == 800

    editor.set_discount(0)
    assert editor.template.pricing.price == 1000

    editor.set_category("free")
    assert editor.template.category is Category.FREE
    assert editor.template.is_premium is False


def test_editor_lists_and_theme():
    editor = TemplateEditor()
    editor.add_feature("QR code")
    editor.add_feature("  ")
    editor.add_tag("bold")
    editor.add_tag("dark")
    editor.remove_tag(0)
    editor.set_color("primary", "#000000")
    editor.set_font("body", "Lora")
    editor.set_layout("creative")

    template = editor.template
    assert template.features == ("QR code",)
    assert template.tags == ("dark",)
    assert template.colors == {"primary": "#000000"}
    assert template.fonts == {"body": "Lora"}
    assert template.layout is Layout.CREATIVE


def test_save_new_template_posts_full_payload(api, remote):
    editor = TemplateEditor()
    editor.set_name("Bold Card")
    editor.set_description("Loud and clear")
    editor.set_category("premium")
    editor.set_original_price(500)
    editor.set_discount(10)

    saved = TemplateService(api).save(editor.template, "admin-token", is_new=True)

    request = remote.last("POST", "/templates/store")
    payload = json.loads(request.content)
    assert request.headers["authorization"] == "Bearer admin-token"
    assert payload["slug"] == "bold-card"
    assert payload["is_premium"] == 1
    assert payload["price"] == 450
    assert payload["colors"] == "{}"
    assert saved.created_at


def test_save_existing_template_puts(api, remote, jane):
    template = TemplateService(api).catalogue()[0]
    TemplateService(api).save(template, "admin-token", is_new=False)

    request = remote.last("PUT", "/templates/minimal-clean")
    assert json.loads(request.content)["name"] == "Minimal Clean"


def test_save_requires_name_and_description(api, remote):
    editor = TemplateEditor()
    editor.set_name("Only a name")
    with pytest.raises(TemplateEditError):
        TemplateService(api).save(editor.template, None, is_new=True)
    assert remote.requests == []
