from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Header, HTTPException, Request
from pydantic import BaseModel

from tapcard.core.utils import asset_url, bearer_token
from tapcard.domain.identifiers import generate_slug
from tapcard.domain.pricing import Pricing, format_price, price_label
from tapcard.domain.templates import Template, template_from_payload, template_to_payload
from tapcard.repositories.profile_api import ProfileAPIError, ProfileNotFoundError
from tapcard.routers.deps import get_service
from tapcard.services.card_service import CardNotFoundError, CardService
from tapcard.services.template_service import TemplateEditError, TemplateEditor, TemplateService

router = APIRouter(prefix="/templates", tags=["templates"])

PLACEHOLDER_THUMBNAIL = "/placeholder.svg"


class PriceRequest(BaseModel):
    category: str = "premium"
    original_price: float = 0
    discount: float = 0


class SlugRequest(BaseModel):
    name: str = ""


class TemplateSaveRequest(BaseModel):
    """Fields left out keep their stored value when an existing template is updated."""

    id: str = ""
    slug: str = ""
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    original_price: Optional[float] = None
    discount: Optional[float] = None
    layout: Optional[str] = None
    connectStyle: Optional[str] = None
    colors: Optional[dict] = None
    fonts: Optional[dict] = None
    features: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    preview_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    is_popular: Optional[bool] = None
    is_new: Optional[bool] = None
    is_hidden: Optional[bool] = None


# Stored as-is; everything else goes through TemplateEditor.
STORED_FIELDS = (
    "preview_url",
    "thumbnail_url",
    "colors",
    "fonts",
    "features",
    "tags",
    "is_popular",
    "is_new",
    "is_hidden",
)


def _summary(template: Template, request: Request) -> dict:
    settings = get_service(request, "settings")
    return {
        "id": template.id,
        "slug": template.slug,
        "name": template.name,
        "description": template.description,
        "thumbnail_url": asset_url(template.thumbnail_url, base=settings.image_base_url,
                                   fallback=PLACEHOLDER_THUMBNAIL),
        "category": template.category.value,
        "is_premium": template.is_premium,
        "price": template.pricing.price,
        "price_label": price_label(template.pricing, settings.currency_symbol),
        "features": list(template.features),
        "tags": list(template.tags),
        "is_popular": template.is_popular,
        "is_new": template.is_new,
    }


@router.get("")
def gallery(request: Request, q: str = ""):
    svc: TemplateService = get_service(request, "template_service")
    try:
        free, premium = svc.gallery(q)
    except ProfileAPIError as exc:
        raise HTTPException(502, f"Profile API error: {exc}")
    return {
        "free": [_summary(t, request) for t in free],
        "premium": [_summary(t, request) for t in premium],
    }


@router.post("/price")
def price_preview(body: PriceRequest, request: Request):
    settings = get_service(request, "settings")
    pricing = (
        Pricing()
        .with_category(body.category)
        .with_original_price(body.original_price)
        .with_discount(body.discount)
    )
    return {
        "category": pricing.category.value,
        "is_premium": pricing.is_premium,
        "original_price": pricing.original_price,
        "discount": pricing.discount,
        "price": pricing.price,
        "display": format_price(pricing.price),
        "label": price_label(pricing, settings.currency_symbol),
    }


@router.post("/slug")
def slug_preview(body: SlugRequest):
    return {"slug": generate_slug(body.name)}


def _base_template(svc: TemplateService, body: TemplateSaveRequest) -> Template:
    fields = {name: getattr(body, name) for name in STORED_FIELDS if getattr(body, name) is not None}
    if not body.id:
        return template_from_payload({"slug": body.slug, **fields})
    existing = svc.get(body.slug or body.id)
    return template_from_payload({**template_to_payload(existing), **fields})


@router.post("/save")
def save_template(
    body: TemplateSaveRequest,
    request: Request,
    authorization: Optional[str] = Header(None),
):
    svc: TemplateService = get_service(request, "template_service")
    try:
        editor = TemplateEditor(_base_template(svc, body))
    except ProfileNotFoundError:
        raise HTTPException(404, "Template not found")
    except ProfileAPIError as exc:
        raise HTTPException(502, f"Profile API error: {exc}")
    steps = (
        (editor.set_name, body.name),
        (editor.set_description, body.description),
        (editor.set_layout, body.layout),
        (editor.set_connect_style, body.connectStyle),
        (editor.set_category, body.category),
        (editor.set_original_price, body.original_price),
        (editor.set_discount, body.discount),
    )
    for apply, value in steps:
        if value is not None:
            apply(value)
    try:
        saved = svc.save(editor.template, bearer_token(authorization), is_new=not body.id)
    except TemplateEditError as exc:
        raise HTTPException(422, str(exc))
    except ProfileAPIError as exc:
        if exc.status_code == 422:
            raise HTTPException(422, "Template rejected by the profile API")
        raise HTTPException(502, f"Profile API error: {exc}")
    return _summary(saved, request)


@router.get("/{slug}/preview")
def template_preview(slug: str, request: Request):
    svc: CardService = get_service(request, "card_service")
    try:
        return svc.preview(slug)
    except CardNotFoundError:
        raise HTTPException(404, "Template not found")
    except ProfileAPIError as exc:
        raise HTTPException(502, f"Profile API error: {exc}")
