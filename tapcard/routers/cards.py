from __future__ import annotations

import urllib.parse as urlparse

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from tapcard.domain.vcard import MissingContactNameError
from tapcard.repositories.profile_api import ProfileAPIError
from tapcard.routers.deps import get_service
from tapcard.services.card_service import CardNotFoundError, CardService

router = APIRouter(prefix="", tags=["cards"])


def _card_service(request: Request) -> CardService:
    return get_service(request, "card_service")


def _upstream_error(exc: ProfileAPIError) -> HTTPException:
    return HTTPException(502, f"Profile API error: {exc}")


def _attachment(filename: str) -> str:
    # latin-1 headers: ASCII fallback plus the RFC 5987 form for the real name
    fallback = filename.encode("ascii", "ignore").decode("ascii")
    if fallback.startswith("."):
        fallback = "contact" + fallback
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{urlparse.quote(filename)}"


@router.get("/cards/{username}")
def card_view(username: str, request: Request):
    svc = _card_service(request)
    try:
        return svc.render(username)
    except CardNotFoundError:
        raise HTTPException(404, "Card not found")
    except ProfileAPIError as exc:
        raise _upstream_error(exc)


@router.get("/cards/{username}/share")
def card_share(username: str, request: Request):
    svc = _card_service(request)
    try:
        return svc.share(username)
    except CardNotFoundError:
        raise HTTPException(404, "Card not found")
    except ProfileAPIError as exc:
        raise _upstream_error(exc)


@router.get("/v/{username}.vcf")
def vcard(username: str, request: Request):
    svc = _card_service(request)
    try:
        card = svc.contact_card(username)
    except CardNotFoundError:
        raise HTTPException(404, "Card not found")
    except MissingContactNameError:
        raise HTTPException(422, "Profile has no name to put on a contact card")
    except ProfileAPIError as exc:
        raise _upstream_error(exc)
    return Response(card.content, media_type=card.media_type, headers={
        "Content-Disposition": _attachment(card.filename)
    })


@router.get("/q/{username}.png")
def qr(username: str, request: Request):
    svc = _card_service(request)
    try:
        png = svc.qr_png(username)
    except CardNotFoundError:
        raise HTTPException(404, "Card not found")
    except ProfileAPIError as exc:
        raise _upstream_error(exc)
    return Response(png, media_type="image/png")
