from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Header, HTTPException, Request
from pydantic import BaseModel

from tapcard.core.utils import bearer_token
from tapcard.domain.platforms import SocialLink, change_handle, change_platform, change_url, set_visibility
from tapcard.repositories.profile_api import ProfileAPIError, ProfileNotFoundError
from tapcard.routers.deps import get_service
from tapcard.services.profile_service import ProfileEditor, ProfileService, UsernameTakenError

router = APIRouter(prefix="", tags=["profile"])

LINK_ACTIONS = ("platform", "handle", "url", "visibility")


class LinkIn(BaseModel):
    id: Optional[int] = None
    platform: str = ""
    url: str = ""
    display_name: str = ""
    is_visible: bool = True

    def to_link(self) -> SocialLink:
        return SocialLink(
            id=self.id,
            platform=self.platform,
            url=self.url,
            display_name=self.display_name,
            is_visible=self.is_visible,
        )


class LinkEditRequest(BaseModel):
    link: LinkIn
    action: str
    value: str = ""


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    name: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    display_name: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    social_links: Optional[List[LinkIn]] = None


def _link_out(link: SocialLink) -> dict:
    data = asdict(link)
    data["is_messaging"] = link.classified.is_messaging
    return data


@router.post("/social-links/edit")
def edit_link(body: LinkEditRequest):
    link = body.link.to_link()
    if body.action == "platform":
        link = change_platform(link, body.value)
    elif body.action == "handle":
        link = change_handle(link, body.value)
    elif body.action == "url":
        link = change_url(link, body.value)
    elif body.action == "visibility":
        link = set_visibility(link, body.value.strip().lower() in {"1", "true", "yes", "on"})
    else:
        raise HTTPException(422, f"Unknown action, expected one of {', '.join(LINK_ACTIONS)}")
    return _link_out(link)


def _apply(editor: ProfileEditor, body: ProfileUpdate) -> None:
    if body.username is not None:
        editor.set_username(body.username)
    for name in ("name", "firstname", "lastname", "display_name", "bio", "phone", "website", "location"):
        value = getattr(body, name)
        if value is not None:
            editor.set_field(name, value)
    if body.social_links is None:
        return
    editor.clear_links()
    for index, item in enumerate(body.social_links):
        # replay the editor steps so messaging links get a derived url
        editor.add_link(link_id=item.id)
        editor.set_link_platform(index, item.platform)
        editor.set_link_handle(index, item.display_name)
        editor.set_link_url(index, item.url)
        editor.set_link_visibility(index, item.is_visible)


@router.post("/profile")
def save_profile(body: ProfileUpdate, request: Request, authorization: Optional[str] = Header(None)):
    credential = bearer_token(authorization)
    if not credential:
        raise HTTPException(401, "Missing bearer credential")
    svc: ProfileService = get_service(request, "profile_service")
    try:
        user = svc.current_user(credential)
    except ProfileNotFoundError:
        raise HTTPException(401, "Unknown user")
    except ProfileAPIError as exc:
        if exc.status_code in (401, 403):
            raise HTTPException(401, "Unknown user")
        raise HTTPException(502, f"Profile API error: {exc}")
    if user is None:
        raise HTTPException(401, "Unknown user")
    editor = ProfileEditor(user)
    _apply(editor, body)
    try:
        saved = svc.save(editor.user, credential)
    except UsernameTakenError as exc:
        raise HTTPException(409, str(exc))
    except ProfileAPIError as exc:
        if exc.status_code == 422:
            raise HTTPException(422, "Profile rejected by the profile API")
        raise HTTPException(502, f"Profile API error: {exc}")
    return asdict(saved)
