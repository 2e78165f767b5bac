"""Profile editing: username, contact fields and social links."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from tapcard.domain.platforms import (
    SocialLink,
    change_handle,
    change_platform,
    change_url,
    set_visibility,
)
from tapcard.domain.profiles import User, profile_to_form, user_from_payload
from tapcard.domain.identifiers import normalize_username
from tapcard.repositories.profile_api import ProfileAPI, ProfileAPIError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("bio", "phone", "website", "location")
USER_FIELDS = ("name", "firstname", "lastname", "display_name")


class ProfileEditError(Exception):
    """Base exception for the profile editor."""


class UsernameTakenError(ProfileEditError):
    """Raised when the remote API rejects the username as already taken."""


class ProfileEditor:
    """
    Editing session for the signed-in user's profile. Link operations go
    through the domain helpers so messaging links keep a derived url.
    """

    def __init__(self, user: User) -> None:
        self.user = user

    @property
    def links(self):
        return self.user.profile.social_links

    def _set_links(self, links) -> User:
        self.user = replace(self.user, profile=replace(self.user.profile, social_links=tuple(links)))
        return self.user

    def _replace_link(self, index: int, link: SocialLink) -> User:
        links = list(self.links)
        links[index] = link
        return self._set_links(links)

    def set_username(self, raw: str) -> User:
        self.user = replace(self.user, username=normalize_username(raw))
        return self.user

    def set_field(self, name: str, value: Optional[str]) -> User:
        value = value or ""
        if name in USER_FIELDS:
            self.user = replace(self.user, **{name: value})
        elif name in PROFILE_FIELDS:
            self.user = replace(self.user, profile=replace(self.user.profile, **{name: value}))
        else:
            raise ProfileEditError(f"Unknown profile field: {name}")
        return self.user

    def add_link(self, platform: str = "", link_id: Optional[int] = None) -> User:
        return self._set_links(self.links + (SocialLink(id=link_id, platform=platform),))

    def clear_links(self) -> User:
        return self._set_links(())

    def remove_link(self, index: int) -> User:
        return self._set_links(link for i, link in enumerate(self.links) if i != index)

    def set_link_platform(self, index: int, platform: str) -> User:
        return self._replace_link(index, change_platform(self.links[index], platform))

    def set_link_handle(self, index: int, value: str) -> User:
        return self._replace_link(index, change_handle(self.links[index], value))

    def set_link_url(self, index: int, value: str) -> User:
        return self._replace_link(index, change_url(self.links[index], value))

    def set_link_visibility(self, index: int, visible: bool) -> User:
        return self._replace_link(index, set_visibility(self.links[index], visible))


def _username_rejected(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    errors = payload.get("errors")
    return isinstance(errors, dict) and bool(errors.get("username"))


class ProfileService:
    """Loads and saves the signed-in user's profile with an explicit credential."""

    def __init__(self, api: ProfileAPI) -> None:
        self.api = api

    def current_user(self, credential: str) -> Optional[User]:
        return user_from_payload(self.api.get_current_user(credential))

    def save(self, user: User, credential: str) -> User:
        form = profile_to_form(user)
        try:
            data = self.api.save_profile(form, credential=credential)
        except ProfileAPIError as exc:
            if exc.status_code == 422 and _username_rejected(exc.payload):
                raise UsernameTakenError("Username is already taken. Please choose another.") from exc
            raise
        logger.info("profile saved for %s", user.username or user.email)
        saved = user_from_payload(data) if isinstance(data, dict) else None
        return saved or user
