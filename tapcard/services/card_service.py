"""
Public card use cases: load a user's card, compose its view model, and build
the export artifacts (vCard, share payload, QR image).
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import qrcode

from tapcard.core.config import Settings, get_settings
from tapcard.domain.profiles import User, user_from_payload
from tapcard.domain.render import RenderModel, compose
from tapcard.domain.sharing import SharePayload, share_payload
from tapcard.domain.templates import Template, template_from_payload
from tapcard.domain.vcard import build_vcard, vcard_filename
from tapcard.repositories.profile_api import ProfileAPI, ProfileNotFoundError

logger = logging.getLogger(__name__)

QR_BOX_SIZE = 10
QR_BORDER = 4


class CardNotFoundError(Exception):
    """Raised when the username has no profile or no template in use."""


@dataclass(frozen=True)
class ContactCard:
    filename: str
    content: str
    media_type: str = "text/vcard; charset=utf-8"


def render_qr_png(payload: str) -> bytes:
    """Encode ``payload`` as a PNG QR code."""
    qr = qrcode.QRCode(box_size=QR_BOX_SIZE, border=QR_BORDER)
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image()
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class CardService:
    """Loads cards through the remote API and derives every public artifact."""

    def __init__(self, api: ProfileAPI, settings: Optional[Settings] = None) -> None:
        self.api = api
        self.settings = settings or get_settings()

    def load_user(self, username: str) -> User:
        try:
            data = self.api.get_profile(username)
        except ProfileNotFoundError:
            raise CardNotFoundError(f"No profile for {username}")
        user = user_from_payload(data)
        if user is None:
            raise CardNotFoundError(f"No profile for {username}")
        return user

    def load_template_for(self, username: str) -> Template:
        used = self.api.get_used_templates(username)
        if not used:
            raise CardNotFoundError(f"{username} has no template in use")
        slug = str(used[0].get("slug") or "")
        if not slug:
            raise CardNotFoundError(f"{username} has no template in use")
        return self.load_template(slug)

    def load_template(self, slug: str) -> Template:
        try:
            data = self.api.get_template(slug)
        except ProfileNotFoundError:
            raise CardNotFoundError(f"Template {slug} not found")
        return template_from_payload(data)

    def load_card(self, username: str) -> Tuple[Template, User]:
        template = self.load_template_for(username)
        user = self.load_user(username)
        return template, user

    def render(self, username: str) -> RenderModel:
        template, user = self.load_card(username)
        return compose(
            template,
            user,
            identifier=username,
            origin=self.settings.frontend_url,
            image_base=self.settings.image_base_url,
        )

    def preview(self, slug: str) -> RenderModel:
        """Render a template with no user data (gallery and editor previews)."""
        template = self.load_template(slug)
        return compose(template, None, image_base=self.settings.image_base_url)

    def share(self, username: str) -> SharePayload:
        user = self.load_user(username)
        template: Optional[Template]
        try:
            template = self.load_template_for(username)
        except CardNotFoundError:
            template = None
        identifier = user.username or username
        return share_payload(self.settings.frontend_url, identifier, template)

    def contact_card(self, username: str) -> ContactCard:
        user = self.load_user(username)
        content = build_vcard(user)
        logger.info("contact card exported for %s", user.username or username)
        return ContactCard(filename=vcard_filename(user), content=content)

    def qr_png(self, username: str) -> bytes:
        return render_qr_png(self.share(username).qr_payload)
