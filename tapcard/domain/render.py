"""
View model for the public card page.

``compose`` picks the layout and the connect-section style from the template,
resolves its theme, and flattens the user's profile into render-ready fields.
A missing user (template preview) yields placeholder affordances instead of an
error.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from tapcard.core.utils import asset_url

from .platforms import normalize_external_url
from .profiles import User, contact_name, split_entries
from .sharing import SharePayload, share_payload
from .templates import ConnectStyle, Layout, Template
from .theme import Theme, resolve_theme, tint

ANONYMOUS_NAME = "Anonymous"
CONNECT_HEADING = "Connect with me"


@dataclass(frozen=True)
class RenderedLink:
    id: Optional[int]
    platform: str
    label: str
    url: str
    icon: str
    is_messaging: bool


@dataclass(frozen=True)
class RenderModel:
    layout: Layout
    connect_style: ConnectStyle
    theme: Theme
    page_background: str
    link_background: str
    template_name: str
    template_slug: str
    placeholder: bool
    heading: str
    avatar_url: str = ""
    bio: str = ""
    emails: Tuple[str, ...] = ()
    phones: Tuple[str, ...] = ()
    website: str = ""
    location: str = ""
    connect_heading: str = CONNECT_HEADING
    links: Tuple[RenderedLink, ...] = field(default_factory=tuple)
    share: Optional[SharePayload] = None
    can_save_contact: bool = False


def _render_links(user: User) -> Tuple[RenderedLink, ...]:
    rendered = []
    for link in user.profile.visible_links:
        platform = link.classified
        url = link.url if platform.is_messaging else normalize_external_url(link.url)
        rendered.append(
            RenderedLink(
                id=link.id,
                platform=link.platform,
                label=link.display_name,
                url=url,
                icon=platform.icon,
                is_messaging=platform.is_messaging,
            )
        )
    return tuple(rendered)


def compose(
    template: Template,
    user: Optional[User],
    identifier: Optional[str] = None,
    origin: str = "",
    image_base: Optional[str] = None,
) -> RenderModel:
    """
    Build the render model for ``template`` and ``user``.

    ``identifier`` is the slug used to reach the page; the user's username wins
    when present. The share payload is only built when ``origin`` is given and
    an identifier is known.
    """
    theme = resolve_theme(template.theme_input)
    ident = ((user.username if user else "") or identifier or "").strip()
    share = share_payload(origin, ident, template) if origin and ident else None
    base = dict(
        layout=template.layout,
        connect_style=template.connect_style,
        theme=theme,
        page_background=tint(theme.colors.primary),
        link_background=tint(theme.colors.accent),
        template_name=template.name,
        template_slug=template.slug,
        share=share,
    )
    if user is None:
        return RenderModel(placeholder=True, heading=ANONYMOUS_NAME, **base)

    profile = user.profile
    return RenderModel(
        placeholder=False,
        heading=contact_name(user) or ANONYMOUS_NAME,
        avatar_url=asset_url(user.avatar_url, base=image_base),
        bio=(profile.bio or "").strip(),
        emails=tuple(split_entries(user.email)),
        phones=tuple(split_entries(profile.phone)),
        website=normalize_external_url(profile.website),
        location=(profile.location or "").strip(),
        links=_render_links(user),
        can_save_contact=bool(contact_name(user)),
        **base,
    )
