from __future__ import annotations

import pytest

from tapcard.domain.vcard import MissingContactNameError
from tapcard.services.card_service import CardNotFoundError, CardService, render_qr_png

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture()
def service(api, settings) -> CardService:
    return CardService(api, settings)


def test_render_card(service, jane):
    model = service.render("jane")

    assert model.template_slug == "minimal-clean"
    assert model.heading == "Jane Doe"
    assert model.avatar_url == "https://img.cards.app/avatars/jane.png"
    assert model.share.url == "https://cards.app/jane"


def test_unknown_user(service, remote):
    with pytest.raises(CardNotFoundError):
        service.render("ghost")
    with pytest.raises(CardNotFoundError):
        service.contact_card("ghost")


def test_user_without_template(service, remote, jane):
    remote.used_templates["jane"] = []
    with pytest.raises(CardNotFoundError):
        service.render("jane")
    # sharing still works with the default title
    assert service.share("jane").title == "My Profile"


def test_preview_has_no_user_data(service, jane):
    model = service.preview("minimal-clean")

    assert model.placeholder is True
    assert model.links == ()
    assert model.share is None


def test_share_and_qr_use_the_same_url(service, jane):
    share = service.share("jane")

    assert share.url == share.qr_payload == "https://cards.app/jane"
    assert service.qr_png("jane") == render_qr_png(share.url)


def test_qr_png_is_png(service, jane):
    assert service.qr_png("jane").startswith(PNG_SIGNATURE)


def test_contact_card(service, jane):
    card = service.contact_card("jane")

    assert card.filename == "Jane Doe.vcf"
    assert card.media_type.startswith("text/vcard")
    assert "FN:Jane Doe" in card.content


def test_contact_card_without_name(service, remote, make_user_payload):
    remote.profiles["nameless"] = make_user_payload(username="", name="", display_name="")
    with pytest.raises(MissingContactNameError):
        service.contact_card("nameless")
