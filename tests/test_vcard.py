from __future__ import annotations

import pytest

from tapcard.domain.platforms import SocialLink
from tapcard.domain.profiles import Profile, User, user_from_payload
from tapcard.domain.render import compose
from tapcard.domain.templates import template_from_payload
from tapcard.domain.vcard import (
    CRLF,
    FOLD_LIMIT,
    MissingContactNameError,
    build_vcard,
    escape_text,
    fold_line,
    vcard_filename,
)


def _lines(card: str):
    return card.split(CRLF)


def test_minimal_card_has_one_of_each_line():
    user = User(display_name="Jane Doe", email="jane@x.com", profile=Profile(phone="09170001111"))
    card = build_vcard(user, links=())
    lines = _lines(card)

    assert lines[0] == "BEGIN:VCARD"
    assert lines[1] == "VERSION:3.0"
    assert lines[-1] == "END:VCARD"
    assert lines.count("FN:Jane Doe") == 1
    assert lines.count("TEL;TYPE=CELL:09170001111") == 1
    assert lines.count("EMAIL;TYPE=INTERNET:jane@x.com") == 1
    assert not any(line.startswith("X-SOCIALPROFILE") for line in lines)
    assert not any(line.startswith(("URL", "ADR", "NOTE")) for line in lines)


def test_full_card_with_visible_links_only(make_user_payload):
    user = user_from_payload(make_user_payload())
    lines = _lines(build_vcard(user))

    assert "N:Jane Doe;;;;" in lines
    assert "URL:https://jane.dev" in lines
    assert "ADR;TYPE=HOME:;;;Manila;;;" in lines
    assert "NOTE:Designer" in lines
    social = [line for line in lines if line.startswith("X-SOCIALPROFILE")]
    assert social == [
        "X-SOCIALPROFILE;TYPE=instagram:https://instagram.com/jane",
        "X-SOCIALPROFILE;TYPE=whatsapp:https://wa.me/09170001111",
    ]


def test_invisible_links_are_skipped_even_when_passed():
    user = User(username="jane")
    links = [
        SocialLink(platform="GitHub", url="https://github.com/jane", is_visible=False),
        SocialLink(platform="Blog", url="", is_visible=True),
    ]
    assert "X-SOCIALPROFILE" not in build_vcard(user, links=links)


def test_structured_name_from_first_and_last_name():
    user = User(firstname="Jane", lastname="Doe", name="Jane Doe")
    assert "N:Doe;Jane;;;" in _lines(build_vcard(user))


def test_newlines_cannot_break_the_record():
    user = User(display_name="Jane\nEND:VCARD", profile=Profile(bio="line one\r\nline two; more, text"))
    lines = _lines(build_vcard(user))

    assert lines.count("END:VCARD") == 1
    assert "FN:Jane\\nEND:VCARD" in lines
    assert "NOTE:line one\\nline two\\; more\\, text" in lines


def test_uri_values_and_params_are_sanitized():
    user = User(username="jane", profile=Profile(website="https://jane.dev/\npath"))
    links = [SocialLink(platform='Evil;TYPE="x":', url="https://evil.test")]
    lines = _lines(build_vcard(user, links=links))

    assert "URL:https://jane.dev/path" in lines
    assert "X-SOCIALPROFILE;TYPE=eviltype=x:https://evil.test" in lines


def test_escape_text():
    assert escape_text("a\\b") == "a\\\\b"
    assert escape_text("") == ""
    assert escape_text(None) == ""
    assert escape_text("tab\there") == "tabhere"


def test_long_lines_are_folded():
    line = "NOTE:" + "a" * 100
    folded = fold_line(line)
    physical = folded.split(CRLF)

    assert len(physical) == 2
    assert all(len(part.encode("utf-8")) <= FOLD_LIMIT for part in physical)
    assert physical[1].startswith(" ")
    assert folded.replace(CRLF + " ", "") == line


def test_folding_keeps_multibyte_characters_whole():
    line = "NOTE:" + "é" * 50
    folded = fold_line(line)

    for part in folded.split(CRLF):
        assert len(part.encode("utf-8")) <= FOLD_LIMIT
        part.encode("utf-8").decode("utf-8")
    assert folded.replace(CRLF + " ", "") == line


def test_output_is_deterministic_and_trimmed(make_user_payload):
    user = user_from_payload(make_user_payload())
    first = build_vcard(user)
    assert first == build_vcard(user)
    assert first == first.strip()


def test_missing_name_raises():
    with pytest.raises(MissingContactNameError):
        build_vcard(User(email="nobody@x.com"))


def test_multiple_phones_and_emails():
    user = User(username="jane", email="a@x.com, b@x.com", profile=Profile(phone="0917, 0918"))
    lines = _lines(build_vcard(user))

    assert [line for line in lines if line.startswith("TEL")] == [
        "TEL;TYPE=CELL:0917",
        "TEL;TYPE=CELL:0918",
    ]
    assert len([line for line in lines if line.startswith("EMAIL")]) == 2


def test_filename():
    assert vcard_filename(User(display_name="Jane Doe", username="jane")) == "Jane Doe.vcf"
    assert vcard_filename(User(username="jane")) == "jane.vcf"
    assert vcard_filename(User()) == "contact.vcf"
    assert vcard_filename(None) == "contact.vcf"
    assert vcard_filename(User(display_name='a/b"c')) == "abc.vcf"


def test_website_matches_the_rendered_page(make_user_payload, make_template_payload):
    user = user_from_payload(make_user_payload())
    page = compose(template_from_payload(make_template_payload()), user)

    assert f"URL:{page.website}" in _lines(build_vcard(user))
