from __future__ import annotations

import json
import re
import sys
from pathlib import Path
from typing import Optional

import httpx
import pytest

# Make the tapcard package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tapcard.core import config as core_config  # noqa: E402
from tapcard.core.config import MIN_USERNAME_CHECK_QUIET_MS, Settings  # noqa: E402
from tapcard.core.rate_limiter import reset_rate_limits  # noqa: E402
from tapcard.repositories.profile_api import ProfileAPI  # noqa: E402

API_BASE = "http://remote.test/api"


class FakeRemote:
    """In-memory stand-in for the remote profile/template API."""

    def __init__(self) -> None:
        self.profiles: dict = {}
        self.used_templates: dict = {}
        self.templates: dict = {}
        self.users_by_token: dict = {}
        self.requests: list = []
        self.fail = False
        self.save_status = 200
        self.save_response: Optional[dict] = None

    def _json(self, status: int, payload) -> httpx.Response:
        return httpx.Response(status, json=payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("remote down", request=request)
        path = request.url.path[len("/api"):] if request.url.path.startswith("/api") else request.url.path
        method = request.method

        m = re.fullmatch(r"/profile/([^/]+)/used-templates", path)
        if m and method == "GET":
            return self._json(200, self.used_templates.get(m.group(1), []))
        m = re.fullmatch(r"/profile/([^/]+)", path)
        if m and method == "GET":
            profile = self.profiles.get(m.group(1))
            return self._json(200, profile) if profile else self._json(404, {"message": "not found"})
        if path == "/templates" and method == "GET":
            return self._json(200, list(self.templates.values()))
        m = re.fullmatch(r"/templates/([^/]+)", path)
        if m and method == "GET":
            template = self.templates.get(m.group(1))
            return self._json(200, template) if template else self._json(404, {"message": "not found"})
        if path == "/templates/store" and method == "POST":
            payload = json.loads(request.content)
            self.templates[payload["slug"]] = payload
            return self._json(201, payload)
        if m and method == "PUT":
            payload = json.loads(request.content)
            self.templates[payload["slug"]] = payload
            return self._json(200, payload)
        token = request.headers.get("authorization", "").replace("Bearer ", "")
        if path == "/user" and method == "GET":
            user = self.users_by_token.get(token)
            return self._json(200, user) if user else self._json(401, {"message": "unauthenticated"})
        if path == "/profile" and method == "POST":
            if self.save_status != 200:
                return self._json(self.save_status, self.save_response or {})
            return self._json(200, self.save_response or {})
        return self._json(404, {"message": "no route"})

    def last(self, method: str, suffix: str) -> httpx.Request:
        for request in reversed(self.requests):
            if request.method == method and request.url.path.endswith(suffix):
                return request
        raise AssertionError(f"no {method} request ending with {suffix}")


@pytest.fixture(autouse=True)
def _reset_caches():
    core_config.get_settings.cache_clear()
    reset_rate_limits()
    yield
    core_config.get_settings.cache_clear()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        app_env="test",
        frontend_url="https://cards.app",
        profile_api_url=API_BASE,
        image_base_url="https://img.cards.app",
        profile_api_timeout=2.0,
        username_check_quiet_ms=MIN_USERNAME_CHECK_QUIET_MS,
        currency_symbol="₱",
        log_level="WARNING",
        username_check_limit=5,
        username_check_window_seconds=60,
    )


@pytest.fixture()
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture()
def api(remote: FakeRemote) -> ProfileAPI:
    client = ProfileAPI(API_BASE, timeout=2.0, transport=httpx.MockTransport(remote.handler))
    yield client
    client.close()


@pytest.fixture()
def client(settings, api):
    from fastapi.testclient import TestClient

    from tapcard.app import create_app

    app = create_app(settings=settings, api=api)
    with TestClient(app) as test_client:
        yield test_client


def jane_payload(**overrides) -> dict:
    data = {
        "id": 7,
        "email": "jane@x.com",
        "username": "jane",
        "name": "Jane Q. Doe",
        "display_name": "Jane Doe",
        "avatar_url": "avatars/jane.png",
        "profile": {
            "bio": "Designer",
            "phone": "09170001111",
            "website": "jane.dev",
            "location": "Manila",
            "social_links": [
                {"id": 1, "platform": "Instagram", "url": "https://instagram.com/jane",
                 "display_name": "@jane", "is_visible": 1},
                {"id": 2, "platform": "WhatsApp", "url": "https://wa.me/09170001111",
                 "display_name": "09170001111", "is_visible": "1"},
                {"id": 3, "platform": "Facebook", "url": "https://facebook.com/hidden",
                 "display_name": "hidden", "is_visible": 0},
            ],
        },
    }
    data.update(overrides)
    return data


def template_payload(**overrides) -> dict:
    data = {
        "id": "minimal-clean",
        "slug": "minimal-clean",
        "name": "Minimal Clean",
        "description": "A clean card",
        "category": "premium",
        "is_premium": 1,
        "price": 800,
        "original_price": 1000,
        "discount": 20,
        "layout": "creative",
        "connectStyle": "list",
        "colors": json.dumps({"primary": "#112233", "accent": ""}),
        "fonts": json.dumps({"heading": "Poppins"}),
        "features": json.dumps(["QR code", "vCard"]),
        "tags": json.dumps(["minimal"]),
    }
    data.update(overrides)
    return data


@pytest.fixture()
def jane(remote: FakeRemote) -> dict:
    payload = jane_payload()
    remote.profiles["jane"] = payload
    remote.used_templates["jane"] = [{"slug": "minimal-clean"}]
    remote.templates["minimal-clean"] = template_payload()
    return payload


@pytest.fixture()
def make_user_payload():
    return jane_payload


@pytest.fixture()
def make_template_payload():
    return template_payload
