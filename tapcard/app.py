from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from tapcard.core.config import Settings, get_settings
from tapcard.core.logging import configure_logging
from tapcard.repositories.profile_api import ProfileAPI
from tapcard.routers import cards as cards_router
from tapcard.routers import profile as profile_router
from tapcard.routers import templates as templates_router
from tapcard.routers import username as username_router
from tapcard.services.card_service import CardService
from tapcard.services.profile_service import ProfileService
from tapcard.services.template_service import TemplateService
from tapcard.services.username_service import UsernameService

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, nosniff, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def _allowed_origins(settings: Settings) -> list:
    allowed = {settings.frontend_url}
    if settings.app_env != "prod":
        allowed.update(
            {
                "http://localhost:3000",
                "http://127.0.0.1:3000",
            }
        )
    return sorted(origin for origin in allowed if origin)


def create_app(settings: Optional[Settings] = None, api: Optional[ProfileAPI] = None) -> FastAPI:
    """
    Build the FastAPI app (`uvicorn --factory tapcard.app:create_app`). Tests
    pass their own settings and API adapter.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    api = api or ProfileAPI(settings.profile_api_url, timeout=settings.profile_api_timeout)

    app = FastAPI(title="Tapcard API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.state.settings = settings
    app.state.profile_api = api
    app.state.card_service = CardService(api, settings)
    app.state.username_service = UsernameService(api)
    app.state.template_service = TemplateService(api)
    app.state.profile_service = ProfileService(api)

    app.include_router(username_router.router)
    app.include_router(templates_router.router)
    app.include_router(profile_router.router)
    app.include_router(cards_router.router)

    @app.get("/health")
    def health():
        return {"ok": True}

    logger.info("Tapcard API configured (env=%s, profile api=%s)", settings.app_env, settings.profile_api_url)
    return app
