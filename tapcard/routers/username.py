from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Header, Request, WebSocket, WebSocketDisconnect
from starlette.requests import HTTPConnection

from tapcard.core.rate_limiter import limit_username_checks
from tapcard.core.utils import bearer_token
from tapcard.repositories.profile_api import ProfileAPIError
from tapcard.routers.deps import get_service
from tapcard.services.profile_service import ProfileService
from tapcard.services.username_service import AvailabilityChecker, UsernameCheck, UsernameService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/username", tags=["username"])


def _signed_in_username(conn: HTTPConnection, credential: Optional[str]) -> Optional[str]:
    """Username of the credential's owner; only they may keep their own name."""
    if not credential:
        return None
    profiles: ProfileService = get_service(conn, "profile_service")
    try:
        user = profiles.current_user(credential)
    except ProfileAPIError as exc:
        logger.warning("could not resolve the signed-in user for a username check: %s", exc)
        return None
    return (user.username or None) if user else None


@router.get("/check")
def username_check(request: Request, value: str = "", authorization: Optional[str] = Header(None)):
    credential = bearer_token(authorization)
    limit_username_checks(request, credential, get_service(request, "settings"))
    svc: UsernameService = get_service(request, "username_service")
    current = _signed_in_username(request, credential)
    return asdict(svc.check(value, current, credential))


@router.websocket("/live")
async def username_live(websocket: WebSocket):
    """
    Stream keystrokes in, get availability out. Only the last value typed
    after a quiet period is looked up and answered.
    """
    await websocket.accept()
    svc: UsernameService = get_service(websocket, "username_service")
    settings = get_service(websocket, "settings")
    credential = bearer_token(websocket.headers.get("authorization"))
    checker = AvailabilityChecker(
        svc,
        current_username=await asyncio.to_thread(_signed_in_username, websocket, credential),
        credential=credential,
        quiet_period=settings.username_check_quiet_seconds,
    )

    async def _send(result: UsernameCheck) -> None:
        await websocket.send_json(asdict(result))

    try:
        while True:
            raw = await websocket.receive_text()
            checker.submit(raw, on_result=_send)
    except WebSocketDisconnect:
        logger.debug("username live check disconnected")
    finally:
        checker.cancel_pending()
