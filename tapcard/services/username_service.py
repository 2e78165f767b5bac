"""Username normalization and availability checks."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from tapcard.core.config import MIN_USERNAME_CHECK_QUIET_MS, get_settings
from tapcard.domain.identifiers import normalize_username, username_available
from tapcard.repositories.profile_api import ProfileAPI, ProfileAPIError

logger = logging.getLogger(__name__)

TAKEN_MESSAGE = "Username is already taken"


@dataclass(frozen=True)
class UsernameCheck:
    candidate: str
    available: bool
    checked: bool
    error: Optional[str] = None


class UsernameService:
    """Normalizes candidates and asks the remote API whether they are free."""

    def __init__(self, api: ProfileAPI) -> None:
        self.api = api

    def normalize(self, value: Optional[str]) -> str:
        return normalize_username(value)

    def check(self, raw: Optional[str], current_username: Optional[str] = None,
              credential: Optional[str] = None) -> UsernameCheck:
        candidate = self.normalize(raw)
        if not candidate:
            return UsernameCheck(candidate="", available=False, checked=False)
        if current_username and candidate == current_username:
            return UsernameCheck(candidate=candidate, available=True, checked=False)
        try:
            found = self.api.profile_exists(candidate, credential=credential)
        except ProfileAPIError as exc:
            # Never block the editor on a failing lookup.
            logger.warning("username lookup for %r failed, assuming available: %s", candidate, exc)
            return UsernameCheck(candidate=candidate, available=True, checked=False)
        available = username_available(candidate, found, current_username)
        return UsernameCheck(
            candidate=candidate,
            available=available,
            checked=True,
            error=None if available else TAKEN_MESSAGE,
        )

    def is_available(self, raw: Optional[str], current_username: Optional[str] = None,
                     credential: Optional[str] = None) -> bool:
        return self.check(raw, current_username, credential).available


ResultCallback = Callable[[UsernameCheck], Awaitable[None]]


class AvailabilityChecker:
    """
    Debounced, last-keystroke-wins availability checks.

    Each ``submit`` waits for a quiet period before looking the candidate up.
    A newer submission cancels the pending one, and a lookup that completes
    after being superseded has its result dropped. The quiet period is never
    shorter than MIN_USERNAME_CHECK_QUIET_MS. One checker per editing session;
    instances are not shared.
    """

    def __init__(
        self,
        service: UsernameService,
        *,
        current_username: Optional[str] = None,
        credential: Optional[str] = None,
        quiet_period: Optional[float] = None,
    ) -> None:
        self.service = service
        self.current_username = current_username
        self.credential = credential
        if quiet_period is None:
            quiet_period = get_settings().username_check_quiet_seconds
        self.quiet_period = max(quiet_period, MIN_USERNAME_CHECK_QUIET_MS / 1000.0)
        self._generation = 0
        self._pending: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, raw: Optional[str], on_result: Optional[ResultCallback] = None) -> asyncio.Task:
        self._generation += 1
        self.cancel_pending()
        self._pending = asyncio.ensure_future(self._run(raw, self._generation, on_result))
        return self._pending

    async def check(self, raw: Optional[str]) -> Optional[UsernameCheck]:
        """Submit and wait; ``None`` when a later submission superseded this one."""
        task = self.submit(raw)
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    def cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _run(self, raw: Optional[str], generation: int,
                   on_result: Optional[ResultCallback]) -> Optional[UsernameCheck]:
        await asyncio.sleep(self.quiet_period)
        if generation != self._generation:
            return None
        result = await asyncio.to_thread(self.service.check, raw, self.current_username, self.credential)
        if generation != self._generation:
            logger.debug("dropping stale username result for %r", result.candidate)
            return None
        if on_result is not None:
            await on_result(result)
        return result
