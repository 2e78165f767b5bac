"""HTTP adapter for the remote profile/template API."""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Tuple

import httpx

from tapcard.core.config import get_settings

logger = logging.getLogger(__name__)


class ProfileAPIError(Exception):
    """Raised when the remote API cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class ProfileNotFoundError(ProfileAPIError):
    """Raised when the requested profile or template does not exist."""


class ProfileAPI:
    """
    Thin client for the remote API. Every call that needs authorization takes
    the caller's credential explicitly; nothing is read from ambient state.
    """

    def __init__(self, base_url: Optional[str] = None, *, timeout: Optional[float] = None,
                 transport: Optional[httpx.BaseTransport] = None) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.profile_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.profile_api_timeout
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _headers(self, credential: Optional[str]) -> dict:
        if not credential:
            return {}
        return {"Authorization": f"Bearer {credential}"}

    def _request(self, method: str, path: str, *, credential: Optional[str] = None, **kwargs) -> Any:
        try:
            response = self._client.request(method, path, headers=self._headers(credential), **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("profile api %s %s failed: %s", method, path, exc)
            raise ProfileAPIError(f"{method} {path} failed: {exc}") from exc
        if response.status_code == 404:
            raise ProfileNotFoundError(f"{path} not found", status_code=404)
        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            logger.warning("profile api %s %s answered %s", method, path, response.status_code)
            raise ProfileAPIError(
                f"{method} {path} answered {response.status_code}",
                status_code=response.status_code,
                payload=payload,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ProfileAPIError(f"{method} {path} returned invalid JSON") from exc

    def get_profile(self, username: str, credential: Optional[str] = None) -> dict:
        data = self._request("GET", f"/profile/{username}", credential=credential)
        if not isinstance(data, dict):
            raise ProfileNotFoundError(f"/profile/{username} not found", status_code=404)
        return data

    def profile_exists(self, username: str, credential: Optional[str] = None) -> bool:
        try:
            self.get_profile(username, credential=credential)
        except ProfileNotFoundError:
            return False
        return True

    def get_used_templates(self, username: str) -> List[dict]:
        try:
            data = self._request("GET", f"/profile/{username}/used-templates")
        except ProfileNotFoundError:
            return []
        return [item for item in (data or []) if isinstance(item, dict)]

    def get_template(self, slug: str, credential: Optional[str] = None) -> dict:
        data = self._request("GET", f"/templates/{slug}", credential=credential)
        if not isinstance(data, dict):
            raise ProfileNotFoundError(f"/templates/{slug} not found", status_code=404)
        return data

    def list_templates(self) -> List[dict]:
        data = self._request("GET", "/templates")
        if isinstance(data, dict):
            data = data.get("data") or []
        return [item for item in (data or []) if isinstance(item, dict)]

    def create_template(self, payload: dict, credential: Optional[str] = None) -> Any:
        return self._request("POST", "/templates/store", credential=credential, json=payload)

    def update_template(self, template_id: str, payload: dict, credential: Optional[str] = None) -> Any:
        return self._request("PUT", f"/templates/{template_id}", credential=credential, json=payload)

    def get_current_user(self, credential: str) -> dict:
        data = self._request("GET", "/user", credential=credential)
        if not isinstance(data, dict):
            raise ProfileNotFoundError("/user not found", status_code=404)
        return data

    def save_profile(self, form: Sequence[Tuple[str, str]], credential: str) -> Any:
        return self._request("POST", "/profile", credential=credential, data=dict(form))
