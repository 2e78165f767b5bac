"""
Configuration helpers for the Tapcard service.

Routers and services read the typed Settings object below instead of fetching
os.environ directly. Tests reset it with ``get_settings.cache_clear()``.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

# Username checks must never fire faster than this, whatever the env says.
MIN_USERNAME_CHECK_QUIET_MS = 500


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    frontend_url: str
    profile_api_url: str
    image_base_url: str
    profile_api_timeout: float
    username_check_quiet_ms: int
    currency_symbol: str
    log_level: str
    username_check_limit: int = 60
    username_check_window_seconds: int = 60

    @property
    def username_check_quiet_seconds(self) -> float:
        return max(self.username_check_quiet_ms, MIN_USERNAME_CHECK_QUIET_MS) / 1000.0


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    quiet_ms = _int(os.getenv("USERNAME_CHECK_QUIET_MS", "500"), 500)

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        frontend_url=os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/"),
        profile_api_url=os.getenv("PROFILE_API_URL", "http://localhost:8000/api").rstrip("/"),
        image_base_url=os.getenv("IMAGE_BASE_URL", "").rstrip("/"),
        profile_api_timeout=_float(os.getenv("PROFILE_API_TIMEOUT", "10"), 10.0),
        username_check_quiet_ms=max(quiet_ms, MIN_USERNAME_CHECK_QUIET_MS),
        currency_symbol=os.getenv("CURRENCY_SYMBOL", "₱"),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        username_check_limit=max(_int(os.getenv("USERNAME_CHECK_LIMIT", "60"), 60), 1),
        username_check_window_seconds=max(_int(os.getenv("USERNAME_CHECK_WINDOW_SECONDS", "60"), 60), 1),
    )
