# bookshelf/config.py

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///books.db"
DEFAULT_SHELVES = ("currently-reading", "read", "to-read")


class ConfigurationError(Exception):
    """Raised when required configuration is missing"""
    pass


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid value for {name}: {raw!r} (using {default})")
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the shelf cache.

    Values come from the environment. Credentials are optional here so the
    query side can run against a cache without them; anything that talks to
    Goodreads calls require_credentials() first.
    """
    user_id: Optional[str] = None
    api_key: Optional[str] = None
    database_url: str = DEFAULT_DATABASE_URL
    page_size: int = 200
    request_delay: float = 1.0
    rate_limit_delay: float = 5.0
    max_pages: int = 50

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            user_id=os.getenv("GOODREADS_USER_ID") or None,
            api_key=os.getenv("GOODREADS_API_KEY") or None,
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            page_size=_env_number("GOODREADS_PAGE_SIZE", 200, int),
            request_delay=_env_number("GOODREADS_REQUEST_DELAY", 1.0, float),
            rate_limit_delay=_env_number("GOODREADS_RATE_LIMIT_DELAY", 5.0, float),
            max_pages=_env_number("GOODREADS_MAX_PAGES", 50, int),
        )

    @property
    def missing_credentials(self) -> Tuple[str, ...]:
        missing = []
        if not self.user_id:
            missing.append("GOODREADS_USER_ID")
        if not self.api_key:
            missing.append("GOODREADS_API_KEY")
        return tuple(missing)

    @property
    def has_credentials(self) -> bool:
        return not self.missing_credentials

    def require_credentials(self) -> None:
        """Raise ConfigurationError if the Goodreads credentials are not set."""
        missing = self.missing_credentials
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
