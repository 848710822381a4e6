# bookshelf/goodreads/client.py

import logging
from typing import Any, Dict, List, Optional

import requests

from bookshelf.config import Settings
from bookshelf.goodreads.parser import parse_shelf_total, parse_shelf_xml
from bookshelf.models import ShelfEntry, ShelfPage
from bookshelf.utils.rate_limit import RateLimiter, RetryPolicy

logger = logging.getLogger(__name__)

REVIEW_LIST_URL = "https://www.goodreads.com/review/list"


class GoodreadsError(Exception):
    """A shelf page could not be fetched"""
    pass


class RateLimitExceeded(GoodreadsError):
    """Goodreads kept answering 429 after every retry"""
    pass


class GoodreadsClient:
    """Client for the Goodreads review/list (v2, XML) endpoint.

    Requests are sequential and spaced by the rate limiter. A 429 response is
    retried on the RetryPolicy schedule; any other HTTP or network failure
    raises GoodreadsError. Payloads that do not parse come back as empty pages.
    """

    def __init__(self, settings: Settings,
                 session: Optional[requests.Session] = None,
                 rate_limiter: Optional[RateLimiter] = None,
                 retry_policy: Optional[RetryPolicy] = None,
                 timeout: float = 30.0):
        self.settings = settings
        self.session = session or requests.Session()
        self.rate_limiter = rate_limiter or RateLimiter(min_delay=settings.request_delay)
        self.retry_policy = retry_policy or RetryPolicy.exponential(settings.rate_limit_delay)
        self.timeout = timeout

    def build_params(self, shelf: str, page: int, per_page: int, sort: str = "date_added") -> Dict[str, Any]:
        return {
            "id": self.settings.user_id,
            "shelf": shelf,
            "v": 2,
            "key": self.settings.api_key,
            "per_page": per_page,
            "page": page,
            "sort": sort,
        }

    def _get(self, params: Dict[str, Any]) -> str:
        """GET the review list, retrying throttled responses.

        Raises:
            RateLimitExceeded: 429 on the first attempt and every retry
            GoodreadsError: Any other HTTP or network failure
        """
        shelf, page = params.get("shelf"), params.get("page")
        backoff = iter(self.retry_policy)
        attempt = 0

        while True:
            attempt += 1
            self.rate_limiter.delay()
            try:
                response = self.session.get(REVIEW_LIST_URL, params=params, timeout=self.timeout)
            except requests.RequestException as e:
                raise GoodreadsError(f"Error fetching {shelf} shelf page {page}: {e}") from e

            if response.status_code == 429:
                wait = next(backoff, None)
                if wait is None:
                    raise RateLimitExceeded(
                        f"Rate limited on {shelf} shelf page {page} after {attempt} attempts"
                    )
                logger.warning(
                    f"Rate limited on {shelf} shelf page {page} (attempt {attempt}), "
                    f"retrying in {wait:.1f} seconds"
                )
                self.rate_limiter.backoff(wait)
                continue

            try:
                response.raise_for_status()
            except requests.HTTPError as e:
                raise GoodreadsError(f"Error fetching {shelf} shelf page {page}: {e}") from e

            logger.debug(f"Fetched {shelf} shelf page {page}: {len(response.text)} characters")
            return response.text

    def fetch_shelf_page(self, shelf: str, page: int = 1, page_size: Optional[int] = None) -> ShelfPage:
        """Fetch and parse one page of a shelf (pages are 1-based).

        An empty page means there is no more data.
        """
        per_page = page_size or self.settings.page_size
        xml = self._get(self.build_params(shelf, page, per_page))
        result = parse_shelf_xml(xml)
        logger.info(
            f"Got {len(result.entries)} books from {shelf} page {page}"
            + (f" ({result.end}/{result.total})" if result.total is not None else "")
        )
        return result

    def fetch_shelf_total(self, shelf: str) -> Optional[int]:
        """Number of books Goodreads reports for a shelf"""
        xml = self._get(self.build_params(shelf, 1, 1))
        return parse_shelf_total(xml)

    def fetch_shelf_books(self, shelf: str, limit: int = 20) -> List[ShelfEntry]:
        """First page of a shelf straight from Goodreads, for cache misses.

        Never raises; failures are logged and give an empty list.
        """
        if not self.settings.has_credentials:
            logger.warning(f"Goodreads credentials not configured, cannot fetch {shelf} shelf")
            return []
        try:
            return list(self.fetch_shelf_page(shelf, 1, limit).entries)
        except GoodreadsError as e:
            logger.error(f"Error fetching {shelf} books: {e}")
            return []

    def close(self) -> None:
        self.session.close()
