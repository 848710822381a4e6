# bookshelf/queries.py

import logging
from datetime import date
from typing import List, Optional

from bookshelf.goodreads.client import GoodreadsClient
from bookshelf.models import GOODREADS_BOOK_URL, BookInfo, PageResult, ReadingStats, ShelfEntry
from bookshelf.sa.models import Review
from bookshelf.store import LocalStore

logger = logging.getLogger(__name__)

CURRENTLY_READING = "currently-reading"
READ = "read"
TO_READ = "to-read"

DEFAULT_PAGE_SIZE = 20
SORT_FIELDS = ("title", "author", "date_added", "date_finished")
SORT_ORDERS = ("asc", "desc")


def _present(value):
    """Empty strings are absent values"""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _rating(value: Optional[int]) -> Optional[int]:
    # 0 means the book was never rated
    return value if value else None


def book_info_from_row(row: Review) -> BookInfo:
    """Convert a stored shelf row (with its book) to the public shape"""
    book = row.book
    return BookInfo(
        goodreads_id=book.goodreads_id,
        title=book.title,
        author=book.author,
        link=GOODREADS_BOOK_URL.format(goodreads_id=book.goodreads_id),
        image_url=_present(book.image_url),
        shelf=row.shelf,
        rating=_rating(row.rating),
        review=_present(row.review),
        date_added=_present(row.date_added),
        date_started=_present(row.date_started),
        date_finished=_present(row.date_read),
        read_count=row.read_count,
        owned=bool(row.owned),
        pages=book.pages,
        publication_year=book.publication_year,
    )


def book_info_from_entry(entry: ShelfEntry) -> BookInfo:
    """Convert a live Goodreads record to the public shape"""
    return BookInfo(
        goodreads_id=entry.goodreads_id,
        title=entry.title,
        author=entry.author,
        link=entry.link,
        image_url=_present(entry.image_url),
        shelf=entry.shelf,
        rating=_rating(entry.rating),
        review=_present(entry.review),
        date_added=_present(entry.date_added),
        date_started=_present(entry.date_started),
        date_finished=_present(entry.date_read),
        read_count=entry.read_count,
        owned=entry.owned,
        pages=entry.pages,
        publication_year=entry.publication_year,
    )


class ShelfQueries:
    """Read side of the shelf cache.

    Reads come from the local store. When the store has nothing for the
    first page of a request, the shelf is fetched directly from Goodreads
    instead (unfiltered and unsorted); later pages never fall back, so a
    listing is never stitched together from two sources.
    """

    def __init__(self, store: LocalStore, client: Optional[GoodreadsClient] = None):
        self.store = store
        self.client = client

    def _fallback(self, shelf: str, limit: int) -> List[BookInfo]:
        if self.client is None:
            return []
        logger.info(f"Local store empty, falling back to Goodreads API for {shelf} books")
        return [book_info_from_entry(entry) for entry in self.client.fetch_shelf_books(shelf, limit)]

    def get_shelf(
        self,
        shelf: str,
        page: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        title_filter: Optional[str] = None,
        author_filter: Optional[str] = None,
        require_finished: bool = False
    ) -> PageResult[BookInfo]:
        """One page of a shelf.

        Args:
            shelf: Shelf name
            page: Zero-based page index (the cursor)
            page_size: Books per page
            sort_by: title, author, date_added or date_finished
            sort_order: asc or desc
            title_filter: Case-insensitive substring of the title
            author_filter: Case-insensitive substring of the author

        Returns:
            PageResult with has_more and next_cursor (page + 1, or None)
        """
        page = max(page, 0)
        page_size = max(page_size, 1)
        return self._paginate(shelf, page_size, page * page_size, sort_by, sort_order,
                              title_filter, author_filter, require_finished)

    def _paginate(self, shelf, limit, offset, sort_by=None, sort_order=None,
                  title_filter=None, author_filter=None, require_finished=False) -> PageResult[BookInfo]:
        # Over-fetch by one row to learn whether another page exists
        try:
            limit = max(limit, 1)
            offset = max(offset, 0)
            rows = self.store.query_shelf(
                shelf,
                limit=limit + 1,
                offset=offset,
                sort_by=sort_by if sort_by in SORT_FIELDS else None,
                sort_order=sort_order if sort_order in SORT_ORDERS else None,
                title_filter=title_filter,
                author_filter=author_filter,
                require_finished=require_finished,
            )

            if rows:
                has_more = len(rows) > limit
                # A page cursor only exists when the offset falls on a page boundary
                aligned = offset % limit == 0
                return PageResult[BookInfo](
                    items=[book_info_from_row(row) for row in rows[:limit]],
                    has_more=has_more,
                    next_cursor=offset // limit + 1 if has_more and aligned else None,
                )

            if offset == 0:
                return PageResult[BookInfo](items=self._fallback(shelf, limit))

            return PageResult[BookInfo].empty()
        except Exception as e:
            logger.error(f"Error fetching {shelf} books: {e}")
            return PageResult[BookInfo].empty()

    def get_currently_reading(self) -> List[BookInfo]:
        try:
            rows = self.store.query_shelf(CURRENTLY_READING, limit=None, sort_by="date_added", sort_order="desc")
            if rows:
                return [book_info_from_row(row) for row in rows]
            return self._fallback(CURRENTLY_READING, DEFAULT_PAGE_SIZE)
        except Exception as e:
            logger.error(f"Error fetching currently reading books: {e}")
            return []

    def get_recently_read(self, limit: int = 10) -> List[BookInfo]:
        """Most recently finished books (only rows with a finish date)"""
        try:
            rows = self.store.query_shelf(
                READ, limit=limit, sort_by="date_finished", sort_order="desc", require_finished=True
            )
            if rows:
                return [book_info_from_row(row) for row in rows]
            if self.store.count_shelf(READ):
                # Books are cached, none of them finished yet
                return []
            return self._fallback(READ, limit)
        except Exception as e:
            logger.error(f"Error fetching recently read books: {e}")
            return []

    def get_recently_read_paginated(self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> PageResult[BookInfo]:
        """Read shelf by date added, newest first.

        next_cursor is the next page index (offset // limit + 1) and is only
        set when offset is a multiple of limit; otherwise continue with
        offset + limit.
        """
        return self._paginate(READ, limit, offset, sort_by="date_added", sort_order="desc")

    def get_want_to_read_paginated(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        sort_by: Optional[str] = "date_added",
        sort_order: Optional[str] = "desc",
        title_filter: Optional[str] = None,
        author_filter: Optional[str] = None
    ) -> PageResult[BookInfo]:
        return self._paginate(TO_READ, limit, offset, sort_by=sort_by, sort_order=sort_order,
                              title_filter=title_filter, author_filter=author_filter)

    def get_reading_stats(self, year: Optional[int] = None) -> ReadingStats:
        """Reading statistics for the read shelf; never falls back to Goodreads.

        Args:
            year: Year counted in books_this_year (defaults to the current year)
        """
        try:
            return self.store.reading_stats(year or date.today().year, READ)
        except Exception as e:
            logger.error(f"Error computing reading stats: {e}")
            return ReadingStats()
