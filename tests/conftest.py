# tests/conftest.py
import sys
import pytest
from pathlib import Path
from typing import Dict, List, Optional, Union
from sqlalchemy.orm import Session

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from bookshelf.config import Settings
from bookshelf.goodreads.client import GoodreadsError
from bookshelf.models import ShelfEntry, ShelfPage
from bookshelf.sa.models import Book, Review
from bookshelf.store import LocalStore


def build_entry(goodreads_id: str, title: Optional[str] = None, author: str = "Test Author",
                **fields) -> ShelfEntry:
    """Build a valid ShelfEntry with sensible defaults"""
    return ShelfEntry(
        goodreads_id=goodreads_id,
        title=title or f"Test Book {goodreads_id}",
        author=author,
        **fields
    )


class FakeGoodreads:
    """Stand-in for GoodreadsClient serving canned shelf pages.

    pages maps a shelf to a list of pages; each page is a list of entries or
    a ShelfPage. Pages past the end are empty.
    """

    def __init__(self, pages: Optional[Dict[str, List[Union[List[ShelfEntry], ShelfPage]]]] = None,
                 errors: Optional[Dict[str, int]] = None,
                 totals: Optional[Dict[str, int]] = None,
                 books: Optional[Dict[str, List[ShelfEntry]]] = None,
                 endless: bool = False):
        self.pages = pages or {}
        self.errors = errors or {}
        self.totals = totals or {}
        self.books = books or {}
        self.endless = endless
        self.calls = []
        self.fallback_calls = []

    def fetch_shelf_page(self, shelf: str, page: int = 1, page_size: Optional[int] = None) -> ShelfPage:
        self.calls.append((shelf, page))
        if self.errors.get(shelf) == page:
            raise GoodreadsError(f"Error fetching {shelf} shelf page {page}: 500 Server Error")
        if self.endless:
            return ShelfPage(entries=[build_entry(f"{shelf}-{page}")])
        pages = self.pages.get(shelf, [])
        if page - 1 < len(pages):
            current = pages[page - 1]
            return current if isinstance(current, ShelfPage) else ShelfPage(entries=current)
        return ShelfPage()

    def fetch_shelf_total(self, shelf: str) -> Optional[int]:
        return self.totals.get(shelf)

    def fetch_shelf_books(self, shelf: str, limit: int = 20) -> List[ShelfEntry]:
        self.fallback_calls.append((shelf, limit))
        return list(self.books.get(shelf, []))[:limit]


@pytest.fixture
def make_entry():
    return build_entry


@pytest.fixture
def fake_goodreads():
    return FakeGoodreads


@pytest.fixture
def db_url(tmp_path):
    """URL of a fresh SQLite database file for one test"""
    return f"sqlite:///{tmp_path / 'books.db'}"


@pytest.fixture
def settings(db_url):
    return Settings(
        user_id="12345",
        api_key="test-key",
        database_url=db_url,
        request_delay=0,
        rate_limit_delay=0,
    )


@pytest.fixture
def store(db_url):
    """An open LocalStore with the schema created"""
    with LocalStore(db_url) as store:
        yield store


@pytest.fixture
def db_session(store):
    """A session on the store's database for direct inspection"""
    session: Session = store.database.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed_shelf(store):
    """Put entries on a shelf directly, bypassing the sync engine"""
    def seed(shelf: str, entries: List[ShelfEntry]) -> List[int]:
        book_ids = []
        for entry in entries:
            book_id = store.upsert_book(entry)
            store.upsert_shelf_record(book_id, shelf, entry)
            book_ids.append(book_id)
        return book_ids
    return seed


@pytest.fixture
def snapshot(db_session):
    """Full contents of both tables, for comparing store states"""
    def take():
        db_session.expire_all()
        books = [
            (b.id, b.goodreads_id, b.title, b.author, b.isbn, b.image_url, b.description,
             b.pages, b.publication_year, b.created_at)
            for b in db_session.query(Book).order_by(Book.id)
        ]
        reviews = [
            (r.id, r.book_id, r.shelf, r.rating, r.review, r.date_added, r.date_read,
             r.date_started, r.read_count, r.owned, r.created_at)
            for r in db_session.query(Review).order_by(Review.id)
        ]
        return books, reviews
    return take
