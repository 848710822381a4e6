# bookshelf/store.py

import logging
from typing import Dict, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from bookshelf.models import ReadingStats, ShelfEntry
from bookshelf.sa.database import Database
from bookshelf.sa.models import Book, Review
from bookshelf.sa.repositories import BookRepository, ReviewRepository

logger = logging.getLogger(__name__)


class LocalStore:
    """Local cache of Goodreads books and shelf memberships.

    Every accessor runs in its own short transaction. Storage failures
    (missing file, permissions, locked or uninitialised database) are logged
    and turned into a neutral result so callers can fall back.

    Usage:
        with LocalStore("sqlite:///books.db") as store:
            rows = store.query_shelf("read", limit=21)
    """

    def __init__(self, connection_string: Optional[str] = None, create: bool = True,
                 database: Optional[Database] = None):
        """
        Args:
            connection_string: SQLAlchemy URL; defaults to DATABASE_URL or sqlite:///books.db
            create: Create the database and schema when missing. Read-only callers
                    pass False so an absent cache is reported as unavailable
            database: An existing Database to use instead of building one
        """
        self.create = create
        self._db = database
        self._connection_string = connection_string
        self.available = False

    # Lifecycle

    def open(self) -> "LocalStore":
        try:
            if self._db is None:
                self._db = Database(self._connection_string)
            if self.create:
                self._db.init_db()
                self.available = True
            elif not self._db.exists():
                logger.warning(f"Local store not found at {self._db.sqlite_path}, reads will be empty")
                self.available = False
            else:
                self.available = True
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Local store unavailable: {e}")
            self.available = False
        return self

    def close(self) -> None:
        if self._db is not None:
            self._db.dispose()
        self.available = False

    def __enter__(self) -> "LocalStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def database(self) -> Optional[Database]:
        return self._db

    def _unavailable(self, operation: str) -> bool:
        if not self.available:
            logger.warning(f"Local store not available, skipping {operation}")
            return True
        return False

    # Writes

    def upsert_book(self, entry: ShelfEntry) -> Optional[int]:
        """Insert or update a book by Goodreads ID.

        Returns:
            The internal book id, or None if the store is unavailable
        """
        if self._unavailable("upsert_book"):
            return None
        try:
            with self._db.get_db() as session:
                book = BookRepository(session).upsert(
                    entry.goodreads_id,
                    title=entry.title,
                    author=entry.author,
                    isbn=entry.isbn,
                    image_url=entry.image_url,
                    description=entry.description,
                    pages=entry.pages,
                    publication_year=entry.publication_year,
                )
                return book.id
        except SQLAlchemyError as e:
            logger.warning(f"Could not upsert book {entry.goodreads_id}: {e}")
            return None

    def upsert_shelf_record(self, book_id: int, shelf: str, entry: ShelfEntry) -> Optional[int]:
        """Insert or update the membership row keyed by (book_id, shelf).

        Returns:
            The review row id, or None if the store is unavailable
        """
        if self._unavailable("upsert_shelf_record"):
            return None
        try:
            with self._db.get_db() as session:
                review = ReviewRepository(session).upsert(
                    book_id,
                    shelf,
                    rating=entry.rating,
                    review=entry.review,
                    date_added=entry.date_added,
                    date_read=entry.date_read,
                    date_started=entry.date_started,
                    read_count=entry.read_count,
                    owned=entry.owned,
                )
                return review.id
        except SQLAlchemyError as e:
            logger.warning(f"Could not upsert shelf record ({book_id}, {shelf}): {e}")
            return None

    def delete_shelf_record(self, book_id: int, shelf: str) -> bool:
        if self._unavailable("delete_shelf_record"):
            return False
        try:
            with self._db.get_db() as session:
                return ReviewRepository(session).delete(book_id, shelf)
        except SQLAlchemyError as e:
            logger.warning(f"Could not delete shelf record ({book_id}, {shelf}): {e}")
            return False

    def delete_other_shelves(self, book_id: int, keep_shelf: str) -> int:
        """Remove the book from every shelf except keep_shelf; returns rows deleted"""
        if self._unavailable("delete_other_shelves"):
            return 0
        try:
            with self._db.get_db() as session:
                return ReviewRepository(session).delete_other_shelves(book_id, keep_shelf)
        except SQLAlchemyError as e:
            logger.warning(f"Could not clear other shelves for book {book_id}: {e}")
            return 0

    def clear_zero_ratings(self) -> int:
        if self._unavailable("clear_zero_ratings"):
            return 0
        try:
            with self._db.get_db() as session:
                return ReviewRepository(session).clear_zero_ratings()
        except SQLAlchemyError as e:
            logger.warning(f"Could not clear zero ratings: {e}")
            return 0

    # Reads

    def query_shelf(
        self,
        shelf: str,
        limit: Optional[int] = 20,
        offset: int = 0,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        title_filter: Optional[str] = None,
        author_filter: Optional[str] = None,
        require_finished: bool = False
    ) -> List[Review]:
        """List shelf rows (with their Book loaded); empty when unavailable"""
        if self._unavailable("query_shelf"):
            return []
        try:
            with self._db.get_db() as session:
                return ReviewRepository(session).query_shelf(
                    shelf,
                    limit=limit,
                    offset=offset,
                    sort_by=sort_by,
                    sort_order=sort_order,
                    title_filter=title_filter,
                    author_filter=author_filter,
                    require_finished=require_finished,
                )
        except SQLAlchemyError as e:
            logger.warning(f"Could not query shelf {shelf}: {e}")
            return []

    def get_book(self, goodreads_id: str) -> Optional[Book]:
        if self._unavailable("get_book"):
            return None
        try:
            with self._db.get_db() as session:
                return BookRepository(session).get_by_goodreads_id(goodreads_id)
        except SQLAlchemyError as e:
            logger.warning(f"Could not load book {goodreads_id}: {e}")
            return None

    def get_shelves_for_book(self, book_id: int) -> List[str]:
        if self._unavailable("get_shelves_for_book"):
            return []
        try:
            with self._db.get_db() as session:
                return sorted(r.shelf for r in ReviewRepository(session).get_for_book(book_id))
        except SQLAlchemyError as e:
            logger.warning(f"Could not load shelves for book {book_id}: {e}")
            return []

    def shelf_goodreads_ids(self, shelf: str) -> Dict[str, int]:
        """Goodreads ID -> internal book id for everything stored on a shelf"""
        if self._unavailable("shelf_goodreads_ids"):
            return {}
        try:
            with self._db.get_db() as session:
                return ReviewRepository(session).goodreads_ids_on_shelf(shelf)
        except SQLAlchemyError as e:
            logger.warning(f"Could not list books on shelf {shelf}: {e}")
            return {}

    def count_shelf(self, shelf: str) -> int:
        if self._unavailable("count_shelf"):
            return 0
        try:
            with self._db.get_db() as session:
                return ReviewRepository(session).count_shelf(shelf)
        except SQLAlchemyError as e:
            logger.warning(f"Could not count shelf {shelf}: {e}")
            return 0

    def count_books(self) -> int:
        if self._unavailable("count_books"):
            return 0
        try:
            with self._db.get_db() as session:
                return BookRepository(session).count()
        except SQLAlchemyError as e:
            logger.warning(f"Could not count books: {e}")
            return 0

    def shelf_counts(self) -> Dict[str, int]:
        if self._unavailable("shelf_counts"):
            return {}
        try:
            with self._db.get_db() as session:
                return ReviewRepository(session).shelf_counts()
        except SQLAlchemyError as e:
            logger.warning(f"Could not count shelves: {e}")
            return {}

    def books_on_multiple_shelves(self) -> Set[int]:
        if self._unavailable("books_on_multiple_shelves"):
            return set()
        try:
            with self._db.get_db() as session:
                return ReviewRepository(session).books_with_multiple_shelves()
        except SQLAlchemyError as e:
            logger.warning(f"Could not check shelf membership: {e}")
            return set()

    def reading_stats(self, year: int, shelf: str = "read") -> ReadingStats:
        """Statistics for a shelf; empty when the store is unavailable"""
        if self._unavailable("reading_stats"):
            return ReadingStats()
        try:
            with self._db.get_db() as session:
                return ReadingStats(**ReviewRepository(session).reading_stats(year, shelf))
        except SQLAlchemyError as e:
            logger.warning(f"Could not compute reading stats for {shelf}: {e}")
            return ReadingStats()
