# bookshelf/sa/repositories/review.py
from typing import Any, Dict, List, Optional, Set
from sqlalchemy import func, asc, desc
from sqlalchemy.orm import Session, contains_eager
from ..models import Book, Review

REVIEW_FIELDS = ('rating', 'review', 'date_added', 'date_read', 'date_started', 'read_count', 'owned')

SORT_COLUMNS = {
    'title': Book.title,
    'author': Book.author,
    'date_added': Review.date_added,
    'date_finished': Review.date_read,
}
DEFAULT_SORT = 'date_added'
DEFAULT_ORDER = 'desc'

class ReviewRepository:
    """Repository for shelf membership rows (the reviews table)."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get(self, book_id: int, shelf: str) -> Optional[Review]:
        return (
            self.session.query(Review)
            .filter(Review.book_id == book_id, Review.shelf == shelf)
            .one_or_none()
        )

    def get_for_book(self, book_id: int) -> List[Review]:
        return self.session.query(Review).filter(Review.book_id == book_id).all()

    def upsert(self, book_id: int, shelf: str, **fields) -> Review:
        """Create or update the row for (book_id, shelf).

        Args:
            book_id: Internal ID of the book
            shelf: Shelf name
            fields: Values for any of REVIEW_FIELDS

        Returns:
            The flushed Review object
        """
        values = {name: fields[name] for name in REVIEW_FIELDS if name in fields}
        if values.get('read_count') is None:
            values['read_count'] = 1
        values['owned'] = bool(values.get('owned'))

        review = self.get(book_id, shelf)
        if review is None:
            review = Review(book_id=book_id, shelf=shelf, **values)
            self.session.add(review)
        else:
            for name, value in values.items():
                setattr(review, name, value)
        self.session.flush()
        return review

    def delete(self, book_id: int, shelf: str) -> bool:
        """Delete one membership row.

        Returns:
            True if a row was deleted, False if none existed
        """
        result = (
            self.session.query(Review)
            .filter(Review.book_id == book_id, Review.shelf == shelf)
            .delete(synchronize_session=False)
        )
        return result > 0

    def delete_other_shelves(self, book_id: int, keep_shelf: str) -> int:
        """Delete the book's rows on every shelf except keep_shelf."""
        return (
            self.session.query(Review)
            .filter(Review.book_id == book_id, Review.shelf != keep_shelf)
            .delete(synchronize_session=False)
        )

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
        """List a shelf with the book of each row loaded.

        Args:
            shelf: Shelf name
            limit: Maximum number of rows (None for no limit)
            offset: Number of rows to skip
            sort_by: One of title, author, date_added, date_finished
            sort_order: asc or desc
            title_filter: Case-insensitive substring the title must contain
            author_filter: Case-insensitive substring the author must contain
            require_finished: Only rows with a finish date

        Returns:
            List of Review objects in the requested order
        """
        query = (
            self.session.query(Review)
            .join(Review.book)
            .options(contains_eager(Review.book))
            .filter(Review.shelf == shelf)
        )

        if title_filter and title_filter.strip():
            query = query.filter(Book.title.icontains(title_filter.strip(), autoescape=True))
        if author_filter and author_filter.strip():
            query = query.filter(Book.author.icontains(author_filter.strip(), autoescape=True))
        if require_finished:
            query = query.filter(Review.date_read.isnot(None), Review.date_read != '')

        column = SORT_COLUMNS.get(sort_by or DEFAULT_SORT, SORT_COLUMNS[DEFAULT_SORT])
        direction = desc if (sort_order or DEFAULT_ORDER) == 'desc' else asc
        if column is Book.title or column is Book.author:
            column = func.lower(column)
        # Rows with no value sort last in either direction; id keeps pages stable
        query = query.order_by(column.is_(None), direction(column), direction(Review.id))

        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def goodreads_ids_on_shelf(self, shelf: str) -> Dict[str, int]:
        """Map Goodreads ID to internal book ID for every book on a shelf"""
        rows = (
            self.session.query(Book.goodreads_id, Book.id)
            .join(Review, Review.book_id == Book.id)
            .filter(Review.shelf == shelf)
            .all()
        )
        return {goodreads_id: book_id for goodreads_id, book_id in rows}

    def count_shelf(self, shelf: str) -> int:
        return self.session.query(Review).filter(Review.shelf == shelf).count()

    def shelf_counts(self) -> Dict[str, int]:
        rows = (
            self.session.query(Review.shelf, func.count(Review.id))
            .group_by(Review.shelf)
            .all()
        )
        return {shelf: count for shelf, count in rows}

    def books_with_multiple_shelves(self) -> Set[int]:
        rows = (
            self.session.query(Review.book_id)
            .group_by(Review.book_id)
            .having(func.count(Review.id) > 1)
            .all()
        )
        return {book_id for (book_id,) in rows}

    def clear_zero_ratings(self) -> int:
        """Store unrated books as NULL rather than 0"""
        return (
            self.session.query(Review)
            .filter(Review.rating == 0)
            .update({Review.rating: None}, synchronize_session=False)
        )

    def reading_stats(self, year: int, shelf: str = 'read', top_authors: int = 10) -> Dict[str, Any]:
        """Summary figures for a shelf (normally 'read').

        A row's reading date is the first present of date_read, date_started
        and date_added. Unrated rows (NULL or 0) are left out of the average
        and the rating distribution.

        Args:
            year: Calendar year counted in books_this_year
            shelf: Shelf to summarise
            top_authors: Number of authors to list

        Returns:
            Dict of raw values keyed like ReadingStats
        """
        on_shelf = Review.shelf == shelf
        rated = Review.rating > 0
        read_date = func.coalesce(
            func.nullif(Review.date_read, ''),
            func.nullif(Review.date_started, ''),
            func.nullif(Review.date_added, ''),
        )
        read_year = func.substr(read_date, 1, 4)

        total_books = (
            self.session.query(func.count(func.distinct(Review.book_id)))
            .filter(on_shelf)
            .scalar()
        )
        average_rating = (
            self.session.query(func.avg(Review.rating))
            .filter(on_shelf, rated)
            .scalar()
        )
        books_this_year = (
            self.session.query(func.count(Review.id))
            .filter(on_shelf, read_date.isnot(None), read_year == str(year))
            .scalar()
        )
        ratings = (
            self.session.query(Review.rating, func.count(Review.id))
            .filter(on_shelf, rated)
            .group_by(Review.rating)
            .order_by(Review.rating)
            .all()
        )
        author_count = func.count(Review.id)
        authors = (
            self.session.query(Book.author, author_count)
            .join(Review, Review.book_id == Book.id)
            .filter(on_shelf)
            .group_by(Book.author)
            .order_by(author_count.desc(), Book.author)
            .limit(top_authors)
            .all()
        )
        activity = (
            self.session.query(read_date, func.count(Review.id))
            .filter(on_shelf, read_date.isnot(None))
            .group_by(read_date)
            .order_by(read_date)
            .all()
        )
        years = (
            self.session.query(read_year)
            .filter(on_shelf, read_date.isnot(None))
            .distinct()
            .order_by(read_year)
            .all()
        )

        return {
            'total_books': total_books or 0,
            'average_rating': float(average_rating) if average_rating is not None else None,
            'books_this_year': books_this_year or 0,
            'rating_distribution': [{'rating': r, 'count': c} for r, c in ratings],
            'top_authors': [{'author': a, 'count': c} for a, c in authors],
            'reading_activity': [{'date': d, 'books': c} for d, c in activity],
            'available_years': [int(y) for (y,) in years if y and y.isdigit()],
        }
