# bookshelf/sa/repositories/book.py
from typing import Optional
from sqlalchemy.orm import Session
from ..models import Book

# Descriptive fields overwritten on every sync; goodreads_id and created_at never change
BOOK_FIELDS = ('title', 'author', 'isbn', 'image_url', 'description', 'pages', 'publication_year')

class BookRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, book_id: int) -> Optional[Book]:
        """Get a book by its internal ID"""
        return self.session.get(Book, book_id)

    def get_by_goodreads_id(self, goodreads_id: str) -> Optional[Book]:
        """Get a book by its Goodreads ID"""
        return self.session.query(Book).filter(Book.goodreads_id == goodreads_id).first()

    def upsert(self, goodreads_id: str, **fields) -> Book:
        """Create a book or overwrite the descriptive fields of an existing one.

        Args:
            goodreads_id: The Goodreads ID identifying the book
            fields: Values for any of BOOK_FIELDS; missing fields are stored as None

        Returns:
            The flushed Book object (its id is populated)
        """
        values = {name: fields.get(name) for name in BOOK_FIELDS}
        book = self.get_by_goodreads_id(goodreads_id)
        if book is None:
            book = Book(goodreads_id=goodreads_id, **values)
            self.session.add(book)
        else:
            for name, value in values.items():
                setattr(book, name, value)
        self.session.flush()
        return book

    def count(self) -> int:
        return self.session.query(Book).count()
