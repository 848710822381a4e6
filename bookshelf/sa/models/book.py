# bookshelf/sa/models/book.py
from sqlalchemy import String, Integer, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, CreatedAtMixin

class Book(Base, CreatedAtMixin):
    __tablename__ = 'books'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    goodreads_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    author: Mapped[str] = mapped_column(String, nullable=False)
    isbn: Mapped[str | None] = mapped_column(String(20), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    pages: Mapped[int | None] = mapped_column(Integer, nullable=True)
    publication_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    reviews = relationship('Review', back_populates='book')

    __table_args__ = (
        Index('idx_books_goodreads_id', 'goodreads_id'),
    )
