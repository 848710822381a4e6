# bookshelf/sa/models/review.py
from sqlalchemy import String, Integer, Boolean, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, CreatedAtMixin

class Review(Base, CreatedAtMixin):
    """A book's membership of one shelf, with the user's rating and review.

    At most one row exists per (book_id, shelf). Dates are stored as
    YYYY-MM-DD strings so they sort lexically.
    """
    __tablename__ = 'reviews'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[int] = mapped_column(ForeignKey('books.id'), nullable=False)
    shelf: Mapped[str] = mapped_column(String(100), nullable=False, default='read')
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    review: Mapped[str | None] = mapped_column(String, nullable=True)
    date_added: Mapped[str | None] = mapped_column(String(10), nullable=True)
    date_read: Mapped[str | None] = mapped_column(String(10), nullable=True)
    date_started: Mapped[str | None] = mapped_column(String(10), nullable=True)
    read_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    owned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    book = relationship('Book', back_populates='reviews')

    __table_args__ = (
        UniqueConstraint('book_id', 'shelf', name='uix_reviews_book_shelf'),
        Index('idx_reviews_book_id', 'book_id'),
        Index('idx_reviews_shelf', 'shelf'),
        Index('idx_reviews_date_read', 'date_read'),
    )
