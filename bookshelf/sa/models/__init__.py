from .base import Base, CreatedAtMixin
from .book import Book
from .review import Review

__all__ = [
    'Base',
    'CreatedAtMixin',
    'Book',
    'Review'
]
