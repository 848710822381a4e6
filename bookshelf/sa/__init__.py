from .database import Database
from .models import Base, Book, Review

__all__ = [
    'Database',
    'Base',
    'Book',
    'Review'
]
