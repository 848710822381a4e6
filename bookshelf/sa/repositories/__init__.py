from .book import BookRepository
from .review import ReviewRepository

__all__ = ['BookRepository', 'ReviewRepository']
