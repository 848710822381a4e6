# api/schemas/book.py
from typing import Optional, List
from pydantic import BaseModel, ConfigDict

class Book(BaseModel):
    goodreads_id: str
    title: str
    author: str
    link: str
    image_url: Optional[str] = None
    shelf: Optional[str] = None
    rating: Optional[int] = None
    review: Optional[str] = None
    date_added: Optional[str] = None
    date_started: Optional[str] = None
    date_finished: Optional[str] = None
    read_count: Optional[int] = None
    owned: Optional[bool] = None
    pages: Optional[int] = None
    publication_year: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class BookPage(BaseModel):
    items: List[Book]
    has_more: bool
    next_cursor: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class RatingCount(BaseModel):
    rating: int
    count: int

class AuthorCount(BaseModel):
    author: str
    count: int

class ActivityPoint(BaseModel):
    date: str
    books: int

class ReadingStats(BaseModel):
    total_books: int
    average_rating: Optional[float] = None
    books_this_year: int
    rating_distribution: List[RatingCount]
    top_authors: List[AuthorCount]
    reading_activity: List[ActivityPoint]
    available_years: List[int]

    model_config = ConfigDict(from_attributes=True)
