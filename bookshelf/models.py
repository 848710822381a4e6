# bookshelf/models.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")

GOODREADS_BOOK_URL = "https://www.goodreads.com/book/show/{goodreads_id}"


class ShelfEntry(BaseModel):
    """One review row from a Goodreads shelf listing, flattened and validated.

    Records that fail validation never reach the store; the parser counts
    them instead.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    # Book
    goodreads_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    isbn: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    pages: Optional[int] = None
    publication_year: Optional[int] = None

    # Review
    shelf: Optional[str] = None
    rating: Optional[int] = None
    review: Optional[str] = None
    date_added: Optional[str] = None
    date_started: Optional[str] = None
    date_read: Optional[str] = None
    read_count: int = 1
    owned: bool = False

    @field_validator("rating")
    @classmethod
    def _rating_in_range(cls, value: Optional[int]) -> Optional[int]:
        # 0 is kept: it means "unrated" and is dropped when presenting
        if value is None or 0 <= value <= 5:
            return value
        return None

    @field_validator("read_count", mode="before")
    @classmethod
    def _default_read_count(cls, value):
        return value or 1

    @field_validator("owned", mode="before")
    @classmethod
    def _default_owned(cls, value):
        return bool(value)

    @property
    def link(self) -> str:
        return GOODREADS_BOOK_URL.format(goodreads_id=self.goodreads_id)


class ShelfPage(BaseModel):
    """A single page of a shelf listing"""
    entries: List[ShelfEntry] = []
    start: Optional[int] = None
    end: Optional[int] = None
    total: Optional[int] = None
    invalid: int = 0
    # ids of invalid reviews that still carried one
    invalid_ids: List[str] = []

    @property
    def is_empty(self) -> bool:
        return not self.entries and not self.invalid

    @property
    def has_more(self) -> bool:
        if self.end is None or self.total is None:
            return bool(self.entries)
        return self.end < self.total


class BookInfo(BaseModel):
    """Public shape of a shelved book handed to the presentation layer"""
    model_config = ConfigDict(from_attributes=True)

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


class PageResult(BaseModel, Generic[T]):
    items: List[T] = []
    has_more: bool = False
    next_cursor: Optional[int] = None

    @classmethod
    def empty(cls) -> "PageResult[T]":
        return cls(items=[], has_more=False, next_cursor=None)


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
    """Reading statistics for the read shelf.

    average_rating is None when no book is rated; an empty instance is what
    an unavailable store produces.
    """
    total_books: int = 0
    average_rating: Optional[float] = None
    books_this_year: int = 0
    rating_distribution: List[RatingCount] = []
    top_authors: List[AuthorCount] = []
    reading_activity: List[ActivityPoint] = []
    available_years: List[int] = []
