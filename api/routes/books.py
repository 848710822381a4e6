# api/routes/books.py

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_queries
from api.schemas.book import Book, BookPage, ReadingStats
from bookshelf.queries import ShelfQueries, SORT_FIELDS, SORT_ORDERS

router = APIRouter(prefix="/books", tags=["books"])

def _validate_sort(sort: Optional[str], order: Optional[str]) -> None:
    if sort is not None and sort not in SORT_FIELDS:
        raise HTTPException(status_code=400, detail=f"Invalid sort field. Must be one of: {', '.join(SORT_FIELDS)}")
    if order is not None and order not in SORT_ORDERS:
        raise HTTPException(status_code=400, detail="Invalid sort order. Must be 'asc' or 'desc'")

@router.get("/currently-reading", response_model=List[Book])
def get_currently_reading(queries: ShelfQueries = Depends(get_queries)):
    """Books on the currently-reading shelf, most recently added first."""
    return queries.get_currently_reading()

@router.get("/recently-read", response_model=List[Book])
def get_recently_read(
    limit: int = Query(10, ge=1, le=100, description="Number of books"),
    queries: ShelfQueries = Depends(get_queries)
):
    """Most recently finished books."""
    return queries.get_recently_read(limit)

@router.get("/stats", response_model=ReadingStats)
def get_stats(
    year: Optional[int] = Query(None, ge=1900, le=9999, description="Year for books_this_year (default: current year)"),
    queries: ShelfQueries = Depends(get_queries)
):
    """Reading statistics for the read shelf."""
    return queries.get_reading_stats(year)

@router.get("/read", response_model=BookPage)
def get_read(
    page: int = Query(0, ge=0, description="Page cursor (0-based)"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    queries: ShelfQueries = Depends(get_queries)
):
    """Paginated read shelf, most recently added first."""
    return queries.get_recently_read_paginated(limit=size, offset=page * size)

@router.get("/to-read", response_model=BookPage)
def get_to_read(
    page: int = Query(0, ge=0, description="Page cursor (0-based)"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    sort: str = Query("date_added", description="Sort field (title, author, date_added, date_finished)"),
    order: str = Query("desc", description="Sort order (asc or desc)"),
    title: Optional[str] = Query(None, description="Filter by title substring"),
    author: Optional[str] = Query(None, description="Filter by author substring"),
    queries: ShelfQueries = Depends(get_queries)
):
    """
    Paginated want-to-read shelf with sorting and filtering.

    Args:
        page: Page cursor; pass next_cursor from the previous response
        size: Number of items per page
        sort: Field to sort by
        order: Sort order (asc or desc)
        title: Case-insensitive title substring
        author: Case-insensitive author substring

    Returns:
        BookPage with items, has_more and next_cursor
    """
    _validate_sort(sort, order)
    return queries.get_want_to_read_paginated(
        limit=size,
        offset=page * size,
        sort_by=sort,
        sort_order=order,
        title_filter=title,
        author_filter=author,
    )

@router.get("/shelf/{shelf}", response_model=BookPage)
def get_shelf(
    shelf: str,
    page: int = Query(0, ge=0, description="Page cursor (0-based)"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    sort: Optional[str] = Query(None, description="Sort field (title, author, date_added, date_finished)"),
    order: Optional[str] = Query(None, description="Sort order (asc or desc)"),
    title: Optional[str] = Query(None, description="Filter by title substring"),
    author: Optional[str] = Query(None, description="Filter by author substring"),
    queries: ShelfQueries = Depends(get_queries)
):
    """Any shelf, paginated."""
    _validate_sort(sort, order)
    return queries.get_shelf(
        shelf,
        page=page,
        page_size=size,
        sort_by=sort,
        sort_order=order,
        title_filter=title,
        author_filter=author,
    )
