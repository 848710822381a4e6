# bookshelf/goodreads/parser.py

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup
from pydantic import ValidationError

from bookshelf.models import ShelfEntry, ShelfPage

logger = logging.getLogger(__name__)

# e.g. "Tue Jan 02 10:00:00 -0800 2024"
GOODREADS_DATE_FORMAT = "%a %b %d %H:%M:%S %z %Y"


def text_of(element: Optional[ET.Element], path: Optional[str] = None) -> Optional[str]:
    """Text of an element (or of a child found by path), None when absent.

    Goodreads marks missing values with nil="true" and sometimes leaves
    elements empty; both are treated as absent.
    """
    if element is not None and path is not None:
        element = element.find(path)
    if element is None:
        return None
    if element.get("nil") == "true":
        return None
    text = (element.text or "").strip()
    return text or None


def to_int(value: Optional[str]) -> Optional[int]:
    """Parse an integer; anything unparseable is absent, never 0"""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        try:
            return int(float(value.strip()))
        except (ValueError, OverflowError):
            return None


def to_date(value: Optional[str]) -> Optional[str]:
    """Normalise a Goodreads timestamp to YYYY-MM-DD.

    The calendar date is taken as written in the timestamp's own offset.
    """
    if not value:
        return None
    value = value.strip()
    try:
        return datetime.strptime(value, GOODREADS_DATE_FORMAT).date().isoformat()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value[:10]).date().isoformat()
    except ValueError:
        logger.debug(f"Unparseable date: {value!r}")
        return None


def html_to_text(value: Optional[str]) -> Optional[str]:
    """Reduce an HTML fragment (descriptions, review bodies) to plain text"""
    if not value:
        return None
    if "<" not in value:
        return value.strip() or None
    text = BeautifulSoup(value, "html.parser").get_text("\n", strip=True)
    return text or None


def _shelf_name(review: ET.Element) -> Optional[str]:
    shelves = review.findall("shelves/shelf")
    if not shelves:
        return None
    # A review can carry custom shelves too; the exclusive one is its status
    for shelf in shelves:
        if shelf.get("exclusive") == "true" and shelf.get("name"):
            return shelf.get("name")
    return shelves[0].get("name") or None


def extract_review(review: ET.Element) -> Dict[str, Any]:
    """Flatten one <review> element into ShelfEntry fields (unvalidated)"""
    book = review.find("book")
    author = book.find("authors/author") if book is not None else None

    return {
        "goodreads_id": text_of(book, "id"),
        "title": text_of(book, "title"),
        "author": text_of(author, "name"),
        "isbn": text_of(book, "isbn"),
        "image_url": text_of(book, "image_url"),
        "description": html_to_text(text_of(book, "description")),
        "pages": to_int(text_of(book, "num_pages")),
        "publication_year": to_int(text_of(book, "publication_year")),
        "shelf": _shelf_name(review),
        "rating": to_int(text_of(review, "rating")),
        "review": html_to_text(text_of(review, "body")),
        "date_added": to_date(text_of(review, "date_added")),
        "date_started": to_date(text_of(review, "started_at")),
        "date_read": to_date(text_of(review, "read_at") or text_of(review, "date_read")),
        "read_count": to_int(text_of(review, "read_count")),
        "owned": to_int(text_of(review, "owned")),
    }


def parse_shelf_xml(xml: str) -> ShelfPage:
    """Parse a review/list response into a ShelfPage.

    Malformed payloads give an empty page and a logged error. Reviews missing
    an id, title or author are skipped and counted in ShelfPage.invalid.
    """
    if not xml or not xml.strip():
        return ShelfPage()
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        logger.error(f"Error parsing Goodreads XML: {e}")
        return ShelfPage()

    reviews = root.find("reviews") if root.tag != "reviews" else root
    if reviews is None:
        return ShelfPage()

    entries = []
    invalid_ids = []
    invalid = 0
    for element in reviews.findall("review"):
        fields = extract_review(element)
        try:
            entries.append(ShelfEntry(**fields))
        except ValidationError:
            invalid += 1
            if fields["goodreads_id"]:
                invalid_ids.append(fields["goodreads_id"])
            logger.warning(
                f"Skipping review with missing data: id={fields['goodreads_id']}, "
                f"title={fields['title']!r}, author={fields['author']!r}"
            )

    return ShelfPage(
        entries=entries,
        start=to_int(reviews.get("start")),
        end=to_int(reviews.get("end")),
        total=to_int(reviews.get("total")),
        invalid=invalid,
        invalid_ids=invalid_ids,
    )


def parse_shelf_total(xml: str) -> Optional[int]:
    """Total number of reviews on a shelf as reported by the listing"""
    if not xml or not xml.strip():
        return None
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        logger.error(f"Error parsing Goodreads XML: {e}")
        return None
    reviews = root.find("reviews") if root.tag != "reviews" else root
    if reviews is None:
        return None
    total = to_int(reviews.get("total"))
    return total if total is not None else to_int(reviews.get("end"))
