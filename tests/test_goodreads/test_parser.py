# tests/test_goodreads/test_parser.py
import pytest
from bookshelf.goodreads.parser import (
    html_to_text, parse_shelf_total, parse_shelf_xml, to_date, to_int
)

def review_xml(book_id="12345", title="Dune", author="Frank Herbert", rating="4",
               shelf='<shelf name="read" exclusive="true"/>', extra=""):
    title_el = f"<title>{title}</title>" if title is not None else ""
    author_el = f"<authors><author><name>{author}</name></author></authors>" if author is not None else ""
    return f"""
    <review>
      <book>
        <id type="integer">{book_id}</id>
        {title_el}
        <isbn nil="true"/>
        <image_url>https://images.example.com/{book_id}.jpg</image_url>
        <link>https://www.goodreads.com/book/show/{book_id}</link>
        <num_pages>412</num_pages>
        <publication_year>1965</publication_year>
        <description>&lt;b&gt;Arrakis&lt;/b&gt;&lt;br /&gt;the desert planet</description>
        {author_el}
      </book>
      <rating>{rating}</rating>
      <shelves>{shelf}</shelves>
      <date_added>Tue Jan 02 10:00:00 -0800 2024</date_added>
      <started_at>Fri Jan 05 23:30:00 -0800 2024</started_at>
      <read_at>Sat Feb 10 08:15:00 -0800 2024</read_at>
      <read_count>2</read_count>
      <owned>1</owned>
      <body>  </body>
      {extra}
    </review>"""

def response_xml(*reviews, start=1, end=None, total=None):
    end = len(reviews) if end is None else end
    total = end if total is None else total
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<GoodreadsResponse>
  <Request><authentication>true</authentication></Request>
  <reviews start="{start}" end="{end}" total="{total}">
    {''.join(reviews)}
  </reviews>
</GoodreadsResponse>"""

def test_parse_full_review():
    page = parse_shelf_xml(response_xml(review_xml()))

    assert len(page.entries) == 1
    entry = page.entries[0]
    assert entry.goodreads_id == "12345"
    assert entry.title == "Dune"
    assert entry.author == "Frank Herbert"
    assert entry.isbn is None
    assert entry.image_url == "https://images.example.com/12345.jpg"
    assert entry.pages == 412
    assert entry.publication_year == 1965
    assert entry.description == "Arrakis\nthe desert planet"
    assert entry.shelf == "read"
    assert entry.rating == 4
    assert entry.review is None
    assert entry.date_added == "2024-01-02"
    assert entry.date_started == "2024-01-05"
    assert entry.date_read == "2024-02-10"
    assert entry.read_count == 2
    assert entry.owned is True
    assert entry.link == "https://www.goodreads.com/book/show/12345"

def test_pagination_attributes():
    page = parse_shelf_xml(response_xml(review_xml(), start=201, end=201, total=250))
    assert (page.start, page.end, page.total) == (201, 201, 250)
    assert page.has_more is True

def test_zero_rating_is_kept_as_zero():
    page = parse_shelf_xml(response_xml(review_xml(rating="0")))
    assert page.entries[0].rating == 0

@pytest.mark.parametrize("rating", ["", "abc", "7"])
def test_bad_rating_is_absent(rating):
    page = parse_shelf_xml(response_xml(review_xml(rating=rating)))
    assert page.entries[0].rating is None

def test_exclusive_shelf_wins_over_custom_shelves():
    shelves = '<shelf name="favourites" exclusive="false"/><shelf name="to-read" exclusive="true"/>'
    page = parse_shelf_xml(response_xml(review_xml(shelf=shelves)))
    assert page.entries[0].shelf == "to-read"

def test_missing_shelves_leaves_shelf_unset():
    page = parse_shelf_xml(response_xml(review_xml(shelf="")))
    assert page.entries[0].shelf is None

@pytest.mark.parametrize("kwargs", [
    {"title": None},
    {"author": None},
    {"title": ""},
])
def test_incomplete_review_is_skipped_and_counted(kwargs):
    page = parse_shelf_xml(response_xml(review_xml(book_id="1"), review_xml(book_id="2", **kwargs)))

    assert [e.goodreads_id for e in page.entries] == ["1"]
    assert page.invalid == 1
    assert page.invalid_ids == ["2"]
    assert page.is_empty is False

def test_review_without_id_is_counted_without_id():
    page = parse_shelf_xml(response_xml(review_xml(book_id="")))
    assert page.entries == []
    assert page.invalid == 1
    assert page.invalid_ids == []

@pytest.mark.parametrize("payload", ["", "   ", "not xml at all", "<GoodreadsResponse><reviews>"])
def test_malformed_payload_gives_empty_page(payload):
    page = parse_shelf_xml(payload)
    assert page.entries == []
    assert page.is_empty is True

def test_response_without_reviews_is_empty():
    assert parse_shelf_xml("<GoodreadsResponse/>").is_empty is True

def test_empty_reviews_element():
    page = parse_shelf_xml(response_xml(start=0, end=0, total=0))
    assert page.is_empty is True
    assert page.has_more is False

def test_parse_shelf_total():
    assert parse_shelf_total(response_xml(review_xml(), end=1, total=321)) == 321
    assert parse_shelf_total("garbage") is None
    assert parse_shelf_total("<GoodreadsResponse/>") is None

@pytest.mark.parametrize("value,expected", [
    ("42", 42),
    (" 7 ", 7),
    ("3.0", 3),
    ("", None),
    ("n/a", None),
    ("inf", None),
    (None, None),
])
def test_to_int(value, expected):
    assert to_int(value) == expected

@pytest.mark.parametrize("value,expected", [
    ("Tue Jan 02 10:00:00 -0800 2024", "2024-01-02"),
    ("Sun Dec 31 23:59:59 +0000 2023", "2023-12-31"),
    ("2024-03-15", "2024-03-15"),
    ("2024-03-15T09:00:00Z", "2024-03-15"),
    ("yesterday", None),
    ("", None),
    (None, None),
])
def test_to_date(value, expected):
    assert to_date(value) == expected

def test_html_to_text():
    assert html_to_text("<p>One</p><p>Two</p>") == "One\nTwo"
    assert html_to_text("plain text ") == "plain text"
    assert html_to_text("<br/>") is None
    assert html_to_text(None) is None
