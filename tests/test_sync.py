# tests/test_sync.py
import pytest
from bookshelf.goodreads.client import RateLimitExceeded
from bookshelf.models import ShelfPage
from bookshelf.sync import ShelfSync, SyncState

def test_sync_stores_books_and_shelf_rows(store, fake_goodreads, make_entry):
    client = fake_goodreads(pages={"read": [[
        make_entry("1", title="Dune", shelf="read", rating=5),
        make_entry("2", title="Emma", shelf="read"),
    ]]})

    result = ShelfSync(store, client).sync_shelf("read")

    assert result.synced == 2
    assert result.fetched == 2
    assert result.pages == 1
    assert result.aborted is False
    assert store.count_books() == 2
    assert store.count_shelf("read") == 2
    assert store.get_book("1").title == "Dune"

def test_sync_is_idempotent(store, fake_goodreads, make_entry, snapshot):
    client = fake_goodreads(pages={"read": [
        [make_entry("1", shelf="read", rating=4, date_read="2024-02-10")],
        [make_entry("2", shelf="read")],
    ]})
    sync = ShelfSync(store, client)

    sync.sync_shelf("read")
    before = snapshot()
    sync.sync_shelf("read")

    assert snapshot() == before

def test_pagination_walks_until_empty_page(store, fake_goodreads, make_entry):
    client = fake_goodreads(pages={"read": [[make_entry("1")], [make_entry("2")], [make_entry("3")]]})

    result = ShelfSync(store, client).sync_shelf("read")

    assert result.pages == 3
    assert client.calls == [("read", 1), ("read", 2), ("read", 3), ("read", 4)]

def test_pagination_stops_when_listing_reports_last_page(store, fake_goodreads, make_entry):
    last = ShelfPage(entries=[make_entry("1"), make_entry("2")], start=1, end=2, total=2)
    client = fake_goodreads(pages={"read": [last]})

    ShelfSync(store, client).sync_shelf("read")

    assert client.calls == [("read", 1)]

def test_book_moved_between_shelves_keeps_single_shelf(store, fake_goodreads, make_entry):
    client = fake_goodreads(pages={
        "to-read": [[make_entry("1", shelf="to-read")]],
        "read": [[make_entry("1", shelf="read", rating=5)]],
    })
    sync = ShelfSync(store, client)

    sync.sync_shelf("to-read")
    result = sync.sync_shelf("read")

    book_id = store.get_book("1").id
    assert store.get_shelves_for_book(book_id) == ["read"]
    assert result.moved == 1
    assert store.books_on_multiple_shelves() == set()

def test_record_shelf_tag_wins_over_requested_shelf(store, fake_goodreads, make_entry):
    client = fake_goodreads(pages={"to-read": [[make_entry("1", shelf="read")]]})

    ShelfSync(store, client).sync_shelf("to-read")

    assert store.count_shelf("read") == 1
    assert store.count_shelf("to-read") == 0

def test_untagged_record_uses_requested_shelf(store, fake_goodreads, make_entry):
    client = fake_goodreads(pages={"to-read": [[make_entry("1")]]})
    ShelfSync(store, client).sync_shelf("to-read")
    assert store.count_shelf("to-read") == 1

def test_orphans_are_removed_but_catalog_rows_stay(store, fake_goodreads, make_entry, seed_shelf):
    seed_shelf("read", [make_entry("A"), make_entry("B"), make_entry("C")])
    client = fake_goodreads(pages={"read": [[make_entry("A", shelf="read"), make_entry("B", shelf="read")]]})

    result = ShelfSync(store, client).sync_shelf("read")

    assert result.orphans_removed == 1
    assert result.cleaned is True
    assert set(store.shelf_goodreads_ids("read")) == {"A", "B"}
    assert store.get_book("C") is not None

def test_orphan_removal_only_touches_the_synced_shelf(store, fake_goodreads, make_entry, seed_shelf):
    seed_shelf("to-read", [make_entry("X")])
    client = fake_goodreads(pages={"read": [[make_entry("A", shelf="read")]]})

    ShelfSync(store, client).sync_shelf("read")

    assert set(store.shelf_goodreads_ids("to-read")) == {"X"}

def test_empty_fetch_never_removes_anything(store, fake_goodreads, make_entry, seed_shelf):
    seed_shelf("read", [make_entry("A"), make_entry("B")])
    client = fake_goodreads()

    result = ShelfSync(store, client).sync_shelf("read")

    assert result.synced == 0
    assert result.orphans_removed == 0
    assert result.cleaned is False
    assert store.count_shelf("read") == 2

def test_fetch_error_keeps_existing_rows(store, fake_goodreads, make_entry, seed_shelf):
    seed_shelf("read", [make_entry("A"), make_entry("B"), make_entry("C")])
    client = fake_goodreads(pages={"read": [[make_entry("A", shelf="read")]]}, errors={"read": 2})

    result = ShelfSync(store, client).sync_shelf("read")

    assert result.aborted is True
    assert result.error is not None
    assert result.synced == 1
    assert result.cleaned is False
    assert store.count_shelf("read") == 3

def test_rate_limit_exhaustion_aborts_without_cleanup(store, make_entry, seed_shelf):
    class ThrottledClient:
        def fetch_shelf_page(self, shelf, page=1, page_size=None):
            raise RateLimitExceeded("Rate limited on read shelf page 1 after 4 attempts")

    seed_shelf("read", [make_entry("A")])

    result = ShelfSync(store, ThrottledClient()).sync_shelf("read")

    assert result.aborted is True
    assert store.count_shelf("read") == 1

def test_invalid_records_are_counted_and_not_treated_as_orphans(store, fake_goodreads, make_entry, seed_shelf):
    seed_shelf("read", [make_entry("A"), make_entry("B")])
    page = ShelfPage(entries=[make_entry("A", shelf="read")], invalid=1, invalid_ids=["B"])
    client = fake_goodreads(pages={"read": [page]})

    result = ShelfSync(store, client).sync_shelf("read")

    assert result.skipped == 1
    assert result.fetched == 2
    assert result.synced == 1
    assert set(store.shelf_goodreads_ids("read")) == {"A", "B"}

def test_page_limit_stops_fetching_and_skips_cleanup(store, fake_goodreads, make_entry, seed_shelf):
    seed_shelf("read", [make_entry("old")])
    client = fake_goodreads(endless=True)

    result = ShelfSync(store, client, max_pages=2).sync_shelf("read")

    assert len(client.calls) == 2
    assert result.hit_page_limit is True
    assert result.cleaned is False
    assert "old" in store.shelf_goodreads_ids("read")

def test_default_page_limit_is_fifty(store, fake_goodreads):
    client = fake_goodreads(endless=True)
    result = ShelfSync(store, client).sync_shelf("read")
    assert len(client.calls) == 50
    assert result.pages == 50

def test_states_progress_and_end_idle(store, fake_goodreads, make_entry):
    client = fake_goodreads(pages={"read": [[make_entry("1")]]})
    sync = ShelfSync(store, client)

    result = sync.sync_shelf("read")

    assert result.states[0] == SyncState.FETCHING
    assert result.states[-3:] == [SyncState.RECONCILING, SyncState.CLEANING_ORPHANS, SyncState.IDLE]
    assert sync.state == SyncState.IDLE

def test_unavailable_store_skips_everything(tmp_path, fake_goodreads, make_entry):
    from bookshelf.store import LocalStore
    store = LocalStore(f"sqlite:///{tmp_path / 'missing.db'}", create=False).open()
    client = fake_goodreads(pages={"read": [[make_entry("1")]]})

    result = ShelfSync(store, client).sync_shelf("read")

    assert result.synced == 0
    assert result.skipped == 1

def test_sync_shelves_runs_each_shelf(store, fake_goodreads, make_entry):
    client = fake_goodreads(pages={
        "currently-reading": [[make_entry("1", shelf="currently-reading")]],
        "read": [[make_entry("2", shelf="read")]],
        "to-read": [[make_entry("3", shelf="to-read")]],
    })

    results = ShelfSync(store, client).sync_shelves()

    assert [r.shelf for r in results] == ["currently-reading", "read", "to-read"]
    assert store.shelf_counts() == {"currently-reading": 1, "read": 1, "to-read": 1}

def test_check_shelf_in_sync_does_not_fetch_pages(store, fake_goodreads, make_entry, seed_shelf):
    seed_shelf("read", [make_entry("1"), make_entry("2")])
    client = fake_goodreads(totals={"read": 2})

    check = ShelfSync(store, client).check_shelf("read")

    assert check.in_sync is True
    assert check.result is None
    assert client.calls == []

def test_check_shelf_syncs_on_mismatch(store, fake_goodreads, make_entry, seed_shelf):
    seed_shelf("read", [make_entry("1")])
    client = fake_goodreads(
        pages={"read": [[make_entry("1", shelf="read"), make_entry("2", shelf="read")]]},
        totals={"read": 2},
    )

    check = ShelfSync(store, client).check_shelf("read")

    assert check.store_count == 1
    assert check.result is not None
    assert check.final_count == 2
    assert check.in_sync is True
