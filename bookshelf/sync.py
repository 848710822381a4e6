# bookshelf/sync.py

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Set

from bookshelf.config import DEFAULT_SHELVES
from bookshelf.goodreads.client import GoodreadsClient, GoodreadsError
from bookshelf.models import ShelfEntry
from bookshelf.store import LocalStore

logger = logging.getLogger(__name__)

MAX_PAGES = 50


class SyncState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RECONCILING = "reconciling"
    CLEANING_ORPHANS = "cleaning_orphans"


@dataclass
class SyncResult:
    """Outcome of syncing one shelf"""
    shelf: str
    pages: int = 0
    fetched: int = 0
    synced: int = 0
    skipped: int = 0
    moved: int = 0
    orphans_removed: int = 0
    hit_page_limit: bool = False
    aborted: bool = False
    error: Optional[str] = None
    states: List[SyncState] = field(default_factory=list)

    @property
    def cleaned(self) -> bool:
        return SyncState.CLEANING_ORPHANS in self.states


@dataclass
class ShelfCheck:
    """Store/source count comparison for a shelf"""
    shelf: str
    store_count: int
    source_count: Optional[int]
    result: Optional[SyncResult] = None
    final_count: Optional[int] = None

    @property
    def in_sync(self) -> bool:
        count = self.final_count if self.final_count is not None else self.store_count
        return self.source_count is not None and count == self.source_count


class ShelfSync:
    """Brings the local store's copy of a shelf in line with Goodreads.

    One shelf sync pages through the listing, upserts every valid record,
    keeps each book on a single shelf and finally removes rows for books the
    listing no longer contains. Not safe to run concurrently against the
    same store.
    """

    def __init__(self, store: LocalStore, client: GoodreadsClient,
                 max_pages: int = MAX_PAGES, page_size: Optional[int] = None):
        self.store = store
        self.client = client
        self.max_pages = max_pages
        self.page_size = page_size
        self.state = SyncState.IDLE

    def _enter(self, state: SyncState, result: SyncResult) -> None:
        self.state = state
        result.states.append(state)
        logger.debug(f"{result.shelf}: {state.value}")

    def sync_shelf(self, shelf: str) -> SyncResult:
        result = SyncResult(shelf=shelf)
        entries: List[ShelfEntry] = []
        source_ids: Set[str] = set()

        logger.info(f"Syncing \"{shelf}\" shelf...")
        try:
            self._fetch(shelf, result, entries, source_ids)
            self._enter(SyncState.RECONCILING, result)
            for entry in entries:
                self._reconcile(shelf, entry, result)

            if result.aborted:
                logger.warning(
                    f"Fetch for {shelf} did not complete, keeping existing rows "
                    f"(synced {result.synced} books)"
                )
            elif result.hit_page_limit:
                logger.warning(f"Reached page limit for {shelf} shelf, skipping orphan removal")
            elif not source_ids:
                logger.warning(f"Goodreads returned no books for {shelf}, skipping orphan removal")
            else:
                self._enter(SyncState.CLEANING_ORPHANS, result)
                result.orphans_removed = self._remove_orphans(shelf, source_ids)
        finally:
            self._enter(SyncState.IDLE, result)

        logger.info(
            f"Synced {result.synced} books from {shelf} shelf "
            f"({result.skipped} skipped, {result.orphans_removed} removed)"
        )
        return result

    def _fetch(self, shelf: str, result: SyncResult,
               entries: List[ShelfEntry], source_ids: Set[str]) -> None:
        page = 1
        while True:
            if page > self.max_pages:
                result.hit_page_limit = True
                break

            self._enter(SyncState.FETCHING, result)
            try:
                shelf_page = self.client.fetch_shelf_page(shelf, page, self.page_size)
            except GoodreadsError as e:
                logger.error(f"Error fetching {shelf} page {page}: {e}")
                result.aborted = True
                result.error = str(e)
                break

            if shelf_page.is_empty:
                logger.info(f"No more books found on {shelf} page {page}, stopping pagination")
                break

            result.pages += 1
            result.fetched += len(shelf_page.entries) + shelf_page.invalid
            result.skipped += shelf_page.invalid
            entries.extend(shelf_page.entries)
            source_ids.update(entry.goodreads_id for entry in shelf_page.entries)
            source_ids.update(shelf_page.invalid_ids)

            if shelf_page.total is not None and shelf_page.end is not None and not shelf_page.has_more:
                break
            page += 1

    def _reconcile(self, shelf: str, entry: ShelfEntry, result: SyncResult) -> None:
        book_id = self.store.upsert_book(entry)
        if book_id is None:
            result.skipped += 1
            return

        # The record's own shelf tag wins over the shelf that was requested
        effective_shelf = entry.shelf or shelf
        if effective_shelf != shelf:
            logger.info(
                f"\"{entry.title}\" is on {effective_shelf} according to Goodreads "
                f"(fetched from {shelf})"
            )

        moved = self.store.delete_other_shelves(book_id, effective_shelf)
        if moved:
            logger.debug(f"Removed \"{entry.title}\" from {moved} other shelves")
            result.moved += moved

        if self.store.upsert_shelf_record(book_id, effective_shelf, entry) is None:
            result.skipped += 1
            return
        result.synced += 1
        logger.debug(f"Processed \"{entry.title}\" by {entry.author} ({entry.goodreads_id})")

    def _remove_orphans(self, shelf: str, source_ids: Set[str]) -> int:
        stored = self.store.shelf_goodreads_ids(shelf)
        orphans = {gid: book_id for gid, book_id in stored.items() if gid not in source_ids}
        if not orphans:
            logger.debug(f"No orphaned books found on {shelf}")
            return 0

        logger.info(f"Found {len(orphans)} orphaned books to remove from {shelf} shelf")
        removed = 0
        for goodreads_id, book_id in orphans.items():
            if self.store.delete_shelf_record(book_id, shelf):
                removed += 1
                logger.info(f"Removed {goodreads_id} from {shelf}")
        return removed

    def sync_shelves(self, shelves: Iterable[str] = DEFAULT_SHELVES) -> List[SyncResult]:
        return [self.sync_shelf(shelf) for shelf in shelves]

    def check_shelf(self, shelf: str) -> ShelfCheck:
        """Compare store and Goodreads counts; sync the shelf if they differ.

        Raises:
            GoodreadsError: The source count could not be fetched
        """
        store_count = self.store.count_shelf(shelf)
        source_count = self.client.fetch_shelf_total(shelf)
        check = ShelfCheck(shelf=shelf, store_count=store_count, source_count=source_count)

        if source_count is not None and source_count == store_count:
            logger.info(f"Shelf \"{shelf}\" is already in sync ({store_count} books)")
            return check

        check.result = self.sync_shelf(shelf)
        check.final_count = self.store.count_shelf(shelf)
        return check
