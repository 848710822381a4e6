# api/deps.py
from typing import Iterator
from bookshelf.config import Settings
from bookshelf.goodreads.client import GoodreadsClient
from bookshelf.queries import ShelfQueries
from bookshelf.store import LocalStore

def get_queries() -> Iterator[ShelfQueries]:
    """Get a query layer over the local store.

    This is a FastAPI dependency. The store is opened read-only and closed
    when the request is complete, as is the Goodreads client (only attached when
    credentials are configured).

    Yields:
        ShelfQueries: Query layer for the request
    """
    settings = Settings.from_env()
    client = GoodreadsClient(settings) if settings.has_credentials else None
    store = LocalStore(settings.database_url, create=False).open()
    try:
        yield ShelfQueries(store, client)
    finally:
        store.close()
        if client is not None:
            client.close()
