# bookshelf/sa/database.py
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool, QueuePool
import os

from bookshelf.config import DEFAULT_DATABASE_URL
from bookshelf.sa.models import Base

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

class Database:
    def __init__(self, connection_string: Optional[str] = None, **engine_kwargs):
        """Initialize database connection

        Args:
            connection_string: Database connection string (e.g., "sqlite:///books.db")
                              If None, will use the DATABASE_URL environment variable or fall back to SQLite
            engine_kwargs: Additional keyword arguments to pass to create_engine
        """
        self.connection_string = connection_string or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        self.is_sqlite = self.connection_string.startswith("sqlite")

        # SQLite-specific settings
        if self.is_sqlite:
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
            engine_kwargs.setdefault("poolclass", NullPool)
        else:
            engine_kwargs.setdefault("pool_size", 5)
            engine_kwargs.setdefault("max_overflow", 10)
            engine_kwargs.setdefault("poolclass", QueuePool)

        self.engine = create_engine(
            self.connection_string,
            **engine_kwargs
        )
        if self.is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._SessionFactory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    @property
    def sqlite_path(self) -> Optional[Path]:
        """Filesystem path of a file-backed SQLite database, else None"""
        if not self.is_sqlite:
            return None
        database = make_url(self.connection_string).database
        if not database or database == ":memory:":
            return None
        return Path(database)

    def exists(self) -> bool:
        """Whether the backing store is present.

        Only file-backed SQLite can be checked without connecting; every other
        backend is assumed present and failures surface on first use.
        """
        path = self.sqlite_path
        return path is None or path.exists()

    @contextmanager
    def get_db(self) -> Iterator[Session]:
        """Context manager for database sessions"""
        session: Session = self._SessionFactory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_db(self) -> None:
        """Initialize database schema"""
        path = self.sqlite_path
        if path is not None and path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        return self._SessionFactory()

    def dispose(self) -> None:
        """Release all pooled connections"""
        self.engine.dispose()
