"""Engine and session management."""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from job_board.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine and hands out sessions."""
    
    def __init__(self, url: str, echo: bool = False):
        self.url = url
        engine_kwargs = {"echo": echo, "future": True}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            # In-memory databases only exist on a single connection
            if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
                engine_kwargs["poolclass"] = StaticPool
        
        self.engine: Engine = create_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.logger = logger.bind(component="database")
    
    def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        from job_board.db import tables  # noqa: F401  (registers mappers)
        
        Base.metadata.create_all(self.engine)
        self.logger.info("Database schema ensured", url=self.engine.url.render_as_string(hide_password=True))
    
    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)
    
    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session scope that rolls back on error and always closes."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
    
    def dispose(self) -> None:
        self.engine.dispose()
