import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import Executable

from storefront_admin.core.config import Settings

logger = logging.getLogger(__name__)

Statement = Union[str, Executable]


@dataclass
class ExecuteResult:
    affected_rows: int
    last_insert_id: Optional[int] = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///") or ":memory:" in url or "mode=memory" in url


def _as_statement(statement: Statement) -> Executable:
    return text(statement) if isinstance(statement, str) else statement


class Database:
    """
    Process-wide connection pool and session factory.

    Built once at start-up (by the app factory or the CLI) and handed to
    whatever needs it; ``close()`` disposes the pool on shutdown.
    """

    def __init__(self, url: str, **engine_kwargs: Any):
        if url.startswith("sqlite"):
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
            if _is_memory_sqlite(url):
                # One shared connection, or each threadpool worker sees its own empty database
                engine_kwargs.setdefault("poolclass", StaticPool)
        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info(f"Database pool created for {self.engine.url.render_as_string(hide_password=True)}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        if settings.database_url.startswith("sqlite"):
            return cls(settings.database_url)
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=0,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Fresh session wrapped in an all-or-nothing block; always released"""
        with self.session() as db:
            with transaction(db):
                yield db

    def ping(self) -> bool:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            logger.info("Database connection successful")
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection failed: {str(e)}")
            return False

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database pool closed")


def query(db: Session, statement: Statement, params: Optional[Dict[str, Any]] = None) -> List[Mapping[str, Any]]:
    """Run a read statement and return its rows as mappings"""
    return list(db.execute(_as_statement(statement), params or {}).mappings().all())


def execute(db: Session, statement: Statement, params: Optional[Dict[str, Any]] = None) -> ExecuteResult:
    """
    Run a mutating statement in the session's current transaction.

    The caller commits (directly or through ``transaction``).
    ``last_insert_id`` is only known for single-row Core inserts.
    """
    result = db.execute(_as_statement(statement), params or {})
    last_insert_id = None
    if result.is_insert:
        last_insert_id = result.inserted_primary_key[0]
    return ExecuteResult(affected_rows=result.rowcount, last_insert_id=last_insert_id)


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit everything done inside the block, or roll all of it back and re-raise"""
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Transaction rolled back: {str(e)}")
        raise


def get_db(request: Request) -> Iterator[Session]:
    """Database dependency for FastAPI"""
    db = request.app.state.database.SessionLocal()
    try:
        yield db
    finally:
        db.close()
