import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from registrar.core.config import DATABASE_URL, SQLITE_BUSY_TIMEOUT_SECONDS
from registrar.core.errors import ConflictError, TransactionAbortedError

logger = logging.getLogger(__name__)


def _serialize_sqlite_writers(engine: Engine) -> None:
    """Open every SQLite transaction with BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first write, so two connections can both
    read "no conflict" and then both write. Taking the write lock up front
    turns each transaction into a serialized unit, which is what the
    per-student row locks give us on PostgreSQL.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(url: str = DATABASE_URL) -> Engine:
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={
                "check_same_thread": False,
                "timeout": SQLITE_BUSY_TIMEOUT_SECONDS,
            },
        )
        _serialize_sqlite_writers(engine)
        return engine

    return create_engine(url, pool_pre_ping=True)


engine = create_db_engine()

# objects keep the state their own transaction committed
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run a block as one unit of work: commit on success, roll back on any error.

    Lock timeouts, deadlocks and serialization failures surface as a
    retryable ``TransactionAbortedError``; integrity violations as
    ``ConflictError``. Nothing is retried here.
    """
    try:
        yield db
        db.commit()
    except OperationalError as exc:
        db.rollback()
        logger.warning("transaction aborted by the database: %s", exc.orig)
        raise TransactionAbortedError() from exc
    except IntegrityError as exc:
        db.rollback()
        logger.warning("integrity violation, rolled back: %s", exc.orig)
        raise ConflictError("The change conflicts with existing records") from exc
    except Exception:
        db.rollback()
        raise
