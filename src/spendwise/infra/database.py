"""Engine and session plumbing shared by every store."""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager, contextmanager
from typing import Callable, Iterator, Mapping, Tuple

from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlmodel import Session, create_engine

from ..config import BaseConfig
from ..errors import ConnectionFailure, StorageError

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractContextManager[Session]]


def _install_sqlite_pragmas(engine: Engine, pragmas: Mapping[str, str]) -> None:
    """Run ``PRAGMA`` statements on every new DBAPI connection."""

    @event.listens_for(engine, "connect")
    def _set_pragmas(dbapi_connection, connection_record):  # pragma: no cover - driver hook
        cursor = dbapi_connection.cursor()
        try:
            for key, value in pragmas.items():
                cursor.execute(f"PRAGMA {key}={value}")
        finally:
            cursor.close()


def create_db_engine(config: BaseConfig) -> Engine:
    """Create SQLModel engine from configuration."""
    engine = create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())
    if engine.dialect.name == "sqlite":
        # SQLite ignores REFERENCES clauses unless foreign_keys is switched on.
        _install_sqlite_pragmas(engine, config.SQLITE_PRAGMAS)
    return engine


def verify_connection(engine: Engine) -> None:
    """Raise ``ConnectionFailure`` when the store cannot be reached."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Database unreachable", extra={"url": str(engine.url)}, exc_info=True)
        raise ConnectionFailure(f"Cannot connect to database: {exc}") from exc


def create_session_factory(engine: Engine) -> SessionFactory:
    """Create a session factory; each call yields one unit of work."""

    @contextmanager
    def factory() -> Iterator[Session]:
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


def is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    return "foreign key" in str(exc.orig).lower()


def storage_error(exc: SQLAlchemyError, action: str) -> StorageError:
    """Translate an unexpected SQLAlchemy error into the public taxonomy."""

    logger.error("Database error while %s", action, exc_info=exc)
    if isinstance(exc, OperationalError):
        return ConnectionFailure(f"Database unavailable while {action}: {exc.orig}")
    return StorageError(f"Database error while {action}: {exc}")


def bootstrap_database(
    config: BaseConfig | None = None, *, reset: bool | None = None
) -> Tuple[Engine, SessionFactory]:
    """Build the engine, verify connectivity and initialize the schema.

    ``reset`` defaults to ``config.RESET_ON_START``; passing ``True`` drops and
    recreates every table. Raises ``ConnectionFailure`` or ``InitializationFailure``,
    both of which must abort startup. Returns ``(engine, session_factory)``.
    """
    from .schema import SchemaManager

    cfg = config or BaseConfig()
    engine = create_db_engine(cfg)
    try:
        verify_connection(engine)
        SchemaManager(engine).initialize(
            reset=cfg.RESET_ON_START if reset is None else reset
        )
    except Exception:
        engine.dispose()
        raise
    return engine, create_session_factory(engine)
