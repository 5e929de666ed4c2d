"""Schema creation and default category seeding."""

from __future__ import annotations

import logging

from sqlalchemy import Table
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import Session, select

from ..constants.categories import DEFAULT_CATEGORIES
from ..errors import ConnectionFailure, InitializationFailure
from ..models import Category, Expense, Transaction

logger = logging.getLogger(__name__)


class SchemaManager:
    """Owns the ``categories``, ``expenses`` and ``transactions`` tables.

    Normal startup only creates missing tables and tops up the default categories,
    so existing data survives restarts. ``initialize(reset=True)`` is the explicit
    destructive path: it drops every table and starts over with only the defaults.
    """

    def __init__(self, engine: Engine, default_categories: list[str] | None = None):
        self.engine = engine
        self.default_categories = list(
            DEFAULT_CATEGORIES if default_categories is None else default_categories
        )

    @property
    def tables_parent_first(self) -> list[Table]:
        return [Category.__table__, Expense.__table__, Transaction.__table__]  # type: ignore[list-item]

    @property
    def tables_child_first(self) -> list[Table]:
        return [Expense.__table__, Transaction.__table__, Category.__table__]  # type: ignore[list-item]

    def initialize(self, *, reset: bool = False) -> int:
        """Ensure the schema exists and default categories are present.

        Returns the number of default categories inserted.
        """
        try:
            with self.engine.begin() as connection:
                if reset:
                    logger.warning(
                        "Resetting database: dropping all tables",
                        extra={"url": str(self.engine.url)},
                    )
                    self._drop_tables(connection)
                self._create_tables(connection)
            inserted = self.seed_default_categories()
        except OperationalError as exc:
            if _is_connect_error(exc):
                raise ConnectionFailure(f"Cannot connect to database: {exc.orig}") from exc
            logger.critical("Schema initialization failed", exc_info=True)
            raise InitializationFailure(f"Failed to initialize database: {exc}") from exc
        except SQLAlchemyError as exc:
            logger.critical("Schema initialization failed", exc_info=True)
            raise InitializationFailure(f"Failed to initialize database: {exc}") from exc

        logger.info(
            "Schema initialized",
            extra={"reset": reset, "categories_seeded": inserted},
        )
        return inserted

    def _drop_tables(self, connection: Connection) -> None:
        for table in self.tables_child_first:
            table.drop(connection, checkfirst=True)

    def _create_tables(self, connection: Connection) -> None:
        for table in self.tables_parent_first:
            table.create(connection, checkfirst=True)

    def seed_default_categories(self) -> int:
        """Insert each default category whose name is not present yet."""
        inserted = 0
        with Session(self.engine) as session:
            for name in self.default_categories:
                existing = session.exec(select(Category.id).where(Category.name == name)).first()
                if existing is not None:
                    continue
                session.add(Category(name=name))
                inserted += 1
            session.commit()
        if inserted:
            logger.debug("Seeded default categories", extra={"count": inserted})
        return inserted

    def table_names(self) -> list[str]:
        """Names of the managed tables, parent first."""
        return [table.name for table in self.tables_parent_first]


def _is_connect_error(exc: OperationalError) -> bool:
    message = str(exc.orig).lower()
    return "unable to open" in message or "could not connect" in message or "connection refused" in message
