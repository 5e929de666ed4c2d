"""Application context: one engine, one session factory, one instance per store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import SessionFactory, bootstrap_database
from .infra.repositories import (
    SQLModelCategoryRepository,
    SQLModelExpenseRepository,
    SQLModelTransactionRepository,
)
from .services.reports import ReportingService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a presentation layer needs to call into the core."""

    config: BaseConfig
    engine: Engine
    session_factory: SessionFactory

    category_repo: SQLModelCategoryRepository
    expense_repo: SQLModelExpenseRepository
    transaction_repo: SQLModelTransactionRepository
    reports: ReportingService

    def close(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()


def create_app_context(
    config: Optional[BaseConfig] = None, *, reset: bool | None = None
) -> AppContext:
    """Bootstrap the database and wire the stores.

    Raises ``ConnectionFailure`` or ``InitializationFailure`` if the database is not
    usable; callers must not continue in that case.
    """

    if config is None:
        config = BaseConfig()

    engine, session_factory = bootstrap_database(config, reset=reset)
    logger.info("Application context ready", extra={"url": str(engine.url)})

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        category_repo=SQLModelCategoryRepository(session_factory),
        expense_repo=SQLModelExpenseRepository(session_factory),
        transaction_repo=SQLModelTransactionRepository(session_factory),
        reports=ReportingService(session_factory),
    )
