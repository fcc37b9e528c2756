"""Persistence backends for investments, manual prices and snapshots."""
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path
import logging

from invest_tracker.config import Settings, settings
from invest_tracker.repositories.base import (
    InvestmentRepository,
    ManualPriceStore,
    SnapshotStore,
    StoreBundle,
    validate_owner_id,
)

logger = logging.getLogger(__name__)


def build_stores(config: Settings, engine=None) -> StoreBundle:
    """
    Create the store bundle for the configured backend.

    `engine` lets callers that run their own event loop (Celery tasks,
    scripts) bring an engine whose pool belongs to that loop.
    """
    if config.storage_backend == "json":
        from invest_tracker.repositories.json_file import (
            JsonInvestmentRepository,
            JsonManualPriceStore,
            JsonSnapshotStore,
        )

        root = Path(config.data_dir)
        logger.info(f"Using JSON file storage at {root.resolve()}")
        return StoreBundle(
            investments=JsonInvestmentRepository(root),
            manual_prices=JsonManualPriceStore(root),
            snapshots=JsonSnapshotStore(root),
        )

    from invest_tracker.database import build_engine, build_session_factory, get_session_factory
    from invest_tracker.repositories.sql import (
        SqlInvestmentRepository,
        SqlManualPriceStore,
        SqlSnapshotStore,
    )

    if engine is not None:
        session_factory = build_session_factory(engine)
    elif config is settings:
        session_factory = get_session_factory()
    else:
        session_factory = build_session_factory(build_engine(config.database_url))
    logger.info("Using SQL storage")
    return StoreBundle(
        investments=SqlInvestmentRepository(session_factory),
        manual_prices=SqlManualPriceStore(session_factory),
        snapshots=SqlSnapshotStore(session_factory),
    )


@lru_cache(maxsize=1)
def get_stores() -> StoreBundle:
    """Process-wide store bundle; one WriteQueue per store for the whole process."""
    return build_stores(settings)


@asynccontextmanager
async def standalone_stores(config: Settings = settings):
    """
    Store bundle for code running outside the web app, on its own event loop.

    For the SQL backend a private engine is created (tables included) and
    disposed on exit.
    """
    engine = None
    if config.storage_backend == "sql":
        from invest_tracker.database import build_engine, create_tables

        engine = build_engine(config.database_url)
        await create_tables(engine)
    try:
        yield build_stores(config, engine)
    finally:
        if engine is not None:
            await engine.dispose()


__all__ = [
    "InvestmentRepository",
    "ManualPriceStore",
    "SnapshotStore",
    "StoreBundle",
    "build_stores",
    "get_stores",
    "standalone_stores",
    "validate_owner_id",
]
