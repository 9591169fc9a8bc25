"""Process startup and shutdown for the data layer.

An upstream application calls ``startup()`` once when it boots and
``shutdown()`` when it exits. Between the two, every store shares the
client cached in ``eventhub.db.core``.

Usage:
    resources = await startup()
    try:
        ...
    finally:
        await shutdown(resources)
"""

import logging
from dataclasses import dataclass

from eventhub.config import get_settings
from eventhub.db import core

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


@dataclass
class LifespanResources:
    """What ``startup()`` initialized."""

    logging_configured: bool = False
    db_connected: bool = False


def configure_logging() -> None:
    settings = get_settings().logging
    logging.basicConfig(level=settings.level, format=LOG_FORMAT)
    if settings.debug:
        logging.getLogger("eventhub.db").setLevel(logging.DEBUG)


async def startup(connect: bool = True) -> LifespanResources:
    """Configure logging and, optionally, open the shared database client.

    Settings are read first, so a missing ``MONGODB_URI`` fails here rather
    than on the first request.

    Raises:
        pydantic.ValidationError: Configuration is missing or invalid.
        ConnectionFailure: ``connect`` is set and the database is unreachable.
    """
    resources = LifespanResources()
    configure_logging()
    resources.logging_configured = True

    if connect:
        await core.get_client()
        resources.db_connected = True
        logger.info("Data layer started")
    return resources


async def shutdown(resources: LifespanResources | None = None) -> None:
    await core.close_client()
    if resources is not None:
        resources.db_connected = False
    logger.info("Data layer stopped")
