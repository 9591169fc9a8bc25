"""Collection names and storage-level constraints.

Indexes are created when the shared client first connects. ``create_index``
is idempotent, so running this on every process start is safe.
"""

import logging

from pymongo import ASCENDING
from pymongo.asynchronous.database import AsyncDatabase

logger = logging.getLogger(__name__)

EVENTS_COLLECTION = "events"
BOOKINGS_COLLECTION = "bookings"


async def _ensure_indexes(db: AsyncDatabase) -> None:
    """Create the unique slug index and the booking indexes."""
    await db[EVENTS_COLLECTION].create_index([("slug", ASCENDING)], unique=True, name="slug_unique")
    await db[BOOKINGS_COLLECTION].create_index([("eventId", ASCENDING)], name="eventId")
    await db[BOOKINGS_COLLECTION].create_index(
        [("eventId", ASCENDING), ("email", ASCENDING)],
        unique=True,
        name="eventId_email_unique",
    )
    logger.debug("Indexes ensured on %s", db.name)
