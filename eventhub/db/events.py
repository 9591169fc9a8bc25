"""Event store: create, update and look up event documents."""

import logging
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError

from eventhub.db.core import get_database
from eventhub.db.schema import EVENTS_COLLECTION
from eventhub.errors import DuplicateSlug, NotFoundError
from eventhub.models.events import Event
from eventhub.normalize import to_object_id
from eventhub.validation import prepare_event

logger = logging.getLogger(__name__)


async def _collection() -> AsyncCollection:
    return (await get_database())[EVENTS_COLLECTION]


def _not_found(event_id: object) -> NotFoundError:
    return NotFoundError(detail="Event not found", resource_type="event", resource_id=str(event_id))


async def create_event(fields: dict[str, Any]) -> Event:
    """Validate, normalize and insert a new event."""
    doc = prepare_event(fields)
    now = datetime.now(UTC)
    doc["createdAt"] = now
    doc["updatedAt"] = now

    coll = await _collection()
    try:
        result = await coll.insert_one(doc)
    except DuplicateKeyError as exc:
        raise DuplicateSlug(slug=doc["slug"]) from exc
    doc["_id"] = result.inserted_id
    logger.debug("Created event %s (slug=%s)", result.inserted_id, doc["slug"])
    return Event.from_document(doc)


async def update_event(event_id: str | ObjectId, fields: dict[str, Any]) -> Event:
    """Apply ``fields`` to an existing event.

    The merged document is validated again; slug, date and time are only
    recomputed when the fields they derive from change.

    Raises:
        NotFoundError: No event has this id.
        DuplicateSlug: The new title collides with another event's slug.
    """
    oid = to_object_id(event_id)
    if oid is None:
        raise _not_found(event_id)

    coll = await _collection()
    current = await coll.find_one({"_id": oid})
    if current is None:
        raise _not_found(event_id)

    doc = prepare_event(fields, current)
    doc["updatedAt"] = datetime.now(UTC)
    try:
        updated = await coll.find_one_and_update(
            {"_id": oid},
            {"$set": doc},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError as exc:
        raise DuplicateSlug(slug=doc["slug"]) from exc
    if updated is None:
        raise _not_found(event_id)
    logger.debug("Updated event %s", oid)
    return Event.from_document(updated)


async def event_exists(event_id: str | ObjectId) -> bool:
    oid = to_object_id(event_id)
    if oid is None:
        return False
    coll = await _collection()
    return await coll.find_one({"_id": oid}, projection={"_id": 1}) is not None


async def get_event(event_id: str | ObjectId) -> Event:
    oid = to_object_id(event_id)
    if oid is None:
        raise _not_found(event_id)
    coll = await _collection()
    doc = await coll.find_one({"_id": oid})
    if doc is None:
        raise _not_found(event_id)
    return Event.from_document(doc)


async def find_event_by_slug(slug: str) -> Event:
    coll = await _collection()
    doc = await coll.find_one({"slug": slug})
    if doc is None:
        raise NotFoundError(detail="Event not found", resource_type="event", slug=slug)
    return Event.from_document(doc)


async def list_events(limit: int = 50, offset: int = 0) -> list[Event]:
    """List events in chronological order."""
    coll = await _collection()
    cursor = coll.find({}).sort([("date", ASCENDING), ("time", ASCENDING)]).skip(offset).limit(limit)
    return [Event.from_document(doc) async for doc in cursor]
