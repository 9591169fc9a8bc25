"""Booking store: bookings link an email address to an existing event."""

import logging
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError

from eventhub.db.core import get_database
from eventhub.db.events import event_exists
from eventhub.db.schema import BOOKINGS_COLLECTION
from eventhub.errors import DuplicateBooking, NotFoundError
from eventhub.models.bookings import Booking
from eventhub.normalize import to_object_id
from eventhub.validation import prepare_booking

logger = logging.getLogger(__name__)


async def _collection() -> AsyncCollection:
    return (await get_database())[BOOKINGS_COLLECTION]


def _not_found(booking_id: object) -> NotFoundError:
    return NotFoundError(detail="Booking not found", resource_type="booking", resource_id=str(booking_id))


async def create_booking(event_id: str | ObjectId, email: str) -> Booking:
    """Book ``email`` onto an existing event.

    Raises:
        InvalidEmail: The email is malformed.
        DanglingReference: The event does not exist.
        ReferenceCheckFailed: The event lookup failed.
        DuplicateBooking: This email already booked this event.
    """
    doc = await prepare_booking({"eventId": event_id, "email": email}, event_exists=event_exists)
    now = datetime.now(UTC)
    doc["createdAt"] = now
    doc["updatedAt"] = now

    coll = await _collection()
    try:
        result = await coll.insert_one(doc)
    except DuplicateKeyError as exc:
        raise DuplicateBooking(event_id=str(doc["eventId"]), email=doc["email"]) from exc
    doc["_id"] = result.inserted_id
    logger.debug("Created booking %s for event %s", result.inserted_id, doc["eventId"])
    return Booking.from_document(doc)


async def update_booking(booking_id: str | ObjectId, fields: dict[str, Any]) -> Booking:
    """Change the email or event of an existing booking.

    The event is looked up again only when ``eventId`` changes.
    """
    oid = to_object_id(booking_id)
    if oid is None:
        raise _not_found(booking_id)

    coll = await _collection()
    current = await coll.find_one({"_id": oid})
    if current is None:
        raise _not_found(booking_id)

    doc = await prepare_booking(fields, current, event_exists=event_exists)
    doc["updatedAt"] = datetime.now(UTC)
    try:
        updated = await coll.find_one_and_update(
            {"_id": oid},
            {"$set": doc},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError as exc:
        raise DuplicateBooking(event_id=str(doc["eventId"]), email=doc["email"]) from exc
    if updated is None:
        raise _not_found(booking_id)
    return Booking.from_document(updated)


async def get_booking(booking_id: str | ObjectId) -> Booking:
    oid = to_object_id(booking_id)
    if oid is None:
        raise _not_found(booking_id)
    coll = await _collection()
    doc = await coll.find_one({"_id": oid})
    if doc is None:
        raise _not_found(booking_id)
    return Booking.from_document(doc)


async def list_bookings_for_event(event_id: str | ObjectId) -> list[Booking]:
    """Bookings for an event, oldest first. Unknown ids yield an empty list."""
    oid = to_object_id(event_id)
    if oid is None:
        return []
    coll = await _collection()
    cursor = coll.find({"eventId": oid}).sort("createdAt", ASCENDING)
    return [Booking.from_document(doc) async for doc in cursor]


async def count_bookings_for_event(event_id: str | ObjectId) -> int:
    oid = to_object_id(event_id)
    if oid is None:
        return 0
    coll = await _collection()
    return await coll.count_documents({"eventId": oid})
