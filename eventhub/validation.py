"""Validate-then-commit checks for event and booking writes.

The stores call these functions explicitly before every insert or update.
Each returns the normalized document fields to write, or raises one of the
``eventhub.errors`` validation errors, in which case nothing is written.
"""

import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from bson import ObjectId
from pymongo.errors import PyMongoError

from eventhub.errors import (
    ConnectionFailure,
    DanglingReference,
    EmptyListField,
    InvalidEmail,
    InvalidEnumValue,
    ReferenceCheckFailed,
    RequiredFieldMissing,
    ValidationError,
)
from eventhub.models.events import EventMode
from eventhub.normalize import generate_slug, normalize_date, normalize_time, to_object_id

logger = logging.getLogger(__name__)

EVENT_STRING_FIELDS = (
    "title",
    "description",
    "overview",
    "image",
    "venue",
    "location",
    "date",
    "time",
    "mode",
    "audience",
    "organizer",
)
EVENT_LIST_FIELDS = ("agenda", "tags")
EVENT_WRITABLE_FIELDS = EVENT_STRING_FIELDS + EVENT_LIST_FIELDS

BOOKING_WRITABLE_FIELDS = ("eventId", "email")

# Practical, not RFC 5322.
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

EventExists = Callable[[ObjectId], Awaitable[bool]]


def _require_string(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise RequiredFieldMissing(field=field)
    return value.strip()


def _require_list(field: str, value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)) or len(value) == 0:
        raise EmptyListField(field=field)
    items: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValidationError(
                detail=f'Field "{field}" must contain only non-empty strings',
                field=field,
            )
        items.append(item.strip())
    return items


def _changed_fields(changes: dict[str, Any], current: dict[str, Any] | None) -> set[str]:
    if current is None:
        return set(changes)
    return {name for name, value in changes.items() if current.get(name) != value}


def prepare_event(fields: dict[str, Any], current: dict[str, Any] | None = None) -> dict[str, Any]:
    """Validate and normalize an event write.

    Args:
        fields: Fields supplied by the caller. For a create this is the whole
            event; for an update only the fields being changed. Unknown keys
            and ``slug`` are ignored, the slug is always derived from the title.
        current: The stored document when updating, ``None`` when creating.

    Returns:
        The complete set of event fields to persist, including ``slug``.

    Raises:
        RequiredFieldMissing: A string field is missing or blank, or the
            title yields an empty slug.
        InvalidEnumValue: ``mode`` is not online, offline or hybrid.
        EmptyListField: ``agenda`` or ``tags`` is missing or empty.
        InvalidDate: ``date`` changed and cannot be parsed.
        InvalidTime: ``time`` changed and is not a recognized time.
    """
    changes = {name: fields[name] for name in EVENT_WRITABLE_FIELDS if name in fields}
    changed = _changed_fields(changes, current)
    merged: dict[str, Any] = {**(current or {}), **changes}

    doc: dict[str, Any] = {}
    for name in EVENT_STRING_FIELDS:
        doc[name] = _require_string(name, merged.get(name))

    mode = doc["mode"].lower()
    if mode not in {m.value for m in EventMode}:
        raise InvalidEnumValue(
            detail=f'Field "mode" must be one of: {", ".join(m.value for m in EventMode)}',
            field="mode",
            value=doc["mode"],
        )
    doc["mode"] = mode

    for name in EVENT_LIST_FIELDS:
        doc[name] = _require_list(name, merged.get(name))

    slug = merged.get("slug")
    if "title" in changed or not slug:
        slug = generate_slug(doc["title"])
        if not slug:
            raise RequiredFieldMissing(
                field="slug",
                detail='Field "title" must contain at least one letter or digit',
            )
    doc["slug"] = slug

    if "date" in changed:
        doc["date"] = normalize_date(doc["date"])
    if "time" in changed:
        doc["time"] = normalize_time(doc["time"])

    return doc


def _coerce_object_id(value: Any) -> ObjectId:
    oid = to_object_id(value)
    if oid is not None:
        return oid
    raise DanglingReference(detail="Referenced event id is not a valid identifier", event_id=str(value))


async def prepare_booking(
    fields: dict[str, Any],
    current: dict[str, Any] | None = None,
    *,
    event_exists: EventExists,
) -> dict[str, Any]:
    """Validate and normalize a booking write.

    The referenced event is looked up through ``event_exists`` when the booking
    is new or its ``eventId`` changes.

    Raises:
        InvalidEmail: The email is missing or malformed.
        DanglingReference: The event id is malformed or names no event.
        ReferenceCheckFailed: The existence lookup itself failed.
    """
    changes = {name: fields[name] for name in BOOKING_WRITABLE_FIELDS if name in fields}
    merged: dict[str, Any] = {**(current or {}), **changes}

    email = merged.get("email")
    if not isinstance(email, str):
        raise InvalidEmail(email=email)
    email = email.strip().lower()
    if not EMAIL_REGEX.match(email):
        raise InvalidEmail(email=email)

    if merged.get("eventId") is None:
        raise RequiredFieldMissing(field="eventId", detail='Field "eventId" is required')
    event_id = _coerce_object_id(merged["eventId"])

    if current is None or current.get("eventId") != event_id:
        try:
            exists = await event_exists(event_id)
        except (PyMongoError, ConnectionFailure) as exc:
            logger.warning("Event existence check failed for %s: %s", event_id, exc)
            raise ReferenceCheckFailed(event_id=str(event_id)) from exc
        if not exists:
            logger.info("Rejected booking for missing event %s", event_id)
            raise DanglingReference(event_id=str(event_id))

    return {"eventId": event_id, "email": email}
