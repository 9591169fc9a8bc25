"""Pure normalizers for derived fields: slug, date, time and document ids."""

import re
from datetime import UTC, datetime

from bson import ObjectId

from eventhub.errors import InvalidDate, InvalidTime

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")
_TIME_24H = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_TIME_12H = re.compile(r"^(1[0-2]|0?[1-9]):([0-5]\d)\s*([ap]m)$", re.IGNORECASE)

# Tried in order after ISO 8601.
_DATE_FORMATS = (
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%a, %d %b %Y %H:%M:%S %z",
)


def generate_slug(title: str) -> str:
    """Lowercase, hyphen-separated form of ``title`` with only ``[a-z0-9-]``."""
    return _SLUG_SEPARATORS.sub("-", str(title).strip().lower()).strip("-")


def _parse_date(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def normalize_date(value: str) -> str:
    """Return ``value`` as a UTC calendar date in ``YYYY-MM-DD`` form.

    Timezone-aware inputs are converted to UTC before the date is taken, so
    ``2024-03-05T23:30:00-02:00`` becomes ``2024-03-06``. Naive inputs are
    read as UTC.

    Raises:
        InvalidDate: If the value cannot be parsed as a date.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidDate(value=value)
    parsed = _parse_date(value.strip())
    if parsed is None:
        raise InvalidDate(value=value)
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(UTC)
        except OverflowError as exc:
            raise InvalidDate(value=value) from exc
    return f"{parsed.year:04d}-{parsed.month:02d}-{parsed.day:02d}"


def normalize_time(value: str) -> str:
    """Return ``value`` as a 24-hour ``HH:mm`` string.

    Accepts ``HH:mm`` (returned unchanged) or ``h:mm AM/PM``.

    Raises:
        InvalidTime: For any other shape.
    """
    if not isinstance(value, str):
        raise InvalidTime(value=value)
    trimmed = value.strip()

    if _TIME_24H.match(trimmed):
        return trimmed

    match = _TIME_12H.match(trimmed)
    if match is None:
        raise InvalidTime(value=value)

    hours = int(match.group(1))
    minutes = match.group(2)
    period = match.group(3).lower()
    if period == "pm" and hours != 12:
        hours += 12
    if period == "am" and hours == 12:
        hours = 0
    return f"{hours:02d}:{minutes}"


def to_object_id(value: object) -> ObjectId | None:
    """Parse a document id, returning ``None`` for anything malformed."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None
