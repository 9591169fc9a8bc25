from eventhub.db.bookings import (
    count_bookings_for_event,
    create_booking,
    get_booking,
    list_bookings_for_event,
    update_booking,
)
from eventhub.db.core import close_client, get_client, get_connection_state, get_database
from eventhub.db.events import (
    create_event,
    event_exists,
    find_event_by_slug,
    get_event,
    list_events,
    update_event,
)

__all__ = [
    "close_client",
    "count_bookings_for_event",
    "create_booking",
    "create_event",
    "event_exists",
    "find_event_by_slug",
    "get_booking",
    "get_client",
    "get_connection_state",
    "get_database",
    "get_event",
    "list_bookings_for_event",
    "list_events",
    "update_booking",
    "update_event",
]
