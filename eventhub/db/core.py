"""Core database connection management.

One ``AsyncMongoClient`` is shared by the whole process. It is created
lazily by the first call to ``get_client()`` and lives until
``close_client()`` runs at shutdown. The connection moves through three
states:

- unconnected: no client and no attempt in flight
- connecting: one attempt is in flight; every caller awaits the same task
- connected: the cached client is returned immediately

A failed attempt is cleared so the next caller starts a fresh one.
"""

import asyncio
import logging

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from eventhub.config import get_settings
from eventhub.errors import ConnectionFailure

_logger = logging.getLogger(__name__)

_client: AsyncMongoClient | None = None
_connecting: asyncio.Task | None = None


def _database_for(client: AsyncMongoClient) -> AsyncDatabase:
    return client.get_default_database(default=get_settings().mongo.database)


async def _connect() -> AsyncMongoClient:
    settings = get_settings().mongo
    client = AsyncMongoClient(
        settings.uri,
        serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
        appname=settings.app_name,
    )
    try:
        await client.admin.command("ping")
        # Import here to avoid circular imports
        from eventhub.db.schema import _ensure_indexes

        await _ensure_indexes(_database_for(client))
    except BaseException:
        await client.close()
        raise
    _logger.info(
        "MongoDB connected (database=%s, server_selection_timeout=%dms)",
        _database_for(client).name,
        settings.server_selection_timeout_ms,
    )
    return client


def _settle(attempt: asyncio.Task) -> None:
    """Move a finished attempt to connected or back to unconnected."""
    global _client, _connecting
    error = None if attempt.cancelled() else attempt.exception()
    if _connecting is not attempt:
        return
    _connecting = None
    if attempt.cancelled():
        return
    if error is not None:
        _logger.warning("MongoDB connection error: %s", error)
        return
    _client = attempt.result()


async def get_client() -> AsyncMongoClient:
    """Return the shared client, connecting on first use.

    Concurrent first callers share a single connection attempt and receive
    the same client. The attempt settles on its own, so a caller that is
    cancelled while waiting does not leave it stranded.

    Raises:
        ConnectionFailure: The attempt failed. The next call retries.
        pydantic.ValidationError: ``MONGODB_URI`` is not configured.
    """
    global _connecting
    if _client is not None:
        return _client

    if _connecting is None:
        get_settings()
        _connecting = asyncio.ensure_future(_connect())
        _connecting.add_done_callback(_settle)
    attempt = _connecting

    try:
        return await asyncio.shield(attempt)
    except PyMongoError as exc:
        raise ConnectionFailure(detail=f"Could not connect to MongoDB: {exc}") from exc


async def get_database() -> AsyncDatabase:
    """Return the configured database on the shared client."""
    return _database_for(await get_client())


async def close_client() -> None:
    global _client, _connecting
    if _connecting is not None:
        _connecting.cancel()
        _connecting = None
    if _client is not None:
        await _client.close()
        _client = None
        _logger.info("MongoDB connection closed")


def get_connection_state() -> str:
    """Report ``unconnected``, ``connecting`` or ``connected``."""
    if _client is not None:
        return "connected"
    if _connecting is not None:
        return "connecting"
    return "unconnected"


__all__ = [
    "close_client",
    "get_client",
    "get_connection_state",
    "get_database",
]
