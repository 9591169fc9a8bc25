import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from eventhub.config import clear_settings_cache
from eventhub.db import core

TEST_URI = "mongodb://localhost:27017/eventhub_test"


class FakeCursor:

    def __init__(self, docs):
        self._docs = list(docs)
        self._iter = None

    def sort(self, key, direction=1):
        keys = key if isinstance(key, list) else [(key, direction)]
        for field, order in reversed(keys):
            self._docs.sort(key=lambda doc: doc.get(field), reverse=order < 0)
        return self

    def skip(self, n):
        self._docs = self._docs[n:]
        return self

    def limit(self, n):
        if n:
            self._docs = self._docs[:n]
        return self

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """Just enough of AsyncCollection for the stores, with unique indexes."""

    def __init__(self):
        self.docs = []
        self.unique = []
        self.indexes = []

    @staticmethod
    def _matches(doc, filt):
        return all(doc.get(key) == value for key, value in (filt or {}).items())

    def _check_unique(self, doc, exclude_id=None):
        for fields in self.unique:
            for other in self.docs:
                if other["_id"] == exclude_id:
                    continue
                if all(other.get(f) == doc.get(f) for f in fields):
                    raise DuplicateKeyError(f"E11000 duplicate key error: {fields}")

    async def create_index(self, keys, unique=False, name=None):
        self.indexes.append({"keys": keys, "unique": unique, "name": name})
        if unique:
            self.unique.append(tuple(field for field, _ in keys))
        return name

    async def insert_one(self, doc):
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(dict(doc))
        return MagicMock(inserted_id=doc["_id"])

    async def find_one(self, filt, projection=None):
        for doc in self.docs:
            if self._matches(doc, filt):
                if projection:
                    return {key: doc[key] for key in projection if key in doc}
                return dict(doc)
        return None

    async def find_one_and_update(self, filt, update, return_document=None):
        for doc in self.docs:
            if self._matches(doc, filt):
                self._check_unique({**doc, **update["$set"]}, exclude_id=doc["_id"])
                doc.update(update["$set"])
                return dict(doc)
        return None

    def find(self, filt=None):
        return FakeCursor(dict(doc) for doc in self.docs if self._matches(doc, filt))

    async def count_documents(self, filt):
        return sum(1 for doc in self.docs if self._matches(doc, filt))


class FakeDatabase:

    def __init__(self, name="eventhub_test"):
        self.name = name
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture(autouse=True)
def _isolated_state(monkeypatch):
    monkeypatch.setenv("MONGODB_URI", TEST_URI)
    clear_settings_cache()
    core._client = None
    core._connecting = None
    yield
    core._client = None
    core._connecting = None
    clear_settings_cache()


@pytest.fixture
def fake_db():
    """A FakeDatabase with indexes in place, served to both stores."""
    db = FakeDatabase()
    db["events"].unique.append(("slug",))
    db["bookings"].unique.append(("eventId", "email"))
    get_db = AsyncMock(return_value=db)
    with patch("eventhub.db.events.get_database", get_db), patch(
        "eventhub.db.bookings.get_database", get_db
    ):
        yield db


@pytest.fixture
def event_fields():
    return {
        "title": "PyCon Lightning Talks 2025",
        "description": "Five-minute talks on anything Python.",
        "overview": "An evening of short talks.",
        "image": "/images/pycon.png",
        "venue": "Main Hall",
        "location": "Berlin, Germany",
        "date": "2025-04-17",
        "time": "6:30 PM",
        "mode": "offline",
        "audience": "Developers",
        "agenda": ["Doors open", "Talks", "Wrap-up"],
        "organizer": "PyBerlin",
        "tags": ["python", "talks"],
    }


@pytest.fixture
def empty_db():
    return FakeDatabase()
