from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventMode(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    HYBRID = "hybrid"


class Event(BaseModel):
    """An event document as stored in the ``events`` collection."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(validation_alias="_id")
    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: EventMode
    audience: str
    agenda: list[str]
    organizer: str
    tags: list[str]
    created_at: datetime | None = Field(default=None, validation_alias="createdAt")
    updated_at: datetime | None = Field(default=None, validation_alias="updatedAt")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)

    @classmethod
    def from_document(cls, doc: dict) -> "Event":
        return cls.model_validate(doc)
