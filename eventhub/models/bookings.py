from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Booking(BaseModel):
    """A booking document as stored in the ``bookings`` collection."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(validation_alias="_id")
    event_id: str = Field(validation_alias="eventId")
    email: str
    created_at: datetime | None = Field(default=None, validation_alias="createdAt")
    updated_at: datetime | None = Field(default=None, validation_alias="updatedAt")

    @field_validator("id", "event_id", mode="before")
    @classmethod
    def stringify_object_id(cls, v):
        return str(v)

    @classmethod
    def from_document(cls, doc: dict) -> "Booking":
        return cls.model_validate(doc)
